# meetmatch/matching/rounding.py
"""
Half-up rounding used for every reported score.

Python's round() is banker's rounding (round(12.5) == 12);
reported scores round half-up (12.5 -> 13).
"""
from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    return int(math.floor(value + 0.5))
