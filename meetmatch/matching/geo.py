# meetmatch/matching/geo.py
"""
Great-circle distance between two coordinates.

Pure utility: no DB access, no side effects.
"""
from __future__ import annotations

import math
from typing import Optional

from meetmatch.models import Coordinate

EARTH_RADIUS_KM = 6371.0


def distance_km(a: Optional[Coordinate], b: Optional[Coordinate]) -> float:
    """
    Haversine distance in kilometers.

    Returns math.inf when either side is missing: callers must read that as
    "unknown", never as 0 km.
    """
    if a is None or b is None:
        return math.inf

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlmb = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c
