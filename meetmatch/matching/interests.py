# meetmatch/matching/interests.py
"""
Interest overlap between two interest collections.

Pure utility: deterministic, no DB access, no side effects.

Formula:
  reference, candidate -> lowercase + trim + dedupe
  matched    = reference ∩ candidate (in reference order)
  percentage = 100 * |matched| / |reference|
  score      = round(10 * |matched| + percentage)

An empty side is a neutral floor (all zeros), not an error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from meetmatch.matching.rounding import round_score


@dataclass(frozen=True)
class InterestOverlap:
    score: int = 0
    matched_interests: list[str] = field(default_factory=list)
    percentage: int = 0
    total_matches: int = 0


def normalize_interests(interests: Optional[Iterable[str]]) -> list[str]:
    """Lowercase, trim, drop blanks, collapse duplicates (first mention wins)."""
    if not interests:
        return []
    cleaned = (str(i).strip().lower() for i in interests if i is not None)
    return list(dict.fromkeys(i for i in cleaned if i))


def interest_overlap(
    reference: Optional[Iterable[str]],
    candidate: Optional[Iterable[str]],
) -> InterestOverlap:
    ref = normalize_interests(reference)
    cand = set(normalize_interests(candidate))
    if not ref or not cand:
        return InterestOverlap()

    matched = [i for i in ref if i in cand]
    percentage = 100.0 * len(matched) / len(ref)

    return InterestOverlap(
        score=round_score(10 * len(matched) + percentage),
        matched_interests=matched,
        percentage=round_score(percentage),
        total_matches=len(matched),
    )
