# meetmatch/matching/scoring.py
"""
Deterministic (user, activity) scoring.

Pure utility: no DB access, no side effects. Same inputs and same `now`
always produce the same breakdown.

Weights (sum = 1.0):
  interests   0.45   min(100, interest overlap score)
  distance    0.25   100 - 2 per km (floor 0), unknown distance -> 0
  time        0.15   temporal relevance curve (see temporal.py)
  popularity  0.10   min(100, 150 * participants / max_participants)
  recency     0.05   100 - 10 per day since creation (floor 0)

total_score is the rounded weighted sum of the unrounded sub-scores; each
sub-score is rounded separately for reporting.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from meetmatch.matching.geo import distance_km
from meetmatch.matching.interests import InterestOverlap, interest_overlap
from meetmatch.matching.rounding import round_half_up, round_score
from meetmatch.matching.temporal import days_between, time_score
from meetmatch.models import ActivityRecord, UserRecord


# ---------------------------------------------------------------------------
# Scoring rules
# ---------------------------------------------------------------------------

WEIGHTS: dict[str, float] = {
    "interests": 0.45,
    "distance": 0.25,
    "time": 0.15,
    "popularity": 0.10,
    "recency": 0.05,
}

DEFAULT_MAX_PARTICIPANTS = 20
DISTANCE_PENALTY_PER_KM = 2.0
POPULARITY_MULTIPLIER = 150.0
RECENCY_PENALTY_PER_DAY = 10.0

# (min_percentage, label), checked top-down
COMPATIBILITY_LABELS: list[tuple[int, str]] = [
    (80, "Excellent Match"),
    (60, "Great Match"),
    (40, "Good Match"),
    (20, "Moderate Match"),
]
FALLBACK_LABEL = "Some Common Interests"


@dataclass(frozen=True)
class ScoreBreakdown:
    activity_id: str
    interest_score: int
    distance_score: int
    time_score: int
    popularity_score: int
    recency_score: int
    total_score: int
    matched_interests: list[str] = field(default_factory=list)
    interest_match: InterestOverlap = field(default_factory=InterestOverlap)
    distance_km: Optional[float] = None  # None = location unknown on either side
    days_until: Optional[int] = None     # None = activity has no date

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------

def distance_score(km: float) -> float:
    if math.isinf(km):
        return 0.0
    return max(0.0, 100.0 - km * DISTANCE_PENALTY_PER_KM)


def popularity_score(activity: ActivityRecord) -> float:
    max_participants = activity.max_participants or DEFAULT_MAX_PARTICIPANTS
    ratio = activity.participant_count / max_participants
    return min(100.0, ratio * POPULARITY_MULTIPLIER)


def recency_score(created_at: Optional[datetime], now: datetime) -> float:
    if created_at is None:
        return 0.0
    days_old = days_between(created_at, now)
    # created_at slightly ahead of now (clock skew) still caps at 100
    return min(100.0, max(0.0, 100.0 - days_old * RECENCY_PENALTY_PER_DAY))


def compatibility_label(percentage: float) -> str:
    for threshold, label in COMPATIBILITY_LABELS:
        if percentage >= threshold:
            return label
    return FALLBACK_LABEL


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def score_activity(
    user: UserRecord,
    activity: ActivityRecord,
    now: Optional[datetime] = None,
) -> ScoreBreakdown:
    """
    Score one activity for one user.

    Never raises on incomplete records: missing interests, location, date
    or created_at fall back to the zero sub-score for that axis.
    """
    now = now or datetime.now(timezone.utc)

    overlap = interest_overlap(user.interests, activity.interests)
    interest = min(100.0, float(overlap.score))

    km = distance_km(user.location, activity.location)
    distance = distance_score(km)

    timing = time_score(activity.date, now)
    popularity = popularity_score(activity)
    recency = recency_score(activity.created_at, now)

    total = (
        interest * WEIGHTS["interests"]
        + distance * WEIGHTS["distance"]
        + timing * WEIGHTS["time"]
        + popularity * WEIGHTS["popularity"]
        + recency * WEIGHTS["recency"]
    )

    days_until = None
    if activity.date is not None:
        days_until = round_score(days_between(now, activity.date))

    return ScoreBreakdown(
        activity_id=activity.id,
        interest_score=round_score(interest),
        distance_score=round_score(distance),
        time_score=round_score(timing),
        popularity_score=round_score(popularity),
        recency_score=round_score(recency),
        total_score=round_score(total),
        matched_interests=list(overlap.matched_interests),
        interest_match=overlap,
        distance_km=None if math.isinf(km) else round_half_up(km, 1),
        days_until=days_until,
    )
