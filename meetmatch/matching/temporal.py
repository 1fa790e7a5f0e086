# meetmatch/matching/temporal.py
"""
Temporal relevance of an activity date relative to "now".

Piecewise-linear, continuous curve over days_until (fractional days):

  days_until < 0          -> 0            (past)
  0 <= days_until < 2     -> 50 .. 100    (ramp up, too soon)
  2 <= days_until <= 14   -> 100          (sweet spot)
  days_until > 14         -> 100 - 5 * (days_until - 14), floor 0
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 86_400.0

SWEET_SPOT_START_DAYS = 2.0
SWEET_SPOT_END_DAYS = 14.0
SOON_FLOOR = 50.0
DECAY_PER_DAY = 5.0


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def days_between(start: datetime, end: datetime) -> float:
    """(end - start) in fractional days. Naive datetimes are read as UTC."""
    return (as_utc(end) - as_utc(start)).total_seconds() / SECONDS_PER_DAY


def time_score_for_days(days_until: float) -> float:
    if days_until < 0:
        return 0.0
    if SWEET_SPOT_START_DAYS <= days_until <= SWEET_SPOT_END_DAYS:
        return 100.0
    if days_until < SWEET_SPOT_START_DAYS:
        return SOON_FLOOR + (days_until / SWEET_SPOT_START_DAYS) * (100.0 - SOON_FLOOR)
    return max(0.0, 100.0 - (days_until - SWEET_SPOT_END_DAYS) * DECAY_PER_DAY)


def time_score(activity_date: Optional[datetime], now: datetime) -> float:
    """Temporal relevance 0-100. An undated activity is never relevant."""
    if activity_date is None:
        return 0.0
    return time_score_for_days(days_between(now, activity_date))
