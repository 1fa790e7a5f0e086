# tests/test_temporal_relevance.py
"""Temporal relevance curve breakpoints."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from meetmatch.matching.temporal import days_between, time_score, time_score_for_days

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _score(days: float) -> float:
    return time_score(NOW + timedelta(days=days), NOW)


@pytest.mark.parametrize(
    "days,expected",
    [
        (-1, 0.0),
        (0, 50.0),
        (1, 75.0),
        (2, 100.0),
        (7, 100.0),
        (14, 100.0),
        (20, 70.0),
        (34, 0.0),
        (60, 0.0),
    ],
)
def test_breakpoints(days, expected):
    assert _score(days) == pytest.approx(expected)


def test_past_by_one_minute_is_zero():
    assert time_score(NOW - timedelta(minutes=1), NOW) == 0.0


def test_continuous_at_window_edges():
    assert time_score_for_days(2 - 1e-9) == pytest.approx(100.0, abs=1e-6)
    assert time_score_for_days(14 + 1e-9) == pytest.approx(100.0, abs=1e-6)


def test_missing_date_is_zero():
    assert time_score(None, NOW) == 0.0


def test_naive_datetimes_read_as_utc():
    naive = datetime(2026, 3, 8, 12, 0)
    assert days_between(NOW, naive) == pytest.approx(7.0)
