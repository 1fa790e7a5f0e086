# meetmatch/matching/preferences.py
"""
Questionnaire preference compatibility between two users (0-100).

Pure utility: no DB access, no side effects.

Each axis present on BOTH profiles contributes one factor:
  social_style          lookup on the sorted pair, unknown pairs -> 50
  activity_level        100 - 30 per ordinal step (floor 0)
  budget_level          'flexible' on either side -> 90, else 100 - 25 per step;
                        an unrecognised value scores 0 (other axes skip it)
  time_preference       equal or 'flexible' on either side -> 100, else 60
  day_preference        equal or 'both' on either side -> 100, else 50
  preferred_group_size  100 - 25 per ordinal step (floor 0)

Result = round(mean of factors). A missing profile, or no shared axis,
returns the neutral 50 so incomplete questionnaires are not penalized.
"""
from __future__ import annotations

from typing import Optional, Sequence

from meetmatch.matching.rounding import round_score
from meetmatch.models import PreferenceProfile

NEUTRAL_COMPATIBILITY = 50


# ---------------------------------------------------------------------------
# Axis vocabularies
# ---------------------------------------------------------------------------

SOCIAL_STYLE_SCORES: dict[str, int] = {
    "extroverted-extroverted": 100,
    "introverted-introverted": 100,
    "ambivert-extroverted": 80,
    "balanced-extroverted": 75,
    "ambivert-introverted": 80,
    "balanced-introverted": 75,
    "balanced-balanced": 90,
    "ambivert-ambivert": 95,
    "extroverted-introverted": 40,
}

ACTIVITY_LEVELS: tuple[str, ...] = (
    "sedentary", "lightly_active", "moderately_active", "very_active",
)
BUDGET_LEVELS: tuple[str, ...] = ("low", "medium", "high")
GROUP_SIZES: tuple[str, ...] = ("small", "medium", "large")

FLEXIBLE_BUDGET = "flexible"
FLEXIBLE_BUDGET_SCORE = 90
FLEXIBLE_TIME = "flexible"
TIME_MISMATCH_SCORE = 60
BOTH_DAYS = "both"
DAY_MISMATCH_SCORE = 50


# ---------------------------------------------------------------------------
# Per-axis scores (None = axis does not apply)
# ---------------------------------------------------------------------------

def _ordinal_score(
    a: str, b: str, levels: Sequence[str], step_penalty: int,
) -> Optional[int]:
    if a not in levels or b not in levels:
        return None
    diff = abs(levels.index(a) - levels.index(b))
    return max(0, 100 - diff * step_penalty)


def social_style_score(a: str, b: str) -> int:
    key = "-".join(sorted((a, b)))
    return SOCIAL_STYLE_SCORES.get(key, NEUTRAL_COMPATIBILITY)


def budget_score(a: str, b: str) -> int:
    """Unlike the other ordinal axes, an unrecognised budget still counts, as 0."""
    if a == FLEXIBLE_BUDGET or b == FLEXIBLE_BUDGET:
        return FLEXIBLE_BUDGET_SCORE
    score = _ordinal_score(a, b, BUDGET_LEVELS, 25)
    return 0 if score is None else score


def time_preference_score(a: str, b: str) -> int:
    if a == b or FLEXIBLE_TIME in (a, b):
        return 100
    return TIME_MISMATCH_SCORE


def day_preference_score(a: str, b: str) -> int:
    if a == b or BOTH_DAYS in (a, b):
        return 100
    return DAY_MISMATCH_SCORE


def times_compatible(a: Optional[PreferenceProfile], b: Optional[PreferenceProfile]) -> bool:
    """Both users stated a time preference and it scores full marks."""
    if a is None or b is None or not a.time_preference or not b.time_preference:
        return False
    return time_preference_score(a.time_preference, b.time_preference) == 100


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def preference_compatibility(
    a: Optional[PreferenceProfile],
    b: Optional[PreferenceProfile],
) -> int:
    if a is None or b is None:
        return NEUTRAL_COMPATIBILITY

    factors: list[int] = []

    if a.social_style and b.social_style:
        factors.append(social_style_score(a.social_style, b.social_style))

    axes = (
        (a.activity_level, b.activity_level,
         lambda x, y: _ordinal_score(x, y, ACTIVITY_LEVELS, 30)),
        (a.budget_level, b.budget_level, budget_score),
        (a.time_preference, b.time_preference, time_preference_score),
        (a.day_preference, b.day_preference, day_preference_score),
        (a.preferred_group_size, b.preferred_group_size,
         lambda x, y: _ordinal_score(x, y, GROUP_SIZES, 25)),
    )
    for left, right, score_fn in axes:
        if not left or not right:
            continue
        value = score_fn(left, right)
        if value is not None:
            factors.append(value)

    if not factors:
        return NEUTRAL_COMPATIBILITY
    return round_score(sum(factors) / len(factors))
