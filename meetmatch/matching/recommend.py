# meetmatch/matching/recommend.py
"""
Activity recommendation pipeline: filter -> score -> select.

Pure over already-fetched records; re-run on every request (scores depend
on `now` and on live participant counts, so nothing is cached).

Filter stage, in order (first failing predicate is the recorded reason):
  past            activity.date < now           (only if exclude_past)
  own_activity    activity.creator_id == user.id
  already_joined  activity.id in user.joined_activity_ids (only if exclude_joined)
  full            participants >= max_participants

Selection stage: drop total_score < min_score, stable sort descending by
total_score (ties keep candidate order), truncate to limit.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from meetmatch.matching.scoring import ScoreBreakdown, compatibility_label, score_activity
from meetmatch.matching.temporal import as_utc
from meetmatch.models import ActivityRecord, RecommendOptions, UserRecord

logger = logging.getLogger(__name__)

REASON_PAST = "past"
REASON_OWN = "own_activity"
REASON_JOINED = "already_joined"
REASON_FULL = "full"
REASON_BELOW_MIN_SCORE = "below_min_score"


@dataclass(frozen=True)
class RankedActivity:
    activity: ActivityRecord
    breakdown: ScoreBreakdown
    compatibility_label: str

    @property
    def total_score(self) -> int:
        return self.breakdown.total_score

    def as_dict(self) -> dict[str, Any]:
        return {
            "activity": self.activity.model_dump(mode="json"),
            "match": self.breakdown.as_dict(),
            "compatibility_label": self.compatibility_label,
        }


def exclusion_reason(
    user: UserRecord,
    activity: ActivityRecord,
    now: datetime,
    options: RecommendOptions,
    joined_ids: Optional[set[str]] = None,
) -> Optional[str]:
    """Return why a candidate is filtered out, or None if it survives."""
    if options.exclude_past and activity.date is not None and activity.date < now:
        return REASON_PAST
    if activity.creator_id is not None and activity.creator_id == user.id:
        return REASON_OWN
    if options.exclude_joined:
        joined = joined_ids if joined_ids is not None else set(user.joined_activity_ids)
        if activity.id in joined:
            return REASON_JOINED
    if activity.is_full:
        return REASON_FULL
    return None


def recommend(
    user: UserRecord,
    candidates: Iterable[ActivityRecord],
    now: Optional[datetime] = None,
    options: Optional[RecommendOptions] = None,
) -> list[RankedActivity]:
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    options = options or RecommendOptions()
    joined_ids = set(user.joined_activity_ids)

    excluded: Counter[str] = Counter()
    seen = 0
    scored: list[RankedActivity] = []

    for activity in candidates:
        seen += 1
        reason = exclusion_reason(user, activity, now, options, joined_ids)
        if reason:
            excluded[reason] += 1
            continue

        breakdown = score_activity(user, activity, now)
        if breakdown.total_score < options.min_score:
            excluded[REASON_BELOW_MIN_SCORE] += 1
            continue

        scored.append(
            RankedActivity(
                activity=activity,
                breakdown=breakdown,
                compatibility_label=compatibility_label(breakdown.interest_match.percentage),
            )
        )

    # sorted() is stable: equal scores keep candidate order
    ranked = sorted(scored, key=lambda r: r.total_score, reverse=True)[: options.limit]

    logger.info(
        "[recommend][summary] user_id=%s candidates=%d past=%d own_activity=%d "
        "already_joined=%d full=%d below_min_score=%d qualified=%d returned=%d",
        user.id, seen,
        excluded[REASON_PAST], excluded[REASON_OWN], excluded[REASON_JOINED],
        excluded[REASON_FULL], excluded[REASON_BELOW_MIN_SCORE],
        len(scored), len(ranked),
    )
    return ranked
