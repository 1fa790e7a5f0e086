# meetmatch/service.py
"""
Entry points: fetch records from a store, run the pure ranking core.

Every call takes the store explicitly (no ambient "current user" cache).
Errors:
  NotFoundError      unknown user / activity id (distinct from "no matches")
  InvalidInputError  options outside their domain, malformed reference records
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from meetmatch import config
from meetmatch.db.store import ActivityFilter, RecordStore
from meetmatch.errors import NotFoundError
from meetmatch.matching.recommend import RankedActivity, recommend
from meetmatch.matching.scoring import ScoreBreakdown, score_activity
from meetmatch.matching.temporal import as_utc
from meetmatch.matching.users import (
    MatchExplanation,
    ParticipantMatch,
    RankedUser,
    explain_match,
    match_users,
    matched_participants,
)
from meetmatch.models import (
    ActivityRecord,
    MatchOptions,
    RecommendOptions,
    UserRecord,
    coerce_options,
)

logger = logging.getLogger(__name__)

__all__ = [
    "recommend_activities",
    "recommend_users",
    "score_activity",
    "score_activity_for",
    "explain_user_match",
    "rank_activity_participants",
    "join_activity",
    "leave_activity",
]


def _require_user(store: RecordStore, user_id: str) -> UserRecord:
    user = store.fetch_user(user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return user


def _require_activity(store: RecordStore, activity_id: str) -> ActivityRecord:
    activity = store.fetch_activity(activity_id)
    if activity is None:
        raise NotFoundError("activity", activity_id)
    return activity


def recommend_activities(
    user_id: str,
    options: Union[RecommendOptions, Mapping[str, Any], None] = None,
    *,
    store: RecordStore,
    now: Optional[datetime] = None,
) -> list[RankedActivity]:
    opts = coerce_options(RecommendOptions, options)
    user = _require_user(store, user_id)
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)

    candidates = store.fetch_activities(
        ActivityFilter(
            status=config.ACTIVE_STATUS,
            starts_after=now if opts.exclude_past else None,
        )
    )
    return recommend(user, candidates, now, opts)


def recommend_users(
    user_id: str,
    options: Union[MatchOptions, Mapping[str, Any], None] = None,
    *,
    store: RecordStore,
) -> list[RankedUser]:
    opts = coerce_options(MatchOptions, options)
    user = _require_user(store, user_id)

    # Only users who finished the questionnaire are matchable
    candidates = store.fetch_users(questionnaire_completed=True)
    ranked = match_users(user, candidates, opts)

    logger.info(
        "[recommend_users][summary] user_id=%s candidates=%d returned=%d",
        user_id, len(candidates), len(ranked),
    )
    return ranked


def score_activity_for(
    user_id: str,
    activity_id: str,
    *,
    store: RecordStore,
    now: Optional[datetime] = None,
) -> ScoreBreakdown:
    """Single-item score for a detail view."""
    user = _require_user(store, user_id)
    activity = _require_activity(store, activity_id)
    return score_activity(user, activity, now)


def explain_user_match(
    user_id: str,
    other_user_id: str,
    *,
    store: RecordStore,
) -> MatchExplanation:
    return explain_match(_require_user(store, user_id), _require_user(store, other_user_id))


def rank_activity_participants(
    activity_id: str,
    user_id: str,
    *,
    store: RecordStore,
) -> list[ParticipantMatch]:
    activity = _require_activity(store, activity_id)
    user = _require_user(store, user_id)
    others = [p for p in activity.participant_ids if p != user_id]
    participants = store.fetch_users(ids=others)
    return matched_participants(user, activity, participants)


def join_activity(activity_id: str, user_id: str, *, store: RecordStore) -> ActivityRecord:
    _require_user(store, user_id)
    activity = store.join_activity(activity_id, user_id)
    logger.info(
        "[membership] JOIN activity_id=%s user_id=%s participants=%d/%s",
        activity_id, user_id, activity.participant_count, activity.max_participants,
    )
    return activity


def leave_activity(activity_id: str, user_id: str, *, store: RecordStore) -> ActivityRecord:
    activity = store.leave_activity(activity_id, user_id)
    logger.info(
        "[membership] LEAVE activity_id=%s user_id=%s participants=%d/%s",
        activity_id, user_id, activity.participant_count, activity.max_participants,
    )
    return activity
