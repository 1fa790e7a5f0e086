# meetmatch/db/memory_store.py
"""
In-process record store (local cache variant).

Same contract as SupabaseStore. Join/leave run under one lock so capacity
checks and participant writes cannot interleave.
"""
from __future__ import annotations

import threading
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from meetmatch.db.store import ActivityFilter
from meetmatch.errors import (
    ActivityFullError,
    AlreadyJoinedError,
    CreatorCannotLeaveError,
    NotFoundError,
    NotParticipantError,
)
from meetmatch.matching.temporal import as_utc
from meetmatch.models import ActivityRecord, UserRecord, parse_record

UserInput = Union[UserRecord, Mapping[str, Any]]
ActivityInput = Union[ActivityRecord, Mapping[str, Any]]


class MemoryStore:
    def __init__(
        self,
        users: Iterable[UserInput] = (),
        activities: Iterable[ActivityInput] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, UserRecord] = {}
        self._activities: dict[str, ActivityRecord] = {}
        for u in users:
            self.put_user(u)
        for a in activities:
            self.put_activity(a)

    def put_user(self, user: UserInput) -> UserRecord:
        record = parse_record(UserRecord, user)
        with self._lock:
            self._users[record.id] = record
        return record

    def put_activity(self, activity: ActivityInput) -> ActivityRecord:
        record = parse_record(ActivityRecord, activity)
        with self._lock:
            self._activities[record.id] = record
        return record

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def fetch_user(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def fetch_users(
        self,
        *,
        ids: Optional[Sequence[str]] = None,
        questionnaire_completed: Optional[bool] = None,
    ) -> list[UserRecord]:
        users = list(self._users.values())
        if ids is not None:
            wanted = set(ids)
            users = [u for u in users if u.id in wanted]
        if questionnaire_completed is not None:
            users = [u for u in users if u.questionnaire_completed == questionnaire_completed]
        return users

    def fetch_activity(self, activity_id: str) -> Optional[ActivityRecord]:
        return self._activities.get(activity_id)

    def fetch_activities(self, activity_filter: Optional[ActivityFilter] = None) -> list[ActivityRecord]:
        f = activity_filter or ActivityFilter()
        starts_after = as_utc(f.starts_after) if f.starts_after is not None else None
        out = []
        for a in self._activities.values():
            if f.status and (a.status or "").lower() != f.status.lower():
                continue
            if f.creator_id and a.creator_id != f.creator_id:
                continue
            if starts_after is not None and a.date is not None and a.date < starts_after:
                continue
            if f.ids is not None and a.id not in f.ids:
                continue
            out.append(a)
        return out

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def join_activity(self, activity_id: str, user_id: str) -> ActivityRecord:
        with self._lock:
            activity = self._activities.get(activity_id)
            if activity is None:
                raise NotFoundError("activity", activity_id)
            if user_id in activity.participant_ids:
                raise AlreadyJoinedError(activity_id, user_id)
            if activity.is_full:
                raise ActivityFullError(activity_id, user_id)

            updated = activity.model_copy(
                update={"participant_ids": [*activity.participant_ids, user_id]}
            )
            self._activities[activity_id] = updated

            user = self._users.get(user_id)
            if user is not None and activity_id not in user.joined_activity_ids:
                self._users[user_id] = user.model_copy(
                    update={"joined_activity_ids": [*user.joined_activity_ids, activity_id]}
                )
            return updated

    def leave_activity(self, activity_id: str, user_id: str) -> ActivityRecord:
        with self._lock:
            activity = self._activities.get(activity_id)
            if activity is None:
                raise NotFoundError("activity", activity_id)
            if activity.creator_id == user_id:
                raise CreatorCannotLeaveError(activity_id, user_id)
            if user_id not in activity.participant_ids:
                raise NotParticipantError(activity_id, user_id)

            updated = activity.model_copy(
                update={"participant_ids": [p for p in activity.participant_ids if p != user_id]}
            )
            self._activities[activity_id] = updated

            user = self._users.get(user_id)
            if user is not None:
                self._users[user_id] = user.model_copy(
                    update={"joined_activity_ids": [
                        a for a in user.joined_activity_ids if a != activity_id
                    ]}
                )
            return updated
