# meetmatch/db/store.py
"""
Storage collaborator contract.

The ranking core only reads records. Join/leave are owned by the store,
which must enforce capacity atomically per activity:
  - join rejects when already joined or when it would exceed max_participants
  - leave rejects the creator and non-participants
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence

from meetmatch.models import ActivityRecord, UserRecord


@dataclass(frozen=True)
class ActivityFilter:
    status: Optional[str] = None
    creator_id: Optional[str] = None
    starts_after: Optional[datetime] = None  # push-down hint; ranking still filters past
    ids: Optional[Sequence[str]] = None


class RecordStore(Protocol):
    def fetch_user(self, user_id: str) -> Optional[UserRecord]: ...

    def fetch_users(
        self,
        *,
        ids: Optional[Sequence[str]] = None,
        questionnaire_completed: Optional[bool] = None,
    ) -> list[UserRecord]: ...

    def fetch_activity(self, activity_id: str) -> Optional[ActivityRecord]: ...

    def fetch_activities(self, activity_filter: Optional[ActivityFilter] = None) -> list[ActivityRecord]: ...

    def join_activity(self, activity_id: str, user_id: str) -> ActivityRecord: ...

    def leave_activity(self, activity_id: str, user_id: str) -> ActivityRecord: ...
