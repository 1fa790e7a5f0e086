# meetmatch/db/supabase_store.py
"""
Supabase adapter for the record store.

Reads go through PostgREST table queries (paginated, retried on transient
transport errors). Join/leave go through database RPCs so the capacity
check and the participant write happen in one transaction:

  public.join_activity_v1(p_activity_id text, p_user_id text)  -> activities row
  public.leave_activity_v1(p_activity_id text, p_user_id text) -> activities row

The RPCs raise with one of the stable error tokens in MEMBERSHIP_ERRORS
(see sql/001_membership_rpcs.sql).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

from postgrest.exceptions import APIError
from supabase import Client

from meetmatch import config
from meetmatch.db.store import ActivityFilter
from meetmatch.db.supabase_client import execute_with_retry, get_supabase_client
from meetmatch.errors import (
    ActivityFullError,
    AlreadyJoinedError,
    CreatorCannotLeaveError,
    InvalidInputError,
    MembershipError,
    NotFoundError,
    NotParticipantError,
)
from meetmatch.matching.temporal import as_utc
from meetmatch.models import ActivityRecord, UserRecord, parse_record

logger = logging.getLogger(__name__)

PAGE_SIZE = 500

MEMBERSHIP_ERRORS: dict[str, Type[MembershipError]] = {
    "activity_full": ActivityFullError,
    "already_joined": AlreadyJoinedError,
    "not_participant": NotParticipantError,
    "creator_cannot_leave": CreatorCannotLeaveError,
}
ACTIVITY_NOT_FOUND = "activity_not_found"

R = TypeVar("R", UserRecord, ActivityRecord)


def _extract_postgrest_error(e: APIError) -> dict[str, Any]:
    """
    Normalize PostgREST APIError across versions.
    We try to recover the dict that contains: message, code, details, hint.
    """
    if getattr(e, "args", None) and len(e.args) >= 1 and isinstance(e.args[0], dict):
        return e.args[0]
    raw = getattr(e, "_raw_error", None)
    if isinstance(raw, dict):
        return raw
    return {
        "message": getattr(e, "message", None) or str(e),
        "code": getattr(e, "code", None),
        "details": getattr(e, "details", None),
        "hint": getattr(e, "hint", None),
    }


def _error_token(err: Mapping[str, Any]) -> str:
    text = " ".join(str(err.get(k) or "") for k in ("message", "details", "hint"))
    return text.lower()


def _iso(dt: datetime) -> str:
    """UTC, second precision, Z suffix (no "+" to escape inside or=(...))."""
    return as_utc(dt).astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class SupabaseStore:
    """Remote document-store variant of the record store."""

    def __init__(
        self,
        client: Client,
        *,
        users_table: str = config.USERS_TABLE,
        activities_table: str = config.ACTIVITIES_TABLE,
    ) -> None:
        self.client = client
        self.users_table = users_table
        self.activities_table = activities_table

    @classmethod
    def from_env(cls) -> "SupabaseStore":
        return cls(get_supabase_client())

    # -------------------------------------------------------------------------
    # Row helpers
    # -------------------------------------------------------------------------

    def _fetch_one(self, table: str, model: Type[R], record_id: str) -> Optional[R]:
        resp = execute_with_retry(
            self.client.table(table).select("*").eq("id", record_id).limit(1)
        )
        rows = resp.data or []
        if not rows:
            return None
        return parse_record(model, rows[0])

    def _fetch_all(self, query_factory: Any, model: Type[R]) -> list[R]:
        """Page through a query; malformed candidate rows are skipped, not fatal."""
        records: list[R] = []
        offset = 0
        while True:
            resp = execute_with_retry(query_factory().range(offset, offset + PAGE_SIZE - 1))
            rows = resp.data or []
            for row in rows:
                try:
                    records.append(parse_record(model, row))
                except InvalidInputError as e:
                    logger.warning("[supabase_store] SKIP malformed %s row id=%s: %s",
                                   model.__name__, row.get("id"), e)
            if len(rows) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        return records

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def fetch_user(self, user_id: str) -> Optional[UserRecord]:
        return self._fetch_one(self.users_table, UserRecord, user_id)

    def fetch_users(
        self,
        *,
        ids: Optional[Sequence[str]] = None,
        questionnaire_completed: Optional[bool] = None,
    ) -> list[UserRecord]:
        if ids is not None and not ids:
            return []

        def query() -> Any:
            q = self.client.table(self.users_table).select("*")
            if ids is not None:
                q = q.in_("id", list(ids))
            if questionnaire_completed is not None:
                q = q.eq("questionnaire_completed", questionnaire_completed)
            return q.order("id")

        return self._fetch_all(query, UserRecord)

    def fetch_activity(self, activity_id: str) -> Optional[ActivityRecord]:
        return self._fetch_one(self.activities_table, ActivityRecord, activity_id)

    def fetch_activities(self, activity_filter: Optional[ActivityFilter] = None) -> list[ActivityRecord]:
        f = activity_filter or ActivityFilter()
        if f.ids is not None and not f.ids:
            return []

        def query() -> Any:
            q = self.client.table(self.activities_table).select("*")
            if f.status:
                q = q.eq("status", f.status)
            if f.creator_id:
                q = q.eq("creator_id", f.creator_id)
            if f.starts_after is not None:
                # undated activities are never past
                q = q.or_(f"date.gte.{_iso(f.starts_after)},date.is.null")
            if f.ids is not None:
                q = q.in_("id", list(f.ids))
            return q.order("date").order("id")

        return self._fetch_all(query, ActivityRecord)

    # -------------------------------------------------------------------------
    # Membership (atomic in the database)
    # -------------------------------------------------------------------------

    def _membership_rpc(self, fn: str, activity_id: str, user_id: str) -> ActivityRecord:
        try:
            resp = self.client.rpc(
                fn, {"p_activity_id": activity_id, "p_user_id": user_id}
            ).execute()
        except APIError as e:
            err = _extract_postgrest_error(e)
            token = _error_token(err)
            if ACTIVITY_NOT_FOUND in token:
                raise NotFoundError("activity", activity_id) from e
            for key, exc_cls in MEMBERSHIP_ERRORS.items():
                if key in token:
                    raise exc_cls(activity_id, user_id) from e
            logger.error("[supabase_store] %s FAILED activity_id=%s user_id=%s: %r",
                         fn, activity_id, user_id, err)
            raise

        data = resp.data
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, Mapping):
            return parse_record(ActivityRecord, data)

        activity = self.fetch_activity(activity_id)
        if activity is None:
            raise NotFoundError("activity", activity_id)
        return activity

    def join_activity(self, activity_id: str, user_id: str) -> ActivityRecord:
        return self._membership_rpc("join_activity_v1", activity_id, user_id)

    def leave_activity(self, activity_id: str, user_id: str) -> ActivityRecord:
        return self._membership_rpc("leave_activity_v1", activity_id, user_id)
