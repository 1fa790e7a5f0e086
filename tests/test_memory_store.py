# tests/test_memory_store.py
"""
In-process record store: reads, filters and atomic join/leave.
"""
from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from meetmatch.db.memory_store import MemoryStore
from meetmatch.db.store import ActivityFilter
from meetmatch.errors import (
    ActivityFullError,
    AlreadyJoinedError,
    CreatorCannotLeaveError,
    NotFoundError,
    NotParticipantError,
)


def _make_store(**activity_overrides) -> MemoryStore:
    activity = {
        "id": "a1",
        "title": "Bouldering",
        "creator_id": "host",
        "participant_ids": ["host"],
        "max_participants": 3,
        "status": "active",
    }
    activity.update(activity_overrides)
    return MemoryStore(
        users=[
            {"id": "host", "questionnaire_completed": True},
            {"id": "u1", "questionnaire_completed": True},
            {"id": "u2"},
        ],
        activities=[activity],
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

class TestReads:

    def test_fetch_missing_is_none(self):
        store = _make_store()
        assert store.fetch_user("nope") is None
        assert store.fetch_activity("nope") is None

    def test_fetch_users_filters(self):
        store = _make_store()
        assert {u.id for u in store.fetch_users(questionnaire_completed=True)} == {"host", "u1"}
        assert [u.id for u in store.fetch_users(ids=["u2", "ghost"])] == ["u2"]
        assert store.fetch_users(ids=[]) == []

    def test_fetch_activities_filters(self):
        store = _make_store()
        store.put_activity({"id": "a2", "status": "cancelled", "creator_id": "u1"})
        store.put_activity({
            "id": "a3", "status": "active",
            "date": datetime(2020, 1, 1, tzinfo=timezone.utc),
        })

        active = store.fetch_activities(ActivityFilter(status="active"))
        assert {a.id for a in active} == {"a1", "a3"}

        upcoming = store.fetch_activities(
            ActivityFilter(status="active", starts_after=datetime(2025, 1, 1, tzinfo=timezone.utc))
        )
        # undated activities are never "past"
        assert [a.id for a in upcoming] == ["a1"]

        assert [a.id for a in store.fetch_activities(ActivityFilter(creator_id="u1"))] == ["a2"]
        assert len(store.fetch_activities()) == 3


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

class TestJoinLeave:

    def test_join_updates_both_records(self):
        store = _make_store()

        activity = store.join_activity("a1", "u1")

        assert activity.participant_ids == ["host", "u1"]
        assert store.fetch_activity("a1").participant_ids == ["host", "u1"]
        assert store.fetch_user("u1").joined_activity_ids == ["a1"]

    def test_join_twice_rejected(self):
        store = _make_store()
        store.join_activity("a1", "u1")
        with pytest.raises(AlreadyJoinedError):
            store.join_activity("a1", "u1")

    def test_join_full_rejected(self):
        store = _make_store(max_participants=2)
        store.join_activity("a1", "u1")
        with pytest.raises(ActivityFullError):
            store.join_activity("a1", "u2")
        assert store.fetch_activity("a1").participant_count == 2

    def test_join_unknown_activity(self):
        with pytest.raises(NotFoundError):
            _make_store().join_activity("nope", "u1")

    def test_leave(self):
        store = _make_store()
        store.join_activity("a1", "u1")

        activity = store.leave_activity("a1", "u1")

        assert activity.participant_ids == ["host"]
        assert store.fetch_user("u1").joined_activity_ids == []

    def test_leave_not_participant(self):
        with pytest.raises(NotParticipantError):
            _make_store().leave_activity("a1", "u1")

    def test_creator_cannot_leave(self):
        with pytest.raises(CreatorCannotLeaveError):
            _make_store().leave_activity("a1", "host")

    def test_concurrent_joins_never_exceed_capacity(self):
        store = MemoryStore(activities=[{"id": "a1", "max_participants": 5}])
        successes: list[str] = []
        failures: list[Exception] = []
        barrier = threading.Barrier(20)

        def attempt(user_id: str) -> None:
            barrier.wait()
            try:
                store.join_activity("a1", user_id)
                successes.append(user_id)
            except ActivityFullError as e:
                failures.append(e)

        threads = [threading.Thread(target=attempt, args=(f"u{i}",)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(successes) == 5
        assert len(failures) == 15
        assert sorted(store.fetch_activity("a1").participant_ids) == sorted(successes)


def test_naive_starts_after_read_as_utc():
    store = MemoryStore(activities=[
        {"id": "early", "date": datetime(2026, 3, 1, 11, 0, tzinfo=timezone.utc)},
        {"id": "late", "date": datetime(2026, 3, 1, 13, 0, tzinfo=timezone.utc)},
    ])
    result = store.fetch_activities(ActivityFilter(starts_after=datetime(2026, 3, 1, 12, 0)))
    assert [a.id for a in result] == ["late"]
