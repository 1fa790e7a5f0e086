# tests/test_service.py
"""
Entry points over a MemoryStore: lookups, option validation, wiring.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from meetmatch.db.memory_store import MemoryStore
from meetmatch.errors import ActivityFullError, InvalidInputError, NotFoundError
from meetmatch.service import (
    explain_user_match,
    join_activity,
    leave_activity,
    rank_activity_participants,
    recommend_activities,
    recommend_users,
    score_activity,
    score_activity_for,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
MARINA = {"lat": 1.3521, "lng": 103.8198}


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore(
        users=[
            {
                "id": "u1", "interests": ["hiking", "yoga"], "location": MARINA,
                "questionnaire_completed": True,
                "preferences": {"socialStyle": "extroverted"},
            },
            {
                "id": "u2", "interests": ["hiking"], "questionnaire_completed": True,
                "preferences": {"socialStyle": "extroverted"},
            },
            {"id": "u3", "interests": ["hiking", "yoga"], "questionnaire_completed": False},
        ],
        activities=[
            {
                "id": "a1", "title": "Ridge walk", "interests": ["hiking"],
                "date": NOW + timedelta(days=3), "location": MARINA,
                "max_participants": 3, "participant_ids": ["u2", "u3"],
                "creator_id": "u2", "created_at": NOW, "status": "active",
            },
            {
                "id": "a2", "title": "Old walk", "interests": ["hiking"],
                "date": NOW - timedelta(days=3), "location": MARINA,
                "creator_id": "u2", "created_at": NOW - timedelta(days=5), "status": "active",
            },
            {
                "id": "a3", "title": "Cancelled yoga", "interests": ["yoga"],
                "date": NOW + timedelta(days=3), "location": MARINA,
                "creator_id": "u2", "created_at": NOW, "status": "cancelled",
            },
        ],
    )


class TestRecommendActivities:

    def test_only_active_upcoming(self, store):
        ranked = recommend_activities("u1", store=store, now=NOW)
        assert [r.activity.id for r in ranked] == ["a1"]

    def test_unknown_user(self, store):
        with pytest.raises(NotFoundError) as info:
            recommend_activities("ghost", store=store, now=NOW)
        assert info.value.kind == "user"
        assert info.value.record_id == "ghost"

    def test_invalid_options_fail_before_lookup(self, store):
        with pytest.raises(InvalidInputError):
            recommend_activities("ghost", {"limit": -1}, store=store, now=NOW)

    def test_no_activities_is_empty(self):
        store = MemoryStore(users=[{"id": "u1"}])
        assert recommend_activities("u1", store=store, now=NOW) == []

    def test_naive_now_read_as_utc(self, store):
        ranked = recommend_activities("u1", store=store, now=NOW.replace(tzinfo=None))
        assert [r.activity.id for r in ranked] == ["a1"]
        assert ranked[0].breakdown.days_until == 3


class TestRecommendUsers:

    def test_only_completed_questionnaires(self, store):
        ranked = recommend_users("u1", store=store)
        assert [r.user.id for r in ranked] == ["u2"]

    def test_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            recommend_users("ghost", store=store)

    def test_invalid_options(self, store):
        with pytest.raises(InvalidInputError):
            recommend_users("u1", {"minPreferenceScore": 101}, store=store)


class TestSingleScores:

    def test_score_activity_for(self, store):
        b = score_activity_for("u1", "a1", store=store, now=NOW)
        assert b.activity_id == "a1"
        assert b == score_activity(store.fetch_user("u1"), store.fetch_activity("a1"), NOW)

    def test_score_activity_for_unknown_activity(self, store):
        with pytest.raises(NotFoundError) as info:
            score_activity_for("u1", "nope", store=store, now=NOW)
        assert info.value.kind == "activity"

    def test_explain_user_match(self, store):
        explanation = explain_user_match("u1", "u2", store=store)
        assert [r.type for r in explanation.reasons] == ["interests", "social"]

    def test_explain_unknown_other(self, store):
        with pytest.raises(NotFoundError):
            explain_user_match("u1", "ghost", store=store)


class TestParticipants:

    def test_rank_activity_participants(self, store):
        result = rank_activity_participants("a1", "u1", store=store)
        assert [m.user.id for m in result] == ["u3", "u2"]
        assert result[0].compatibility_label == "Excellent Match"

    def test_unknown_activity(self, store):
        with pytest.raises(NotFoundError):
            rank_activity_participants("nope", "u1", store=store)


class TestMembership:

    def test_join_then_recommendations_exclude_it(self, store):
        activity = join_activity("a1", "u1", store=store)
        assert activity.participant_ids == ["u2", "u3", "u1"]
        assert recommend_activities("u1", store=store, now=NOW) == []

    def test_join_full(self, store):
        join_activity("a1", "u1", store=store)
        store.put_user({"id": "u4"})
        with pytest.raises(ActivityFullError):
            join_activity("a1", "u4", store=store)

    def test_join_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            join_activity("a1", "ghost", store=store)

    def test_leave(self, store):
        activity = leave_activity("a1", "u3", store=store)
        assert activity.participant_ids == ["u2"]
