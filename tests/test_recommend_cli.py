# tests/test_recommend_cli.py
"""CLI formatting and option wiring (MemoryStore injected, no network)."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from meetmatch.db.memory_store import MemoryStore
from meetmatch.matching.users import MatchExplanation, MatchReason
from scripts.explain_match_cli import format_explanation
from scripts.recommend_cli import build_parser, format_activity_lines, format_user_lines, run

SOON = datetime.now(timezone.utc) + timedelta(days=3)
MARINA = {"lat": 1.3521, "lng": 103.8198}


def _make_store() -> MemoryStore:
    return MemoryStore(
        users=[
            {"id": "u1", "firstName": "Ana", "interests": ["hiking"], "location": MARINA,
             "joinedActivities": ["a2"], "questionnaireCompleted": True},
            {"id": "u2", "firstName": "Ben", "lastName": "Ng", "interests": ["hiking"],
             "questionnaireCompleted": True},
        ],
        activities=[
            {"id": "a1", "title": "Ridge walk", "interests": ["hiking"], "date": SOON,
             "location": MARINA, "creator_id": "u2", "status": "active"},
            {"id": "a2", "title": "Joined walk", "interests": ["hiking"], "date": SOON,
             "location": MARINA, "creator_id": "u2", "status": "active"},
        ],
    )


def test_activities_default_excludes_joined():
    args = build_parser().parse_args(["--user-id", "u1"])
    ranked = run(_make_store(), args)
    assert [r.activity.id for r in ranked] == ["a1"]


def test_include_joined_flag():
    args = build_parser().parse_args(["--user-id", "u1", "--include-joined", "--limit", "5"])
    ranked = run(_make_store(), args)
    assert {r.activity.id for r in ranked} == {"a1", "a2"}


def test_people_mode():
    args = build_parser().parse_args(["--user-id", "u1", "--people"])
    ranked = run(_make_store(), args)
    assert [r.user.id for r in ranked] == ["u2"]


def test_format_activity_lines():
    args = build_parser().parse_args(["--user-id", "u1"])
    lines = format_activity_lines(run(_make_store(), args))

    assert len(lines) == 1
    assert lines[0].startswith("  1. [")
    assert "id=a1" in lines[0]
    assert "0.0km in 3d" in lines[0]
    assert "Excellent Match" in lines[0]


def test_format_user_lines():
    args = build_parser().parse_args(["--user-id", "u1", "--people"])
    lines = format_user_lines(run(_make_store(), args))

    assert "Ben Ng" in lines[0]
    assert "id=u2" in lines[0]
    assert "shared: hiking" in lines[0]


def test_format_explanation():
    explanation = MatchExplanation(
        overall_match=72,
        reasons=[
            MatchReason(type="interests", message="You share 2 interests", details=["hiking", "yoga"]),
            MatchReason(type="timing", message="Compatible availability"),
        ],
    )
    lines = format_explanation(explanation)
    assert lines[0] == "overall match: 72% (Great Match)"
    assert lines[1] == "  - interests: You share 2 interests [hiking, yoga]"
    assert lines[2] == "  - timing: Compatible availability"


def test_format_explanation_without_reasons():
    lines = format_explanation(MatchExplanation(overall_match=20))
    assert lines == ["overall match: 20% (Moderate Match)", "  (no specific reasons)"]
