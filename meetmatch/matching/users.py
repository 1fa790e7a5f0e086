# meetmatch/matching/users.py
"""
People matching: rank candidate users against a reference user.

combined = round(0.6 * interest percentage + 0.4 * preference compatibility)

A candidate is admitted when it shares at least `min_overlap` interests OR
its preference compatibility reaches `min_preference_score`. The reference
user never matches itself.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional

from meetmatch.matching.interests import InterestOverlap, interest_overlap
from meetmatch.matching.preferences import preference_compatibility, times_compatible
from meetmatch.matching.rounding import round_score
from meetmatch.matching.scoring import compatibility_label
from meetmatch.models import ActivityRecord, MatchOptions, UserRecord

INTEREST_WEIGHT = 0.6
PREFERENCE_WEIGHT = 0.4
MAX_REASON_DETAILS = 5


@dataclass(frozen=True)
class RankedUser:
    user: UserRecord
    overlap: InterestOverlap
    preference_score: int
    combined_percentage: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.model_dump(mode="json"),
            "interest_match": asdict(self.overlap),
            "preference_score": self.preference_score,
            "combined_percentage": self.combined_percentage,
        }


@dataclass(frozen=True)
class MatchReason:
    type: str
    message: str
    details: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MatchExplanation:
    overall_match: int
    reasons: list[MatchReason] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ParticipantMatch:
    user: UserRecord
    overlap: InterestOverlap
    compatibility_label: str


def combined_percentage(overlap: InterestOverlap, preference_score: int) -> int:
    return round_score(
        overlap.percentage * INTEREST_WEIGHT + preference_score * PREFERENCE_WEIGHT
    )


def match_users(
    reference: UserRecord,
    candidates: Iterable[UserRecord],
    options: Optional[MatchOptions] = None,
) -> list[RankedUser]:
    options = options or MatchOptions()
    matches: list[RankedUser] = []

    for candidate in candidates:
        if candidate.id == reference.id:
            continue

        overlap = interest_overlap(reference.interests, candidate.interests)
        pref = preference_compatibility(reference.preferences, candidate.preferences)

        if overlap.total_matches < options.min_overlap and pref < options.min_preference_score:
            continue

        matches.append(
            RankedUser(
                user=candidate,
                overlap=overlap,
                preference_score=pref,
                combined_percentage=combined_percentage(overlap, pref),
            )
        )

    matches.sort(key=lambda m: m.combined_percentage, reverse=True)
    return matches[: options.limit]


def explain_match(a: UserRecord, b: UserRecord) -> MatchExplanation:
    """Human-readable reasons behind a match; reuses the same two primitive scores."""
    overlap = interest_overlap(a.interests, b.interests)
    pref = preference_compatibility(a.preferences, b.preferences)

    reasons: list[MatchReason] = []

    if overlap.matched_interests:
        reasons.append(MatchReason(
            type="interests",
            message=f"You share {len(overlap.matched_interests)} interests",
            details=overlap.matched_interests[:MAX_REASON_DETAILS],
        ))

    pa, pb = a.preferences, b.preferences
    if pa is not None and pb is not None:
        if pa.social_style and pa.social_style == pb.social_style:
            reasons.append(MatchReason(
                type="social",
                message=f"Both prefer {pa.social_style} settings",
            ))
        if pa.activity_level and pa.activity_level == pb.activity_level:
            reasons.append(MatchReason(
                type="activity",
                message=f"Similar activity levels: {pa.activity_level.replace('_', ' ')}",
            ))
    if times_compatible(pa, pb):
        reasons.append(MatchReason(type="timing", message="Compatible availability"))

    return MatchExplanation(overall_match=combined_percentage(overlap, pref), reasons=reasons)


def matched_participants(
    reference: UserRecord,
    activity: ActivityRecord,
    users: Iterable[UserRecord],
) -> list[ParticipantMatch]:
    """Rank the other participants of an activity by shared interests."""
    by_id = {u.id: u for u in users}
    results: list[ParticipantMatch] = []

    for participant_id in activity.participant_ids:
        if participant_id == reference.id:
            continue
        participant = by_id.get(participant_id)
        if participant is None:
            continue
        overlap = interest_overlap(reference.interests, participant.interests)
        results.append(ParticipantMatch(
            user=participant,
            overlap=overlap,
            compatibility_label=compatibility_label(overlap.percentage),
        ))

    results.sort(key=lambda m: m.overlap.score, reverse=True)
    return results
