# meetmatch/errors.py
"""
Error taxonomy for the recommendation entry points and storage adapters.

Degraded records (missing interests, location or preferences) are not
errors: the scoring functions turn them into neutral or zero sub-scores.
"""
from __future__ import annotations


class MeetmatchError(Exception):
    """Base class for every error raised on purpose by this package."""


class NotFoundError(MeetmatchError, LookupError):
    """A referenced user or activity id does not resolve."""

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id!r}")


class InvalidInputError(MeetmatchError, ValueError):
    """Options or records outside their domain (fail fast, never clamp)."""


# ---------------------------------------------------------------------------
# Membership (join / leave) errors
# ---------------------------------------------------------------------------

class MembershipError(MeetmatchError):
    """A join or leave request was rejected by the storage layer."""

    def __init__(self, activity_id: str, user_id: str, message: str) -> None:
        self.activity_id = activity_id
        self.user_id = user_id
        super().__init__(f"{message} (activity_id={activity_id} user_id={user_id})")


class ActivityFullError(MembershipError):
    def __init__(self, activity_id: str, user_id: str) -> None:
        super().__init__(activity_id, user_id, "activity is full")


class AlreadyJoinedError(MembershipError):
    def __init__(self, activity_id: str, user_id: str) -> None:
        super().__init__(activity_id, user_id, "user already joined")


class NotParticipantError(MembershipError):
    def __init__(self, activity_id: str, user_id: str) -> None:
        super().__init__(activity_id, user_id, "user is not a participant")


class CreatorCannotLeaveError(MembershipError):
    def __init__(self, activity_id: str, user_id: str) -> None:
        super().__init__(activity_id, user_id, "creator cannot leave own activity")
