from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from meetmatch.errors import InvalidInputError


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present key (both storage variants name fields differently)."""
    for k in keys:
        if k in row and row[k] is not None:
            return row[k]
    return None


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# -----------------------------------------------------------------------------
# Coercion helpers
# -----------------------------------------------------------------------------

def _coerce_timestamp(v: Any) -> Any:
    if v is None or v == "":
        return None
    if isinstance(v, Mapping):
        # Document-store timestamp: {"seconds": .., "nanoseconds": ..}.
        # An unresolved server-side placeholder carries neither.
        secs = _first(v, "seconds", "_seconds")
        if secs is None:
            return None
        nanos = _first(v, "nanoseconds", "_nanoseconds") or 0
        return datetime.fromtimestamp(float(secs) + float(nanos) / 1e9, tz=timezone.utc)
    return v


def _as_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


def _coerce_str_list(v: Any) -> Any:
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    return [str(x) for x in v if x is not None]


def _coerce_id_list(v: Any) -> Any:
    """Ids may arrive bare or as populated documents; dedupe keeping order."""
    if v is None:
        return []
    if isinstance(v, (str, int)):
        v = [v]
    ids: list[str] = []
    for item in v:
        if isinstance(item, Mapping):
            item = _first(item, "id", "_id")
        if item is None:
            continue
        ids.append(str(item))
    return list(dict.fromkeys(ids))


def _coerce_optional_id(v: Any) -> Any:
    if isinstance(v, Mapping):
        v = _first(v, "id", "_id")
    if v is None or v == "":
        return None
    return str(v)


def _location_input(v: Any) -> Any:
    """A location missing either component is treated as absent, not malformed."""
    if isinstance(v, Mapping):
        inner = v.get("coordinates")
        if isinstance(inner, Mapping):
            v = inner
        lat = _first(v, "latitude", "lat")
        lng = _first(v, "longitude", "lng", "lon")
        if lat is None or lng is None:
            return None
        return {"latitude": lat, "longitude": lng}
    return v


# -----------------------------------------------------------------------------
# Value types
# -----------------------------------------------------------------------------

class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(
        ge=-90.0, le=90.0, allow_inf_nan=False,
        validation_alias=_aliases("latitude", "lat"),
    )
    longitude: float = Field(
        ge=-180.0, le=180.0, allow_inf_nan=False,
        validation_alias=_aliases("longitude", "lng", "lon"),
    )


class PreferenceProfile(BaseModel):
    """Questionnaire answers. A missing axis is left out of scoring."""

    model_config = ConfigDict(frozen=True)

    social_style: Optional[str] = Field(
        default=None, validation_alias=_aliases("social_style", "socialStyle"),
    )
    activity_level: Optional[str] = Field(
        default=None, validation_alias=_aliases("activity_level", "activityLevel"),
    )
    budget_level: Optional[str] = Field(
        default=None, validation_alias=_aliases("budget_level", "budgetLevel"),
    )
    time_preference: Optional[str] = Field(
        default=None, validation_alias=_aliases("time_preference", "timePreference"),
    )
    day_preference: Optional[str] = Field(
        default=None, validation_alias=_aliases("day_preference", "dayPreference"),
    )
    preferred_group_size: Optional[str] = Field(
        default=None,
        validation_alias=_aliases("preferred_group_size", "preferredGroupSize"),
    )

    @field_validator("*", mode="before")
    @classmethod
    def _normalize_value(cls, v: Any) -> Any:
        if v is None:
            return None
        s = str(v).strip().lower()
        return s or None


# -----------------------------------------------------------------------------
# Records (owned by the storage collaborator, read-only here)
# -----------------------------------------------------------------------------

class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    first_name: Optional[str] = Field(
        default=None, validation_alias=_aliases("first_name", "firstName"),
    )
    last_name: Optional[str] = Field(
        default=None, validation_alias=_aliases("last_name", "lastName"),
    )
    interests: list[str] = Field(default_factory=list)
    location: Optional[Coordinate] = None
    preferences: Optional[PreferenceProfile] = None
    joined_activity_ids: list[str] = Field(
        default_factory=list,
        validation_alias=_aliases(
            "joined_activity_ids", "joinedActivityIds",
            "joined_activities", "joinedActivities",
        ),
    )
    questionnaire_completed: bool = Field(
        default=False,
        validation_alias=_aliases("questionnaire_completed", "questionnaireCompleted"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _record_id(cls, v: Any) -> Any:
        return _coerce_optional_id(v)

    @field_validator("interests", mode="before")
    @classmethod
    def _interests(cls, v: Any) -> Any:
        return _coerce_str_list(v)

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v: Any) -> Any:
        return _location_input(v)

    @field_validator("joined_activity_ids", mode="before")
    @classmethod
    def _joined(cls, v: Any) -> Any:
        return _coerce_id_list(v)

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.id


class ActivityRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    category: Optional[str] = None
    interests: list[str] = Field(default_factory=list)
    date: Optional[datetime] = None
    location: Optional[Coordinate] = None
    max_participants: Optional[int] = Field(
        default=None, validation_alias=_aliases("max_participants", "maxParticipants"),
    )
    participant_ids: list[str] = Field(
        default_factory=list,
        validation_alias=_aliases("participant_ids", "participantIds", "participants"),
    )
    creator_id: Optional[str] = Field(
        default=None,
        validation_alias=_aliases(
            "creator_id", "creatorId", "created_by", "createdBy", "creator",
        ),
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=_aliases("created_at", "createdAt"),
    )
    status: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _record_id(cls, v: Any) -> Any:
        return _coerce_optional_id(v)

    @field_validator("interests", mode="before")
    @classmethod
    def _interests(cls, v: Any) -> Any:
        return _coerce_str_list(v)

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v: Any) -> Any:
        return _location_input(v)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("participant_ids", mode="before")
    @classmethod
    def _participants(cls, v: Any) -> Any:
        return _coerce_id_list(v)

    @field_validator("creator_id", mode="before")
    @classmethod
    def _creator(cls, v: Any) -> Any:
        return _coerce_optional_id(v)

    @field_validator("max_participants", mode="before")
    @classmethod
    def _max_participants(cls, v: Any) -> Any:
        # 0 / negative / missing all mean "no declared capacity"
        if v is None or v == "":
            return None
        if int(v) <= 0:
            return None
        if int(v) < 2:
            raise ValueError("max_participants must be at least 2 (creator plus one)")
        return v

    @field_validator("date", "created_at", mode="before")
    @classmethod
    def _timestamp_in(cls, v: Any) -> Any:
        return _coerce_timestamp(v)

    @field_validator("date", "created_at", mode="after")
    @classmethod
    def _timestamp_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    @property
    def participant_count(self) -> int:
        return len(self.participant_ids)

    @property
    def is_full(self) -> bool:
        if self.max_participants is None:
            return False
        return self.participant_count >= self.max_participants


# -----------------------------------------------------------------------------
# Ranking options
# -----------------------------------------------------------------------------

class RecommendOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int = Field(default=20, ge=0)
    min_score: float = Field(
        default=30, ge=0, le=100, validation_alias=_aliases("min_score", "minScore"),
    )
    exclude_joined: bool = Field(
        default=True, validation_alias=_aliases("exclude_joined", "excludeJoined"),
    )
    exclude_past: bool = Field(
        default=True, validation_alias=_aliases("exclude_past", "excludePast"),
    )


class MatchOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int = Field(default=10, ge=0)
    min_overlap: int = Field(
        default=1, ge=0, validation_alias=_aliases("min_overlap", "minOverlap"),
    )
    min_preference_score: int = Field(
        default=60, ge=0, le=100,
        validation_alias=_aliases("min_preference_score", "minPreferenceScore"),
    )


# -----------------------------------------------------------------------------
# Boundary parsing (ValidationError -> InvalidInputError)
# -----------------------------------------------------------------------------

M = TypeVar("M", bound=BaseModel)


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def parse_record(model: Type[M], row: Union[M, Mapping[str, Any]]) -> M:
    """Validate a storage row into a record model."""
    if isinstance(row, model):
        return row
    try:
        return model.model_validate(row)
    except ValidationError as e:
        raise InvalidInputError(f"invalid {model.__name__}: {_describe(e)}") from e


def coerce_options(model: Type[M], options: Union[M, Mapping[str, Any], None]) -> M:
    """Accept None (defaults), a mapping, or an options instance."""
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        raise InvalidInputError(f"invalid {model.__name__}: {_describe(e)}") from e
