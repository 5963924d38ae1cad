"""Pydantic input models for the scheduling tools.

Agent arguments are untrusted: every field is validated here before any
store access. Instants are parsed with the turn's timezone passed through
the validation context (``context={"tz": tz}``).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from ..scheduling.models import EventSource
from ..scheduling.normalization import parse_instant

START_ALIASES = AliasChoices("start", "startInstant", "start_instant", "startISO")
END_ALIASES = AliasChoices("end", "endInstant", "end_instant", "endISO")

PATCH_FIELDS = (
    "title",
    "memo",
    "start",
    "startInstant",
    "start_instant",
    "startISO",
    "end",
    "endInstant",
    "end_instant",
    "endISO",
)


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "input"
        msg = item.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}")
    return "; ".join(parts)


def _instant(value: Any, info: ValidationInfo) -> datetime:
    tz = (info.context or {}).get("tz", timezone.utc)
    try:
        return parse_instant(value, tz)
    except ValueError as e:
        raise ValueError(f"not a valid ISO 8601 instant ({e})") from e


class QueryScheduleInput(BaseModel):
    """Arguments of query_schedule."""

    model_config = ConfigDict(extra="ignore")

    start: datetime = Field(..., validation_alias=START_ALIASES)
    end: datetime = Field(..., validation_alias=END_ALIASES)

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_bounds(cls, v: Any, info: ValidationInfo) -> datetime:
        return _instant(v, info)


class ProposedEvent(BaseModel):
    """One element of a create_events batch."""

    model_config = ConfigDict(extra="ignore")

    title: str
    start: datetime = Field(..., validation_alias=START_ALIASES)
    end: datetime = Field(..., validation_alias=END_ALIASES)
    memo: Optional[str] = None
    source: EventSource = EventSource.AI

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_times(cls, v: Any, info: ValidationInfo) -> datetime:
        return _instant(v, info)

    @field_validator("source", mode="before")
    @classmethod
    def default_source(cls, v: Any) -> Any:
        if v is None or v == "":
            return EventSource.AI
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def end_after_start(self) -> "ProposedEvent":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class EventPatch(BaseModel):
    """Sparse patch for update_event.

    Presence is tracked with ``model_fields_set``: absent fields are left
    untouched, ``memo: null`` clears the memo, and ``title``/``start``/``end``
    may not be null.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    start: Optional[datetime] = Field(default=None, validation_alias=START_ALIASES)
    end: Optional[datetime] = Field(default=None, validation_alias=END_ALIASES)
    memo: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_not_empty(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("title cannot be cleared")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("title must not be empty")
        return v

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_times(cls, v: Any, info: ValidationInfo) -> datetime:
        if v is None:
            raise ValueError("cannot be cleared")
        return _instant(v, info)

    def changes(self) -> Dict[str, Any]:
        """Only the fields that were present in the input."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class EventIdInput(BaseModel):
    """Target of update_event / delete_event."""

    model_config = ConfigDict(extra="ignore")

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("id must not be empty")
        return v
