"""Data models for events, planning preferences and the per-turn context bundle."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

WEEKDAY_TAGS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


class EventSource(str, Enum):
    """Provenance tag. Informational only, never used for access control."""

    MANUAL = "manual"
    AI = "ai"
    IMPORTED = "imported"


@dataclass
class Event:
    """A scheduled occurrence owned by exactly one user."""

    id: str
    user_id: str
    title: str
    start: datetime  # aware, UTC
    end: datetime  # aware, UTC
    memo: Optional[str] = None
    source: EventSource = EventSource.AI


@dataclass
class DayRange:
    """Inclusive instant pair covering one local calendar day."""

    start: datetime
    end: datetime


class Goal(BaseModel):
    """Free-text planning goal, e.g. 'sleep by 23:00'."""

    id: str
    text: str
    enabled: bool = True


class TimeBlock(BaseModel):
    """Recurring busy interval in local wall-clock time."""

    id: str
    label: str
    days: List[str] = Field(default_factory=list, description="Weekday tags (mon..sun)")
    start: time = Field(..., description="Local start-of-day time")
    end: time = Field(..., description="Local end time; wraps past midnight if not after start")
    enabled: bool = True

    @field_validator("days")
    @classmethod
    def normalize_days(cls, v: List[str]) -> List[str]:
        days = []
        for tag in v:
            tag = tag.strip().lower()[:3]
            if tag not in WEEKDAY_TAGS:
                raise ValueError(f"Unknown weekday tag: '{tag}'")
            if tag not in days:
                days.append(tag)
        return days

    @property
    def overnight(self) -> bool:
        return self.end <= self.start

    def applies_to(self, day: date) -> bool:
        return WEEKDAY_TAGS[day.weekday()] in self.days

    def to_context(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "days": list(self.days),
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
        }


class Preferences(BaseModel):
    """Per-user planning policy document."""

    timezone: Optional[str] = None
    goals: List[Goal] = Field(default_factory=list)
    time_blocks: List[TimeBlock] = Field(default_factory=list)

    def enabled_goals(self) -> List[str]:
        return [g.text for g in self.goals if g.enabled]

    def enabled_time_blocks(self) -> List[TimeBlock]:
        return [b for b in self.time_blocks if b.enabled]


@dataclass
class ContextBundle:
    """Read-only snapshot handed to the agent on every turn."""

    timezone: str
    reference_date: date
    day_range: DayRange
    events: List[Dict[str, Any]] = field(default_factory=list)
    goals: List[str] = field(default_factory=list)
    time_blocks: List[Dict[str, Any]] = field(default_factory=list)
    rules: List[str] = field(default_factory=list)
    app_name: str = "Day Planner"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app": {"name": self.app_name, "timezone": self.timezone},
            "selected_date": self.reference_date.isoformat(),
            "day_range": {
                "start": self.day_range.start.isoformat(),
                "end": self.day_range.end.isoformat(),
            },
            "day_events": list(self.events),
            "goals": list(self.goals),
            "time_blocks": list(self.time_blocks),
            "rules": list(self.rules),
        }
