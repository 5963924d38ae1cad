"""Scheduling domain: models, normalization and planning policy."""

from .models import (
    ContextBundle,
    DayRange,
    Event,
    EventSource,
    Goal,
    Preferences,
    TimeBlock,
)
from .policy import PLANNER_RULES, PolicyChecker

__all__ = [
    "ContextBundle",
    "DayRange",
    "Event",
    "EventSource",
    "Goal",
    "Preferences",
    "TimeBlock",
    "PLANNER_RULES",
    "PolicyChecker",
]
