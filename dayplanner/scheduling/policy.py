"""Planning rules communicated to the agent, and the optional time-block check."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Sequence

from ..errors import PolicyViolation
from .models import Event, Preferences, TimeBlock
from .normalization import format_local

logger = logging.getLogger(__name__)

PLANNER_RULES = [
    "If proposing a plan, show it to the user and ask for confirmation before calling create_events.",
    "When the user accepts a proposed plan, call create_events once with the whole plan.",
    "If you need events outside the selected day, call query_schedule.",
    "Do not place events inside enabled time blocks on the days they apply.",
    "Respect the user's enabled goals (for example sleep and wake windows) when choosing times.",
    "Send instants as ISO 8601 with an explicit UTC offset; times without an offset are read in the user's timezone.",
    "Overlapping events are allowed, but point out double-bookings to the user.",
]


@dataclass
class BlockInterval:
    """A time block resolved to absolute instants for one local day."""

    label: str
    start: datetime
    end: datetime


@dataclass
class BlockConflict:
    """An event overlapping a resolved time block."""

    event_index: int
    event_title: str
    block: BlockInterval

    def describe(self, tz: tzinfo) -> str:
        return (
            f"events[{self.event_index}] '{self.event_title}' overlaps time block "
            f"'{self.block.label}' ({format_local(self.block.start, tz)} - "
            f"{format_local(self.block.end, tz)})"
        )


def resolve_time_blocks(
    blocks: Iterable[TimeBlock], day: date, tz: tzinfo
) -> List[BlockInterval]:
    """
    Resolve recurring blocks against one local day.

    Blocks are re-resolved per day so DST shifts move the absolute instants.
    Overnight blocks end on the following day.
    """
    intervals = []
    for block in blocks:
        if not block.enabled or not block.applies_to(day):
            continue
        try:
            end_day = day + timedelta(days=1) if block.overnight else day
            start = datetime.combine(day, block.start, tzinfo=tz).astimezone(timezone.utc)
            end = datetime.combine(end_day, block.end, tzinfo=tz).astimezone(timezone.utc)
        except OverflowError:
            logger.debug(f"Time block '{block.label}' falls outside the calendar on {day}")
            continue
        intervals.append(BlockInterval(label=block.label, start=start, end=end))
    intervals.sort(key=lambda iv: iv.start)
    return intervals


def local_days(event: Event, tz: tzinfo) -> List[date]:
    """
    Local days an event touches, plus the day before its start.

    The extra day catches overnight blocks from the previous evening.
    Days past either end of the calendar are left out.
    """
    first = local_date(event.start, tz)
    last = local_date(event.end, tz)
    if first > date.min:
        first -= timedelta(days=1)
    days = [first]
    while days[-1] < last:
        days.append(days[-1] + timedelta(days=1))
    return days


def local_date(dt: datetime, tz: tzinfo) -> date:
    try:
        return dt.astimezone(tz).date()
    except OverflowError:
        return dt.astimezone(timezone.utc).date()


class PolicyChecker:
    """Checks proposed events against enabled time blocks."""

    def __init__(self, enforce_time_blocks: bool = False):
        """
        Initialize policy checker.

        Args:
            enforce_time_blocks: Reject conflicting batches instead of warning
        """
        self.enforce_time_blocks = enforce_time_blocks

    def find_conflicts(
        self, events: Sequence[Event], preferences: Preferences, tz: tzinfo
    ) -> List[BlockConflict]:
        blocks = preferences.enabled_time_blocks()
        if not blocks:
            return []

        conflicts = []
        for index, event in enumerate(events):
            for day in local_days(event, tz):
                for interval in resolve_time_blocks(blocks, day, tz):
                    if event.start < interval.end and interval.start < event.end:
                        conflicts.append(BlockConflict(index, event.title, interval))
        return conflicts

    def check(
        self, events: Sequence[Event], preferences: Preferences, tz: tzinfo
    ) -> List[str]:
        """
        Check a batch and return human-readable warnings.

        Raises:
            PolicyViolation: If enforcement is on and any event conflicts
        """
        conflicts = self.find_conflicts(events, preferences, tz)
        warnings = [c.describe(tz) for c in conflicts]
        if warnings and self.enforce_time_blocks:
            raise PolicyViolation("; ".join(warnings))
        if warnings:
            logger.info(f"Time block conflicts (advisory): {len(warnings)}")
        return warnings
