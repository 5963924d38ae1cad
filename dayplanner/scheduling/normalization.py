"""Conversion between wall-clock values and canonical stored instants."""

import json
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Dict, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import MalformedInput
from .models import DayRange, Event

logger = logging.getLogger(__name__)

DISPLAY_FORMAT = "%a %Y-%m-%d %H:%M %Z"


def resolve_timezone(name: Optional[str], fallback: str = "UTC") -> tzinfo:
    """
    Resolve an IANA zone name, falling back when it is missing or unknown.

    Args:
        name: Preferred zone (usually from the user's preferences)
        fallback: Zone to use when ``name`` is empty or invalid

    Returns:
        tzinfo for the first candidate that resolves
    """
    for candidate in (name, fallback, "UTC"):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError, TypeError):
            logger.warning(f"Unknown timezone '{candidate}', trying fallback")
    return timezone.utc


def timezone_name(tz: tzinfo) -> str:
    """Return the IANA key of a zone, or 'UTC' for the fixed UTC zone."""
    return getattr(tz, "key", None) or "UTC"


def parse_instant(value: Union[str, datetime], tz: tzinfo) -> datetime:
    """
    Parse an ISO 8601 value into an aware UTC instant.

    Values without an offset are wall-clock times in ``tz``.

    Raises:
        ValueError: If the value is empty, not ISO 8601, or has no UTC equivalent
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("instant is empty")
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported instant value: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError("instant out of range") from e


def to_canonical(dt: datetime) -> str:
    """Fixed-width UTC string; lexical order matches time order."""
    utc = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return utc.isoformat(timespec="microseconds") + "Z"


def from_canonical(value: str) -> datetime:
    return datetime.fromisoformat(value.rstrip("Z")).replace(tzinfo=timezone.utc)


def format_local(dt: datetime, tz: tzinfo) -> str:
    try:
        return dt.astimezone(tz).strftime(DISPLAY_FORMAT)
    except OverflowError:
        # No local wall clock at the ends of the calendar
        return dt.astimezone(timezone.utc).strftime(DISPLAY_FORMAT)


def day_bounds(day: date, tz: tzinfo) -> DayRange:
    """
    Instant range of local calendar day ``day`` in ``tz``.

    Start is local midnight; end is one microsecond before the next local
    midnight, so the range is inclusive and never spills into the next day.

    Raises:
        OverflowError: If the day has no UTC equivalent (ends of the calendar)
    """
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    next_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)

    start = start_local.astimezone(timezone.utc)
    end = next_local.astimezone(timezone.utc) - timedelta(microseconds=1)
    if end <= start:
        end = start + timedelta(days=1) - timedelta(microseconds=1)
    return DayRange(start=start, end=end)


def summarize_event(event: Event, tz: Optional[tzinfo] = None) -> Dict[str, Any]:
    """Event summary for the agent: canonical instants plus optional local rendering."""
    summary = {
        "id": event.id,
        "title": event.title,
        "start": to_canonical(event.start),
        "end": to_canonical(event.end),
        "memo": event.memo,
        "source": event.source.value,
    }
    if tz is not None:
        summary["start_local"] = format_local(event.start, tz)
        summary["end_local"] = format_local(event.end, tz)
    return summary


def decode_payload(raw: Any, label: str) -> Any:
    """
    Decode a value the agent may have sent as serialized JSON text.

    Non-text values are returned unchanged.

    Raises:
        MalformedInput: If bytes are not UTF-8 or text does not decode as JSON
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInput(f"{label} is not valid UTF-8: {e.reason}") from e
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedInput(f"{label} is not valid JSON: {e.msg}") from e
