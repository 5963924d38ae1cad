"""Tests for the per-turn context assembler."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from dayplanner.auth.session import AnonymousSession, StaticSession
from dayplanner.context.assembler import ContextAssembler
from dayplanner.errors import StoreUnavailable
from dayplanner.scheduling.models import Event, Goal, Preferences, TimeBlock
from dayplanner.scheduling.policy import PLANNER_RULES

UTC = timezone.utc


def fixed_clock(dt):
    return lambda tz: dt.astimezone(tz)


def make_event(event_id, user_id, start, end, title="Event"):
    return Event(id=event_id, user_id=user_id, title=title, start=start, end=end)


@pytest.fixture
def assembler(event_store, preferences_store):
    return ContextAssembler(
        event_store,
        preferences_store,
        default_timezone="UTC",
        now=fixed_clock(datetime(2026, 10, 18, 12, tzinfo=UTC)),
    )


@pytest.mark.asyncio
async def test_bundle_contains_only_selected_day(assembler, event_store):
    """Test events outside the local day are excluded and order is by start."""
    await event_store.insert_many(
        [
            make_event("late", "alice", datetime(2026, 10, 18, 20, tzinfo=UTC), datetime(2026, 10, 18, 21, tzinfo=UTC)),
            make_event("early", "alice", datetime(2026, 10, 18, 7, tzinfo=UTC), datetime(2026, 10, 18, 8, tzinfo=UTC)),
            make_event("tomorrow", "alice", datetime(2026, 10, 19, 0, tzinfo=UTC), datetime(2026, 10, 19, 1, tzinfo=UTC)),
            make_event("bobs", "bob", datetime(2026, 10, 18, 9, tzinfo=UTC), datetime(2026, 10, 18, 10, tzinfo=UTC)),
        ]
    )

    bundle = await assembler.build(StaticSession("alice"), date(2026, 10, 18))

    assert [e["id"] for e in bundle.events] == ["early", "late"]
    assert bundle.reference_date == date(2026, 10, 18)
    assert bundle.day_range.start == datetime(2026, 10, 18, tzinfo=UTC)
    assert bundle.rules == PLANNER_RULES


@pytest.mark.asyncio
async def test_defaults_to_today(assembler):
    bundle = await assembler.build(StaticSession("alice"))
    assert bundle.reference_date == date(2026, 10, 18)


@pytest.mark.asyncio
async def test_reference_date_accepts_iso_text(assembler):
    bundle = await assembler.build(StaticSession("alice"), "2026-12-24")
    assert bundle.reference_date == date(2026, 12, 24)


@pytest.mark.asyncio
async def test_invalid_reference_date_falls_back_to_today(assembler):
    bundle = await assembler.build(StaticSession("alice"), "next thursday")
    assert bundle.reference_date == date(2026, 10, 18)


@pytest.mark.asyncio
@pytest.mark.parametrize("reference", ["9999-12-31", "0001-01-01", date.max])
async def test_out_of_range_reference_date_falls_back_to_today(event_store, preferences_store, reference):
    """Test calendar-edge days east of UTC still yield a well-formed bundle."""
    assembler = ContextAssembler(
        event_store,
        preferences_store,
        default_timezone="Asia/Tokyo",
        now=fixed_clock(datetime(2026, 10, 18, 12, tzinfo=UTC)),
    )

    bundle = await assembler.build(StaticSession("alice"), reference)

    assert bundle.timezone == "Asia/Tokyo"
    assert bundle.reference_date == date(2026, 10, 18)
    assert bundle.day_range.start == datetime(2026, 10, 17, 15, tzinfo=UTC)
    assert bundle.day_range.start < bundle.day_range.end


@pytest.mark.asyncio
async def test_preference_timezone_wins(assembler, preferences_store, event_store):
    """Test the user's zone sets the day boundaries."""
    await preferences_store.save("alice", Preferences(timezone="Asia/Tokyo"))
    # 2026-10-18 23:30 in Tokyo
    await event_store.insert(
        make_event("night", "alice", datetime(2026, 10, 18, 14, 30, tzinfo=UTC), datetime(2026, 10, 18, 15, tzinfo=UTC))
    )

    bundle = await assembler.build(StaticSession("alice"), date(2026, 10, 18))

    assert bundle.timezone == "Asia/Tokyo"
    assert bundle.day_range.start == datetime(2026, 10, 17, 15, tzinfo=UTC)
    assert [e["id"] for e in bundle.events] == ["night"]
    assert bundle.events[0]["start_local"].startswith("Sun 2026-10-18 23:30")


@pytest.mark.asyncio
async def test_filters_disabled_goals_and_blocks(assembler, preferences_store):
    await preferences_store.save(
        "alice",
        Preferences(
            goals=[
                Goal(id="g1", text="Sleep by 23:00"),
                Goal(id="g2", text="Run daily", enabled=False),
            ],
            time_blocks=[
                TimeBlock(id="b1", label="Deep work", days=["mon", "tue"], start="09:00", end="12:00"),
                TimeBlock(id="b2", label="Gym", days=["sat"], start="10:00", end="11:00", enabled=False),
            ],
        ),
    )

    bundle = await assembler.build(StaticSession("alice"), date(2026, 10, 18))

    assert bundle.goals == ["Sleep by 23:00"]
    assert bundle.time_blocks == [
        {"label": "Deep work", "days": ["mon", "tue"], "start": "09:00", "end": "12:00"}
    ]


@pytest.mark.asyncio
async def test_unauthenticated_returns_empty_bundle(assembler, event_store):
    """Test a missing principal still yields a well-formed bundle."""
    await event_store.insert(
        make_event("a", "alice", datetime(2026, 10, 18, 9, tzinfo=UTC), datetime(2026, 10, 18, 10, tzinfo=UTC))
    )

    bundle = await assembler.build(AnonymousSession(), date(2026, 10, 18))

    assert bundle.events == []
    assert bundle.goals == []
    assert bundle.timezone == "UTC"
    assert bundle.day_range.start < bundle.day_range.end
    assert bundle.rules


@pytest.mark.asyncio
async def test_no_session_returns_empty_bundle(assembler):
    bundle = await assembler.build(None, date(2026, 10, 18))
    assert bundle.events == []


@pytest.mark.asyncio
async def test_store_failures_are_swallowed():
    """Test store errors degrade to empty events and preferences."""
    event_store = MagicMock()
    event_store.list_range = AsyncMock(side_effect=StoreUnavailable("down"))
    preferences_store = MagicMock()
    preferences_store.get = AsyncMock(side_effect=StoreUnavailable("down"))

    assembler = ContextAssembler(event_store, preferences_store, default_timezone="Europe/Paris")
    bundle = await assembler.build(StaticSession("alice"), date(2026, 10, 18))

    assert bundle.events == []
    assert bundle.goals == []
    assert bundle.timezone == "Europe/Paris"


@pytest.mark.asyncio
async def test_to_dict_shape(assembler):
    bundle = await assembler.build(StaticSession("alice"), date(2026, 10, 18))
    data = bundle.to_dict()

    assert set(data) == {
        "app",
        "selected_date",
        "day_range",
        "day_events",
        "goals",
        "time_blocks",
        "rules",
    }
    assert data["app"] == {"name": "Day Planner", "timezone": "UTC"}
    assert data["selected_date"] == "2026-10-18"
