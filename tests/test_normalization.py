"""Tests for instant parsing, canonical storage format and day boundaries."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from dayplanner.errors import MalformedInput
from dayplanner.scheduling.models import Event, EventSource
from dayplanner.scheduling.normalization import (
    day_bounds,
    decode_payload,
    from_canonical,
    parse_instant,
    resolve_timezone,
    summarize_event,
    timezone_name,
    to_canonical,
)

UTC = timezone.utc


class TestParseInstant:
    """Test ISO 8601 parsing into UTC instants."""

    def test_z_suffix(self):
        assert parse_instant("2026-10-18T09:00:00Z", UTC) == datetime(2026, 10, 18, 9, tzinfo=UTC)

    def test_explicit_offset_is_converted(self):
        result = parse_instant("2026-10-18T09:00:00-05:00", ZoneInfo("Asia/Tokyo"))
        assert result == datetime(2026, 10, 18, 14, tzinfo=UTC)

    def test_naive_value_uses_turn_timezone(self):
        result = parse_instant("2026-07-01T09:00", ZoneInfo("Europe/Berlin"))
        assert result == datetime(2026, 7, 1, 7, tzinfo=UTC)
        assert result.tzinfo == UTC

    def test_datetime_passthrough(self):
        naive = datetime(2026, 1, 5, 8, 30)
        assert parse_instant(naive, UTC) == datetime(2026, 1, 5, 8, 30, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", "   ", "tomorrow at nine", "2026-13-01T00:00"])
    def test_invalid_values_raise(self, value):
        with pytest.raises(ValueError):
            parse_instant(value, UTC)

    def test_non_string_raises(self):
        with pytest.raises(ValueError):
            parse_instant(12345, UTC)

    @pytest.mark.parametrize(
        "value, zone",
        [
            ("0001-01-01T00:00:00+05:00", "UTC"),
            ("9999-12-31T23:00:00-05:00", "UTC"),
            ("0001-01-01T00:00:00", "Asia/Tokyo"),
            ("9999-12-31T23:00:00", "America/New_York"),
        ],
    )
    def test_out_of_range_instants_raise_value_error(self, value, zone):
        with pytest.raises(ValueError, match="out of range"):
            parse_instant(value, ZoneInfo(zone))


class TestCanonicalFormat:
    """Test the stored instant format."""

    def test_fixed_width(self):
        value = to_canonical(datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC))
        assert value == "2026-01-02T03:04:05.000000Z"

    def test_converts_to_utc(self):
        value = to_canonical(datetime(2026, 1, 2, 9, 0, tzinfo=ZoneInfo("Asia/Tokyo")))
        assert value == "2026-01-02T00:00:00.000000Z"

    def test_round_trip(self):
        original = datetime(2026, 5, 17, 22, 15, 0, 123456, tzinfo=UTC)
        assert from_canonical(to_canonical(original)) == original

    def test_lexical_order_matches_time_order(self):
        instants = [
            datetime(2026, 1, 1, 10, 0, 0, 500000, tzinfo=UTC),
            datetime(2025, 12, 31, 23, 59, 59, tzinfo=UTC),
            datetime(2026, 1, 1, 10, 0, 0, tzinfo=UTC),
        ]
        by_text = sorted(instants, key=to_canonical)
        assert by_text == sorted(instants)


class TestDayBounds:
    """Test local day boundaries."""

    def test_utc_day(self):
        bounds = day_bounds(date(2026, 10, 18), UTC)
        assert bounds.start == datetime(2026, 10, 18, tzinfo=UTC)
        assert bounds.end == datetime(2026, 10, 18, 23, 59, 59, 999999, tzinfo=UTC)

    def test_spring_forward_day_is_short(self):
        tz = ZoneInfo("America/New_York")
        bounds = day_bounds(date(2026, 3, 8), tz)
        assert bounds.start == datetime(2026, 3, 8, 5, tzinfo=UTC)
        assert bounds.end - bounds.start == timedelta(hours=23) - timedelta(microseconds=1)

    def test_fall_back_day_is_long(self):
        tz = ZoneInfo("America/New_York")
        bounds = day_bounds(date(2026, 11, 1), tz)
        assert bounds.end - bounds.start == timedelta(hours=25) - timedelta(microseconds=1)

    @pytest.mark.parametrize(
        "zone",
        ["UTC", "Pacific/Kiritimati", "Pacific/Pago_Pago", "Asia/Kathmandu", "America/Santiago"],
    )
    @pytest.mark.parametrize("day", [date(2026, 1, 1), date(2026, 3, 29), date(2026, 10, 18)])
    def test_range_is_well_formed(self, zone, day):
        tz = ZoneInfo(zone)
        bounds = day_bounds(day, tz)
        assert bounds.start < bounds.end
        assert bounds.start.astimezone(tz).date() == day
        assert bounds.end.astimezone(tz).date() == day

    @pytest.mark.parametrize("zone, day", [("UTC", date.max), ("Asia/Tokyo", date.min)])
    def test_days_at_calendar_edges_overflow(self, zone, day):
        with pytest.raises(OverflowError):
            day_bounds(day, ZoneInfo(zone))


class TestTimezones:
    """Test zone resolution and naming."""

    def test_resolves_preferred_zone(self):
        assert timezone_name(resolve_timezone("Asia/Tokyo")) == "Asia/Tokyo"

    def test_falls_back_when_missing(self):
        assert timezone_name(resolve_timezone(None, "Europe/Paris")) == "Europe/Paris"

    def test_falls_back_when_unknown(self):
        assert timezone_name(resolve_timezone("Mars/Olympus_Mons", "UTC")) == "UTC"

    def test_fixed_utc_name(self):
        assert timezone_name(UTC) == "UTC"


class TestDecodePayload:
    """Test decoding of pre-serialized agent arguments."""

    def test_decodes_json_text(self):
        assert decode_payload('[{"title": "x"}]', "events") == [{"title": "x"}]

    def test_decodes_bytes(self):
        assert decode_payload(b'{"a": 1}', "patch") == {"a": 1}

    def test_structured_values_pass_through(self):
        value = [{"title": "x"}]
        assert decode_payload(value, "events") is value

    def test_invalid_json_is_malformed(self):
        with pytest.raises(MalformedInput) as exc_info:
            decode_payload("{not json", "events[2]")
        assert "events[2]" in exc_info.value.message

    def test_invalid_utf8_is_malformed(self):
        with pytest.raises(MalformedInput) as exc_info:
            decode_payload(b'{"title": "caf\xe9"}', "patch")
        assert "patch is not valid UTF-8" in exc_info.value.message


def test_summarize_event_renders_local_times():
    event = Event(
        id="e1",
        user_id="alice",
        title="Gym",
        start=datetime(2026, 10, 18, 7, tzinfo=UTC),
        end=datetime(2026, 10, 18, 8, tzinfo=UTC),
        memo="leg day",
        source=EventSource.MANUAL,
    )
    summary = summarize_event(event, ZoneInfo("Europe/Berlin"))

    assert summary["start"] == "2026-10-18T07:00:00.000000Z"
    assert summary["start_local"] == "Sun 2026-10-18 09:00 CEST"
    assert summary["end_local"] == "Sun 2026-10-18 10:00 CEST"
    assert summary["source"] == "manual"
    assert summary["memo"] == "leg day"


def test_summarize_event_without_zone_has_no_local_fields():
    event = Event(
        id="e1",
        user_id="alice",
        title="Gym",
        start=datetime(2026, 10, 18, 7, tzinfo=UTC),
        end=datetime(2026, 10, 18, 8, tzinfo=UTC),
    )
    assert "start_local" not in summarize_event(event)
