"""Tests for prompt generation and template variable injection."""

import json
from datetime import date, datetime, timezone

from dayplanner.agent.prompts import (
    SYSTEM_PROMPT,
    format_context_block,
    get_current_datetime,
    get_system_prompt,
    inject_template_variables,
)
from dayplanner.scheduling.models import ContextBundle, DayRange


def test_get_current_datetime_utc():
    """Test datetime formatting in UTC."""
    result = get_current_datetime("UTC")
    assert len(result) == 19
    datetime.strptime(result, "%Y-%m-%d %H:%M:%S")


def test_get_current_datetime_with_timezone():
    result = get_current_datetime("America/New_York")
    datetime.strptime(result, "%Y-%m-%d %H:%M:%S")


def test_inject_template_variables_basic():
    """Test basic template variable injection."""
    template = "Time: {current_datetime}, TZ: {timezone}, App: {app_name}"
    result = inject_template_variables(template, timezone="Europe/Berlin", app_name="Planner X")

    assert "Europe/Berlin" in result
    assert "Planner X" in result
    assert "{current_datetime}" not in result


def test_inject_template_variables_datetime_disabled():
    result = inject_template_variables("Now: {current_datetime}", inject_datetime=False)
    assert result == "Now: {current_datetime}"


def test_get_system_prompt_mentions_tools():
    prompt = get_system_prompt(timezone="Asia/Tokyo", app_name="Day Planner")

    for name in ("query_schedule", "create_events", "update_event", "delete_event"):
        assert name in prompt
    assert "Asia/Tokyo" in prompt
    assert "{timezone}" not in prompt


def test_system_prompt_placeholders():
    for placeholder in ("{current_datetime}", "{timezone}", "{app_name}"):
        assert placeholder in SYSTEM_PROMPT


def test_format_context_block_is_json():
    """Test the context block embeds the bundle as parseable JSON."""
    bundle = ContextBundle(
        timezone="UTC",
        reference_date=date(2026, 10, 18),
        day_range=DayRange(
            start=datetime(2026, 10, 18, tzinfo=timezone.utc),
            end=datetime(2026, 10, 18, 23, 59, 59, 999999, tzinfo=timezone.utc),
        ),
        goals=["Sleep by 23:00"],
        rules=["Confirm before writing."],
    )

    block = format_context_block(bundle)
    header, body = block.split("\n", 1)

    assert header == "Planner context (JSON):"
    data = json.loads(body)
    assert data["selected_date"] == "2026-10-18"
    assert data["goals"] == ["Sleep by 23:00"]
    assert data["rules"] == ["Confirm before writing."]
