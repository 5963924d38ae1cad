"""Centralized system prompts for the planning agent."""

import json
from datetime import datetime
from zoneinfo import ZoneInfo

from ..scheduling.models import ContextBundle

SYSTEM_PROMPT = """You are the scheduling assistant inside {app_name}, a personal day planner.

You help the user plan their day and keep their calendar accurate. You can:
- Read events in any time range with query_schedule
- Add one or more events at once with create_events
- Change the title, times or memo of an existing event with update_event
- Remove an event with delete_event

Current Information:
- Current datetime: {current_datetime}
- Timezone: {timezone}

Every turn includes a JSON block describing the day the user is looking at:
the selected date, its events, the user's enabled goals, their protected time
blocks and the planning rules. Treat that block as the current state of the
calendar and follow its rules.

When interacting with the user:
1. Be concise. Show proposed plans as a short list of times and titles
2. Propose first, write second. Only call create_events after the user accepts
3. Use event ids exactly as they appear in the context or in query results
4. If a tool returns ok=false, read error_kind and error, fix the arguments and try again or explain the problem
5. Times you send must be ISO 8601; include the UTC offset whenever you can
"""


def get_current_datetime(timezone: str) -> str:
    """
    Get current datetime formatted for prompt injection.

    Args:
        timezone: IANA timezone string (e.g., 'America/New_York', 'UTC')

    Returns:
        Formatted datetime string (YYYY-MM-DD HH:MM:SS)
    """
    tz = ZoneInfo(timezone)
    now = datetime.now(tz)
    return now.strftime("%Y-%m-%d %H:%M:%S")


def inject_template_variables(
    template: str,
    timezone: str = "UTC",
    app_name: str = "Day Planner",
    inject_datetime: bool = True,
) -> str:
    """
    Inject template variables into prompt string.

    Replaces {current_datetime}, {timezone} and {app_name}. When
    inject_datetime is False the datetime placeholder is left in place.
    """
    replacements = {
        "timezone": timezone,
        "app_name": app_name,
        "current_datetime": (
            get_current_datetime(timezone) if inject_datetime else "{current_datetime}"
        ),
    }
    return template.format(**replacements)


def get_system_prompt(
    timezone: str = "UTC",
    app_name: str = "Day Planner",
    inject_datetime: bool = True,
) -> str:
    """
    Get the planner system prompt with template variables injected.

    Args:
        timezone: IANA timezone string for datetime formatting
        app_name: Application name shown to the agent
        inject_datetime: Whether to inject current datetime

    Returns:
        Formatted system prompt
    """
    return inject_template_variables(
        SYSTEM_PROMPT,
        timezone=timezone,
        app_name=app_name,
        inject_datetime=inject_datetime,
    )


def format_context_block(bundle: ContextBundle) -> str:
    """Render the per-turn planner context as a labelled JSON block."""
    body = json.dumps(bundle.to_dict(), indent=2, ensure_ascii=False, default=str)
    return f"Planner context (JSON):\n{body}"
