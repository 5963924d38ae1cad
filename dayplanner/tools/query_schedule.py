"""query_schedule tool: read the user's events in an instant range."""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..auth.session import require_user_id
from ..context.models import TurnContext
from ..errors import InvalidRange, PlannerError
from ..scheduling.normalization import summarize_event, timezone_name, to_canonical
from ..storage.event_store import EventStore
from .base import ToolResult
from .calendar_base import CalendarTool
from .schemas import QueryScheduleInput, describe_validation_error

logger = logging.getLogger(__name__)


class QueryScheduleTool(CalendarTool):
    """Tool for reading events from the user's calendar."""

    def __init__(self, event_store: EventStore):
        super().__init__(
            name="query_schedule",
            description=(
                "Fetch the user's calendar events whose start lies within "
                "[startInstant, endInstant], ordered by start time. "
                "Use this for any day other than the selected one."
            ),
            event_store=event_store,
        )

    async def execute(self, context: TurnContext, **kwargs) -> ToolResult:
        """
        Read calendar events.

        Args:
            context: Turn context
            **kwargs:
                - 'startInstant' (str): Range start, ISO 8601
                - 'endInstant' (str): Range end, ISO 8601 (inclusive)

        Returns:
            ToolResult with events, each with canonical and local times
        """
        tz = self._timezone(context)
        try:
            user_id = await require_user_id(context.session)

            try:
                args = QueryScheduleInput.model_validate(kwargs, context={"tz": tz})
            except ValidationError as e:
                raise InvalidRange(describe_validation_error(e)) from e
            if args.start > args.end:
                raise InvalidRange(
                    f"start {args.start.isoformat()} is after end {args.end.isoformat()}"
                )

            logger.info(f"query_schedule for {user_id}: {args.start} .. {args.end}")
            events = await self.event_store.list_range(user_id, args.start, args.end)
        except PlannerError as e:
            logger.warning(f"query_schedule failed: [{e.kind}] {e.message}")
            return ToolResult.failure(e)

        summaries = [summarize_event(event, tz) for event in events]
        return ToolResult(
            success=True,
            data={
                "start": to_canonical(args.start),
                "end": to_canonical(args.end),
                "timezone": timezone_name(tz),
                "events": summaries,
                "count": len(summaries),
            },
            message=f"Found {len(summaries)} event(s)",
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema for pydantic_ai."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "startInstant": {
                        "type": "string",
                        "description": "Range start in ISO 8601 (e.g., 2026-10-18T00:00:00+02:00)",
                    },
                    "endInstant": {
                        "type": "string",
                        "description": "Range end in ISO 8601, inclusive",
                    },
                },
                "required": ["startInstant", "endInstant"],
            },
        }
