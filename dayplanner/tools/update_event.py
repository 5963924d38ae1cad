"""update_event tool: sparse patch of one owned event."""

import dataclasses
import logging
from datetime import tzinfo
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..auth.session import require_user_id
from ..context.models import TurnContext
from ..errors import InvalidEvent, MalformedInput, NotFound, PlannerError
from ..notifications import Notifier
from ..scheduling.normalization import decode_payload, summarize_event, to_canonical
from ..storage.event_store import EventStore
from .base import ToolResult
from .calendar_base import CalendarTool
from .schemas import PATCH_FIELDS, EventIdInput, EventPatch, describe_validation_error

logger = logging.getLogger(__name__)

COLUMN_FOR_FIELD = {"title": "title", "start": "start_ts", "end": "end_ts", "memo": "memo"}


class UpdateEventTool(CalendarTool):
    """Tool for patching an existing event."""

    def __init__(self, event_store: EventStore, notifier: Optional[Notifier] = None):
        super().__init__(
            name="update_event",
            description=(
                "Update an existing event by id. Only the fields present in "
                "'patch' change; send memo as null to clear it."
            ),
            event_store=event_store,
            notifier=notifier,
        )

    def _parse_patch(self, kwargs: Dict[str, Any], tz: tzinfo) -> EventPatch:
        raw = kwargs.get("patch")
        if raw is None:
            # Some models flatten the patch into the top-level arguments
            raw = {key: kwargs[key] for key in PATCH_FIELDS if key in kwargs}
        else:
            raw = decode_payload(raw, "patch")
        if not isinstance(raw, dict):
            raise MalformedInput("patch must be an object")

        try:
            return EventPatch.model_validate(raw, context={"tz": tz})
        except ValidationError as e:
            raise InvalidEvent(describe_validation_error(e)) from e

    async def execute(self, context: TurnContext, **kwargs) -> ToolResult:
        """
        Update a calendar event.

        Args:
            context: Turn context
            **kwargs:
                - 'id' (str): Event id
                - 'patch' (object or JSON text): any of 'title', 'start', 'end', 'memo'

        Returns:
            ToolResult acknowledging the update, with the updated event
        """
        tz = self._timezone(context)
        try:
            user_id = await require_user_id(context.session)
            try:
                target = EventIdInput.model_validate(kwargs)
            except ValidationError as e:
                raise MalformedInput(describe_validation_error(e)) from e
            patch = self._parse_patch(kwargs, tz)

            current = await self.event_store.get(user_id, target.id)
            if current is None:
                raise NotFound(f"Event {target.id} not found")

            changes = patch.changes()
            start = changes.get("start", current.start)
            end = changes.get("end", current.end)
            if end <= start:
                raise InvalidEvent(
                    f"end {to_canonical(end)} must be after start {to_canonical(start)}"
                )

            if changes:
                columns = {}
                for name, value in changes.items():
                    if name in ("start", "end"):
                        value = to_canonical(value)
                    columns[COLUMN_FOR_FIELD[name]] = value
                if not await self.event_store.update(user_id, target.id, columns):
                    raise NotFound(f"Event {target.id} not found")
        except PlannerError as e:
            logger.warning(f"update_event failed: [{e.kind}] {e.message}")
            return ToolResult.failure(e)

        updated = dataclasses.replace(current, **changes)
        logger.info(f"update_event for {user_id}: {target.id} fields={sorted(changes)}")
        if changes:
            await self._notify(user_id, "Event updated")

        return ToolResult(
            success=True,
            data={"ok": True, "event": summarize_event(updated, tz)},
            message=f"Updated event '{updated.title}'" if changes else "No changes requested",
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema for pydantic_ai."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "Event id (from query_schedule or the day context)",
                    },
                    "patch": {
                        "type": "object",
                        "description": "Fields to change; omitted fields stay as they are",
                        "properties": {
                            "title": {"type": "string", "description": "New title"},
                            "start": {"type": "string", "description": "New start in ISO 8601"},
                            "end": {"type": "string", "description": "New end in ISO 8601"},
                            "memo": {
                                "type": ["string", "null"],
                                "description": "New memo, or null to clear it",
                            },
                        },
                    },
                },
                "required": ["id", "patch"],
            },
        }
