"""delete_event tool."""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..auth.session import require_user_id
from ..context.models import TurnContext
from ..errors import MalformedInput, NotFound, PlannerError
from ..notifications import Notifier
from ..storage.event_store import EventStore
from .base import ToolResult
from .calendar_base import CalendarTool
from .schemas import EventIdInput, describe_validation_error

logger = logging.getLogger(__name__)


class DeleteEventTool(CalendarTool):
    """Tool for deleting an event. Not idempotent: a repeat delete reports NotFound."""

    def __init__(self, event_store: EventStore, notifier: Optional[Notifier] = None):
        super().__init__(
            name="delete_event",
            description="Delete an event by id.",
            event_store=event_store,
            notifier=notifier,
        )

    async def execute(self, context: TurnContext, **kwargs) -> ToolResult:
        try:
            user_id = await require_user_id(context.session)
            try:
                target = EventIdInput.model_validate(kwargs)
            except ValidationError as e:
                raise MalformedInput(describe_validation_error(e)) from e

            if not await self.event_store.delete(user_id, target.id):
                raise NotFound(f"Event {target.id} not found")
        except PlannerError as e:
            logger.warning(f"delete_event failed: [{e.kind}] {e.message}")
            return ToolResult.failure(e)

        logger.info(f"delete_event for {user_id}: {target.id}")
        await self._notify(user_id, "Event deleted")
        return ToolResult(
            success=True,
            data={"ok": True, "deleted_id": target.id},
            message=f"Deleted event {target.id}",
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema for pydantic_ai."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": "Event id"},
                },
                "required": ["id"],
            },
        }
