"""create_events tool: all-or-nothing batch creation of calendar events."""

import logging
import uuid
from datetime import tzinfo
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..auth.session import require_user_id
from ..context.models import TurnContext
from ..errors import InvalidEvent, MalformedInput, PlannerError
from ..notifications import Notifier
from ..scheduling.models import Event, Preferences
from ..scheduling.normalization import decode_payload, resolve_timezone, timezone_name
from ..scheduling.policy import PolicyChecker
from ..storage.event_store import EventStore
from ..storage.preferences_store import PreferencesStore
from .base import ToolResult
from .calendar_base import CalendarTool
from .schemas import ProposedEvent, describe_validation_error

logger = logging.getLogger(__name__)


class CreateEventsTool(CalendarTool):
    """Tool for creating a batch of events in one atomic write."""

    def __init__(
        self,
        event_store: EventStore,
        preferences_store: Optional[PreferencesStore] = None,
        policy: Optional[PolicyChecker] = None,
        notifier: Optional[Notifier] = None,
    ):
        """
        Initialize create_events tool.

        Args:
            event_store: Event persistence collaborator
            preferences_store: Source of time blocks for the policy check
            policy: Time-block policy (advisory unless enforcement is on)
            notifier: Sink for the "Added N event(s)" confirmation
        """
        super().__init__(
            name="create_events",
            description=(
                "Create one or more calendar events for the user in a single "
                "all-or-nothing batch. Only call after the user has accepted the plan."
            ),
            event_store=event_store,
            notifier=notifier,
        )
        self.preferences_store = preferences_store
        self.policy = policy

    def _decode_batch(self, raw: Any) -> List[Dict[str, Any]]:
        if raw is None:
            raise MalformedInput("events is required")

        batch = decode_payload(raw, "events")
        if not isinstance(batch, list):
            raise MalformedInput("events must be a list of event objects")

        items = []
        for index, item in enumerate(batch):
            item = decode_payload(item, f"events[{index}]")
            if not isinstance(item, dict):
                raise MalformedInput(f"events[{index}] must be an object")
            items.append(item)
        return items

    def _validate_batch(
        self, user_id: str, items: List[Dict[str, Any]], tz: tzinfo
    ) -> List[Event]:
        events = []
        for index, item in enumerate(items):
            try:
                proposed = ProposedEvent.model_validate(item, context={"tz": tz})
            except ValidationError as e:
                raise InvalidEvent(describe_validation_error(e), index=index) from e
            events.append(
                Event(
                    id=uuid.uuid4().hex,
                    user_id=user_id,
                    title=proposed.title,
                    start=proposed.start,
                    end=proposed.end,
                    memo=proposed.memo,
                    source=proposed.source,
                )
            )
        return events

    async def _check_policy(
        self, user_id: str, events: List[Event], tz: tzinfo
    ) -> List[str]:
        if not self.policy or not self.preferences_store or not events:
            return []

        try:
            preferences = await self.preferences_store.get(user_id) or Preferences()
        except PlannerError as e:
            if self.policy.enforce_time_blocks:
                raise
            logger.warning(f"create_events: skipping advisory policy check: {e.message}")
            return []

        block_tz = resolve_timezone(preferences.timezone, timezone_name(tz))
        return self.policy.check(events, preferences, block_tz)

    async def execute(self, context: TurnContext, **kwargs) -> ToolResult:
        """
        Create calendar events.

        Args:
            context: Turn context
            **kwargs: Must contain:
                - 'events' (list or JSON text): Each with 'title', 'start', 'end',
                  optional 'memo' and 'source' (default 'ai')

        Returns:
            ToolResult with the created count
        """
        tz = self._timezone(context)
        try:
            user_id = await require_user_id(context.session)
            items = self._decode_batch(kwargs.get("events"))
            events = self._validate_batch(user_id, items, tz)
            warnings = await self._check_policy(user_id, events, tz)
            created = await self.event_store.insert_many(events)
        except PlannerError as e:
            logger.warning(f"create_events failed: [{e.kind}] {e.message}")
            return ToolResult.failure(e)

        logger.info(f"create_events for {user_id}: {created} event(s) created")
        if created:
            await self._notify(user_id, f"Added {created} event(s)")

        return ToolResult(
            success=True,
            data={
                "created": created,
                "ids": [event.id for event in events],
                "warnings": warnings,
            },
            message=f"Created {created} event(s)",
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema for pydantic_ai."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "events": {
                        "type": "array",
                        "description": "Events to create; all are created or none",
                        "items": {
                            "type": "object",
                            "properties": {
                                "title": {
                                    "type": "string",
                                    "description": "Event title (non-empty)",
                                },
                                "start": {
                                    "type": "string",
                                    "description": "Start in ISO 8601 (e.g., 2026-10-18T09:00:00+02:00)",
                                },
                                "end": {
                                    "type": "string",
                                    "description": "End in ISO 8601, after start",
                                },
                                "memo": {
                                    "type": "string",
                                    "description": "Optional note",
                                },
                                "source": {
                                    "type": "string",
                                    "enum": ["ai", "manual", "imported"],
                                    "description": "Provenance tag (default: ai)",
                                },
                            },
                            "required": ["title", "start", "end"],
                        },
                    },
                },
                "required": ["events"],
            },
        }
