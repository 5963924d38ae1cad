"""Shared plumbing for the calendar tools."""

import logging
from datetime import tzinfo
from typing import Optional

from ..context.models import TurnContext
from ..notifications import Notifier
from ..scheduling.normalization import resolve_timezone
from ..storage.event_store import EventStore
from .base import BaseTool

logger = logging.getLogger(__name__)


class CalendarTool(BaseTool):
    """Base for tools operating on the owner-scoped event store."""

    def __init__(
        self,
        name: str,
        description: str,
        event_store: EventStore,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(name=name, description=description)
        self.event_store = event_store
        self.notifier = notifier

    @staticmethod
    def _timezone(context: TurnContext) -> tzinfo:
        return resolve_timezone(context.timezone)

    async def _notify(self, user_id: str, text: str) -> None:
        """Send a user-visible confirmation. Not part of the contract, so failures only log."""
        if not self.notifier:
            return
        try:
            await self.notifier.notify(user_id, text)
        except Exception as e:
            logger.warning(f"{self.name}: notification failed: {e}")
