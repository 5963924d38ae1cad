"""Centralized tool registry."""

import logging
from typing import Dict, List, Optional

from ..config.config_schema import AppConfig
from ..notifications import Notifier
from ..scheduling.policy import PolicyChecker
from ..storage.event_store import EventStore
from ..storage.preferences_store import PreferencesStore
from .base import BaseTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Centralized registry for all tools."""

    def __init__(self):
        """Initialize empty tool registry."""
        self._tools: Dict[str, BaseTool] = {}

    def register_tool(self, tool: BaseTool) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool instance to register
        """
        self._tools[tool.get_name()] = tool

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """
        Get a tool by name.

        Args:
            name: Tool name

        Returns:
            Tool instance or None if not found
        """
        return self._tools.get(name)

    def get_all_tools(self) -> List[BaseTool]:
        """
        Get all registered tools.

        Returns:
            List of all registered tools
        """
        return list(self._tools.values())

    def initialize_tools(
        self,
        config: AppConfig,
        event_store: EventStore,
        preferences_store: PreferencesStore,
        notifier: Optional[Notifier] = None,
    ) -> None:
        """
        Register the four scheduling tools.

        Args:
            config: Application configuration
            event_store: Event persistence collaborator
            preferences_store: Preferences collaborator (read for the policy check)
            notifier: Optional sink for mutation confirmations
        """
        from .create_events import CreateEventsTool
        from .delete_event import DeleteEventTool
        from .query_schedule import QueryScheduleTool
        from .update_event import UpdateEventTool

        policy = PolicyChecker(
            enforce_time_blocks=config.agent.policy.enforce_time_blocks
        )

        self.register_tool(QueryScheduleTool(event_store))
        self.register_tool(
            CreateEventsTool(
                event_store,
                preferences_store=preferences_store,
                policy=policy,
                notifier=notifier,
            )
        )
        self.register_tool(UpdateEventTool(event_store, notifier=notifier))
        self.register_tool(DeleteEventTool(event_store, notifier=notifier))

        logger.debug(
            f"Registered tools: {', '.join(self._tools)} "
            f"(time blocks {'enforced' if policy.enforce_time_blocks else 'advisory'})"
        )
