"""Tool contract layer exposed to the agent."""

from .base import BaseTool, ToolResult
from .create_events import CreateEventsTool
from .delete_event import DeleteEventTool
from .query_schedule import QueryScheduleTool
from .registry import ToolRegistry
from .update_event import UpdateEventTool

__all__ = [
    "BaseTool",
    "ToolResult",
    "ToolRegistry",
    "QueryScheduleTool",
    "CreateEventsTool",
    "UpdateEventTool",
    "DeleteEventTool",
]
