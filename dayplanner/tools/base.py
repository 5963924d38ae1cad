"""Base tool interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..context.models import TurnContext
from ..errors import PlannerError


@dataclass
class ToolResult:
    """Result from tool execution."""

    success: bool
    data: Any
    error: Optional[str] = None
    message: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def failure(cls, error: PlannerError) -> "ToolResult":
        """Structured failure carrying the error kind and a readable message."""
        return cls(
            success=False,
            data=None,
            error=error.message,
            error_kind=error.kind,
        )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-able form returned to the agent runtime."""
        if self.success:
            return {"ok": True, "message": self.message, "data": self.data}
        return {
            "ok": False,
            "error_kind": self.error_kind or "Error",
            "error": self.error or "Unknown error",
        }


class BaseTool(ABC):
    """Abstract base class for all tools."""

    def __init__(self, name: str, description: str):
        """
        Initialize tool.

        Args:
            name: Tool name (part of the agent protocol, keep stable)
            description: Tool description
        """
        self.name = name
        self.description = description

    @abstractmethod
    async def execute(self, context: TurnContext, **kwargs) -> ToolResult:
        """
        Execute the tool for the current turn.

        Args:
            context: Request-scoped turn context (session, timezone)
            **kwargs: Tool-specific parameters

        Returns:
            ToolResult with execution result
        """
        pass

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """
        Get tool schema for pydantic_ai registration.

        Returns:
            Dictionary with tool schema definition
        """
        pass

    def get_name(self) -> str:
        """Get tool name."""
        return self.name

    def get_description(self) -> str:
        """Get tool description."""
        return self.description
