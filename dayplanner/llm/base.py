"""Base LLM interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """Represents a tool call from the LLM."""

    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ChatMessage:
    """One provider-neutral chat message."""

    role: str  # "system", "user", "assistant" or "tool"
    content: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


@dataclass
class LLMResponse:
    """Response from LLM that may contain text and/or tool calls."""

    text: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)


class BaseLLM(ABC):
    """Abstract base class for LLM implementations."""

    async def generate(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            messages: Conversation so far, including tool calls and tool results
            tools: Optional list of tool definitions ({name, description, parameters})
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse with text and/or tool calls
        """
        logger.debug(
            f"LLM request - Model: {self.get_model_name()}, "
            f"Messages: {len(messages)}, Tools: {len(tools) if tools else 0}"
        )
        response = await self._generate_impl(messages, tools, **kwargs)
        logger.debug(
            f"LLM response - Text length: {len(response.text or '')}, "
            f"Tool calls: {[tc.name for tc in response.tool_calls]}"
        )
        return response

    @abstractmethod
    async def _generate_impl(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        """Provider call. Subclasses must implement this."""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the model name being used.

        Returns:
            Model name string
        """
        pass

    async def validate(self) -> None:
        """
        Validate that the LLM is accessible and working.

        Raises:
            Exception: If validation fails
        """
        await self.generate(
            [
                ChatMessage(role="system", content="Respond with just 'Hi'."),
                ChatMessage(role="user", content="Hello"),
            ]
        )
