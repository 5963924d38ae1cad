"""Agent processing module."""

from .agent_processor import AgentProcessor, AgentResponse, PydanticAIModelAdapter
from .prompts import SYSTEM_PROMPT, format_context_block, get_system_prompt

__all__ = [
    "AgentProcessor",
    "AgentResponse",
    "PydanticAIModelAdapter",
    "SYSTEM_PROMPT",
    "format_context_block",
    "get_system_prompt",
]
