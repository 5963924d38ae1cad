"""OpenAI LLM implementation."""

import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from .base import BaseLLM, ChatMessage, LLMResponse, ToolCall

logger = logging.getLogger(__name__)


def to_openai_message(message: ChatMessage) -> Dict[str, Any]:
    """Convert a ChatMessage to the chat.completions wire format."""
    if message.role == "tool":
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "content": message.content or "",
        }

    payload: Dict[str, Any] = {"role": message.role, "content": message.content}
    if message.tool_calls:
        payload["tool_calls"] = [
            {
                "id": tc.id,
                "type": "function",
                "function": {"name": tc.name, "arguments": json.dumps(tc.arguments)},
            }
            for tc in message.tool_calls
        ]
    return payload


class OpenAILLM(BaseLLM):
    """OpenAI LLM implementation for GPT models (and OpenAI-compatible servers)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 2048,
        organization_id: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """
        Initialize OpenAI LLM.

        Args:
            api_key: OpenAI API key
            model: Model name
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            organization_id: Optional organization ID
            base_url: Optional API base URL
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.client = AsyncOpenAI(
            api_key=api_key,
            organization=organization_id,
            base_url=base_url,
        )

    async def _generate_impl(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        api_params = {
            "model": kwargs.get("model", self.model),
            "messages": [to_openai_message(m) for m in messages],
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if tools:
            api_params["tools"] = [
                {"type": "function", "function": tool} for tool in tools
            ]

        response = await self.client.chat.completions.create(**api_params)
        message = response.choices[0].message

        tool_calls = []
        for tc in message.tool_calls or []:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except json.JSONDecodeError:
                # Leave malformed arguments for the tool layer to reject
                logger.warning(f"Tool call {tc.function.name} sent non-JSON arguments")
                arguments = {"_raw": tc.function.arguments}
            tool_calls.append(
                ToolCall(id=tc.id, name=tc.function.name, arguments=arguments)
            )

        return LLMResponse(text=message.content, tool_calls=tool_calls)

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model
