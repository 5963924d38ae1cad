"""Ollama LLM implementation."""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional

import ollama

from .base import BaseLLM, ChatMessage, LLMResponse, ToolCall

logger = logging.getLogger(__name__)


def to_ollama_message(message: ChatMessage) -> Dict[str, Any]:
    """Convert a ChatMessage to the Ollama chat format."""
    payload: Dict[str, Any] = {"role": message.role, "content": message.content or ""}
    if message.role == "tool" and message.name:
        payload["tool_name"] = message.name
    if message.tool_calls:
        payload["tool_calls"] = [
            {"function": {"name": tc.name, "arguments": tc.arguments}}
            for tc in message.tool_calls
        ]
    return payload


class OllamaLLM(BaseLLM):
    """Ollama LLM implementation for local models."""

    def __init__(
        self,
        model: str,
        base_url: str = "http://localhost:11434",
        temperature: float = 0.7,
        max_tokens: int = 2048,
        context_window: Optional[int] = None,
    ):
        """
        Initialize Ollama LLM.

        Args:
            model: Model name (e.g., "llama3.1", "qwen2.5")
            base_url: Ollama server base URL
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            context_window: Context window size
        """
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.context_window = context_window
        self.client = ollama.Client(host=base_url)

    async def _generate_impl(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        options = {
            "temperature": kwargs.get("temperature", self.temperature),
            "num_predict": kwargs.get("max_tokens", self.max_tokens),
        }
        if self.context_window:
            options["num_ctx"] = self.context_window

        api_params = {
            "model": self.model,
            "messages": [to_ollama_message(m) for m in messages],
            "options": options,
        }
        if tools:
            api_params["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool["name"],
                        "description": tool.get("description", ""),
                        "parameters": tool.get("parameters", {}),
                    },
                }
                for tool in tools
            ]

        try:
            # The client is blocking
            response = await asyncio.to_thread(lambda: self.client.chat(**api_params))
        except Exception as e:
            logger.error(
                f"Ollama LLM generation failed - Model: {self.model}, "
                f"Base URL: {self.base_url}, Error: {e}"
            )
            raise

        message = response["message"]
        tool_calls = []
        for tc in message.get("tool_calls") or []:
            func = tc["function"]
            tool_calls.append(
                ToolCall(
                    id=f"call_{uuid.uuid4().hex[:12]}",
                    name=func["name"],
                    arguments=dict(func.get("arguments") or {}),
                )
            )

        return LLMResponse(text=message.get("content"), tool_calls=tool_calls)

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model
