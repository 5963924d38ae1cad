"""LLM abstraction module."""

from .base import BaseLLM, ChatMessage, LLMResponse, ToolCall
from .ollama_llm import OllamaLLM
from .openai_llm import OpenAILLM

__all__ = ["BaseLLM", "ChatMessage", "LLMResponse", "ToolCall", "OllamaLLM", "OpenAILLM"]
