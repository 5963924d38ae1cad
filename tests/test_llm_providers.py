"""Tests for the OpenAI and Ollama providers with mocked clients."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from dayplanner.llm.base import ChatMessage, ToolCall
from dayplanner.llm.ollama_llm import OllamaLLM, to_ollama_message
from dayplanner.llm.openai_llm import OpenAILLM, to_openai_message

TOOLS = [
    {
        "name": "delete_event",
        "description": "Delete an event by id.",
        "parameters": {"type": "object", "properties": {"id": {"type": "string"}}},
    }
]


def openai_completion(content=None, tool_calls=None):
    message = MagicMock()
    message.content = content
    message.tool_calls = tool_calls
    completion = MagicMock()
    completion.choices = [MagicMock(message=message)]
    return completion


def openai_tool_call(call_id, name, arguments):
    call = MagicMock()
    call.id = call_id
    call.function.name = name
    call.function.arguments = arguments
    return call


class TestOpenAILLM:
    """Test OpenAI provider."""

    @pytest.fixture
    def llm(self):
        llm = OpenAILLM(api_key="sk-test", model="gpt-4o-mini", temperature=0.2)
        llm.client = MagicMock()
        llm.client.chat.completions.create = AsyncMock()
        return llm

    @pytest.mark.asyncio
    async def test_text_response(self, llm):
        llm.client.chat.completions.create.return_value = openai_completion(content="Hi")

        response = await llm.generate([ChatMessage(role="user", content="Hello")])

        assert response.text == "Hi"
        assert response.tool_calls == []
        params = llm.client.chat.completions.create.call_args.kwargs
        assert params["model"] == "gpt-4o-mini"
        assert params["temperature"] == 0.2
        assert "tools" not in params

    @pytest.mark.asyncio
    async def test_tool_calls_parsed(self, llm):
        llm.client.chat.completions.create.return_value = openai_completion(
            tool_calls=[openai_tool_call("call_1", "delete_event", '{"id": "e1"}')]
        )

        response = await llm.generate([ChatMessage(role="user", content="Delete e1")], tools=TOOLS)

        assert response.tool_calls == [ToolCall(id="call_1", name="delete_event", arguments={"id": "e1"})]
        params = llm.client.chat.completions.create.call_args.kwargs
        assert params["tools"] == [{"type": "function", "function": TOOLS[0]}]

    @pytest.mark.asyncio
    async def test_non_json_arguments_kept_raw(self, llm):
        llm.client.chat.completions.create.return_value = openai_completion(
            tool_calls=[openai_tool_call("call_1", "delete_event", "{id: e1")]
        )

        response = await llm.generate([ChatMessage(role="user", content="Delete e1")], tools=TOOLS)

        assert response.tool_calls[0].arguments == {"_raw": "{id: e1"}

    def test_message_conversion(self):
        assistant = ChatMessage(
            role="assistant",
            tool_calls=[ToolCall(id="call_1", name="delete_event", arguments={"id": "e1"})],
        )
        tool = ChatMessage(role="tool", content='{"ok": true}', tool_call_id="call_1")

        converted = to_openai_message(assistant)
        assert converted["tool_calls"][0]["id"] == "call_1"
        assert json.loads(converted["tool_calls"][0]["function"]["arguments"]) == {"id": "e1"}
        assert to_openai_message(tool) == {
            "role": "tool",
            "tool_call_id": "call_1",
            "content": '{"ok": true}',
        }

    def test_model_name(self, llm):
        assert llm.get_model_name() == "gpt-4o-mini"


class TestOllamaLLM:
    """Test Ollama provider."""

    @pytest.fixture
    def llm(self):
        llm = OllamaLLM(model="llama3.1", context_window=8192)
        llm.client = MagicMock()
        return llm

    @pytest.mark.asyncio
    async def test_tool_calls_parsed(self, llm):
        llm.client.chat.return_value = {
            "message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [{"function": {"name": "delete_event", "arguments": {"id": "e1"}}}],
            }
        }

        response = await llm.generate([ChatMessage(role="user", content="Delete e1")], tools=TOOLS)

        assert len(response.tool_calls) == 1
        assert response.tool_calls[0].name == "delete_event"
        assert response.tool_calls[0].arguments == {"id": "e1"}
        assert response.tool_calls[0].id.startswith("call_")

        params = llm.client.chat.call_args.kwargs
        assert params["options"]["num_ctx"] == 8192
        assert params["tools"][0]["function"]["name"] == "delete_event"

    @pytest.mark.asyncio
    async def test_text_response(self, llm):
        llm.client.chat.return_value = {"message": {"role": "assistant", "content": "Hi"}}

        response = await llm.generate([ChatMessage(role="user", content="Hello")])

        assert response.text == "Hi"
        assert response.tool_calls == []

    @pytest.mark.asyncio
    async def test_client_errors_propagate(self, llm):
        llm.client.chat.side_effect = ConnectionError("refused")

        with pytest.raises(ConnectionError):
            await llm.generate([ChatMessage(role="user", content="Hello")])

    def test_tool_message_carries_tool_name(self):
        message = ChatMessage(role="tool", content="{}", tool_call_id="call_1", name="delete_event")
        assert to_ollama_message(message) == {
            "role": "tool",
            "content": "{}",
            "tool_name": "delete_event",
        }
