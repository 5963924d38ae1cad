"""Agent processor using pydantic_ai."""

import dataclasses
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic_ai import Agent, RunContext
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    RetryPromptPart,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition
from pydantic_ai.usage import RequestUsage

from ..context.models import TurnContext
from ..llm.base import BaseLLM, ChatMessage, ToolCall
from ..scheduling.models import ContextBundle
from ..tools.base import BaseTool
from .prompts import SYSTEM_PROMPT, format_context_block

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm having trouble processing your request right now. Please try again later."


def _user_text(part: UserPromptPart) -> str:
    if isinstance(part.content, str):
        return part.content
    return "\n".join(str(item) for item in part.content)


def to_chat_messages(system_prompt: str, messages: List[ModelMessage]) -> List[ChatMessage]:
    """
    Flatten a pydantic_ai transcript into provider-neutral chat messages.

    System prompt parts and run instructions are folded into the leading
    system message; tool returns and tool retries keep their call ids.
    """
    system_sections = [system_prompt] if system_prompt else []
    chat: List[ChatMessage] = []

    for msg in messages:
        if isinstance(msg, ModelRequest):
            instructions = getattr(msg, "instructions", None)
            if instructions and instructions not in system_sections:
                system_sections.append(instructions)
            for part in msg.parts:
                if isinstance(part, SystemPromptPart):
                    if part.content:
                        system_sections.append(part.content)
                elif isinstance(part, UserPromptPart):
                    chat.append(ChatMessage(role="user", content=_user_text(part)))
                elif isinstance(part, ToolReturnPart):
                    chat.append(
                        ChatMessage(
                            role="tool",
                            content=part.model_response_str(),
                            tool_call_id=part.tool_call_id,
                            name=part.tool_name,
                        )
                    )
                elif isinstance(part, RetryPromptPart):
                    if part.tool_name:
                        chat.append(
                            ChatMessage(
                                role="tool",
                                content=part.model_response(),
                                tool_call_id=part.tool_call_id,
                                name=part.tool_name,
                            )
                        )
                    else:
                        chat.append(ChatMessage(role="user", content=part.model_response()))
        elif isinstance(msg, ModelResponse):
            texts = []
            calls = []
            for part in msg.parts:
                if isinstance(part, TextPart):
                    texts.append(part.content)
                elif isinstance(part, ToolCallPart):
                    calls.append(
                        ToolCall(
                            id=part.tool_call_id,
                            name=part.tool_name,
                            arguments=part.args_as_dict(),
                        )
                    )
            chat.append(
                ChatMessage(
                    role="assistant",
                    content="\n".join(texts) if texts else None,
                    tool_calls=calls,
                )
            )

    if system_sections:
        chat.insert(0, ChatMessage(role="system", content="\n\n".join(system_sections)))
    return chat


class PydanticAIModelAdapter(Model):
    """Adapter to use our BaseLLM with pydantic_ai."""

    def __init__(self, llm: BaseLLM, system_prompt: Optional[str] = None):
        """
        Initialize adapter.

        Args:
            llm: BaseLLM instance
            system_prompt: System prompt for the model
        """
        self.llm = llm
        self._system_prompt = system_prompt or ""
        super().__init__()

    @property
    def system(self) -> str:
        """Get system prompt."""
        return self._system_prompt

    @property
    def model_name(self) -> str:
        """Get model name."""
        return self.llm.get_model_name()

    async def request(
        self,
        messages: List[ModelMessage],
        model_settings: Optional[ModelSettings] = None,
        model_request_parameters: Optional[ModelRequestParameters] = None,
    ) -> ModelResponse:
        """
        Make a request to the LLM.

        Args:
            messages: Transcript so far
            model_settings: Optional model settings
            model_request_parameters: Optional request parameters (function tools)

        Returns:
            ModelResponse with the generated text and/or tool calls
        """
        chat = to_chat_messages(self._system_prompt, messages)

        tools = None
        if model_request_parameters and model_request_parameters.function_tools:
            tools = [
                {
                    "name": tool.name,
                    "description": tool.description or "",
                    "parameters": tool.parameters_json_schema,
                }
                for tool in model_request_parameters.function_tools
            ]

        kwargs = {}
        if model_settings:
            for key in ("temperature", "max_tokens"):
                if model_settings.get(key) is not None:
                    kwargs[key] = model_settings[key]

        logger.debug(f"Sending {len(chat)} message(s) to {self.model_name}")
        response = await self.llm.generate(chat, tools=tools, **kwargs)

        response_parts = []
        for tc in response.tool_calls:
            response_parts.append(
                ToolCallPart(tool_name=tc.name, args=tc.arguments, tool_call_id=tc.id)
            )
        if response.text:
            response_parts.append(TextPart(content=response.text))
        if not response_parts:
            response_parts.append(TextPart(content=""))

        # Providers are not asked for token counts
        return ModelResponse(
            parts=response_parts,
            usage=RequestUsage(input_tokens=0, output_tokens=0),
            model_name=self.model_name,
        )


class AgentResponse:
    """Response from agent processing."""

    def __init__(
        self,
        text: str,
        tool_calls: Optional[List[Dict[str, Any]]] = None,
        messages: Optional[List[ModelMessage]] = None,
    ):
        """
        Initialize agent response.

        Args:
            text: Response text
            tool_calls: Tool calls made during the turn ({name, args})
            messages: Full transcript to carry into the next turn
        """
        self.text = text
        self.tool_calls = tool_calls or []
        self.messages = messages or []


class AgentProcessor:
    """Processes planner turns through a pydantic_ai agent."""

    def __init__(
        self,
        llm: BaseLLM,
        tools: List[BaseTool],
        system_prompt: str = SYSTEM_PROMPT,
        agent_name: str = "planner",
    ):
        """
        Initialize agent processor.

        Args:
            llm: LLM instance
            tools: List of available tools
            system_prompt: System prompt for the agent
            agent_name: Name used in log messages
        """
        self.llm = llm
        self.system_prompt = system_prompt
        self.agent_name = agent_name
        self.tools = {tool.get_name(): tool for tool in tools}

        model = PydanticAIModelAdapter(llm, system_prompt=system_prompt)
        self.agent = Agent(model=model, deps_type=TurnContext)

        # Re-evaluated every turn, including turns that carry history
        @self.agent.system_prompt(dynamic=True)
        def planner_context(ctx: RunContext[TurnContext]) -> str:
            return ctx.deps.metadata.get("context_block", "")

        for tool in tools:
            self._register_tool(tool)

    def _register_tool(self, tool: BaseTool) -> None:
        """
        Register a tool with the pydantic_ai agent.

        The tool's own JSON schema replaces the one inferred from the
        wrapper so the model sees the real argument names.
        """
        schema = tool.get_schema()
        tool_name = schema["name"]
        parameters = schema.get("parameters") or {"type": "object", "properties": {}}

        async def tool_wrapper(ctx: RunContext[TurnContext], **kwargs) -> str:
            logger.info(f"[{self.agent_name}] Calling tool {tool_name}")
            logger.debug(f"Tool {tool_name} arguments: {kwargs}")
            result = await tool.execute(ctx.deps, **kwargs)
            if result.success:
                logger.debug(f"Tool {tool_name} succeeded: {result.message}")
            else:
                logger.info(f"Tool {tool_name} failed ({result.error_kind}): {result.error}")
            return json.dumps(result.to_payload(), default=str)

        async def use_declared_schema(
            ctx: RunContext[TurnContext], tool_def: ToolDefinition
        ) -> ToolDefinition:
            return dataclasses.replace(tool_def, parameters_json_schema=parameters)

        tool_wrapper.__name__ = tool_name
        tool_wrapper.__doc__ = schema["description"]

        self.agent.tool(tool_wrapper, prepare=use_declared_schema)
        logger.debug(f"Registered tool: {tool_name}")

    async def process_command(
        self,
        message: str,
        context: TurnContext,
        bundle: Optional[ContextBundle] = None,
        history: Optional[List[ModelMessage]] = None,
    ) -> AgentResponse:
        """
        Process one user message through the agent.

        Args:
            message: User message
            context: Turn context injected into every tool call
            bundle: Planner context for the selected day, shown to the model
            history: Transcript returned by the previous turn, if any

        Returns:
            AgentResponse with the reply text and the updated transcript
        """
        logger.debug(f"[{self.agent_name}] User message: {message}")
        if bundle is not None:
            context.metadata["context_block"] = format_context_block(bundle)

        try:
            result = await self.agent.run(
                user_prompt=message,
                deps=context,
                message_history=history or None,
            )
        except Exception as e:
            logger.error(f"Error during agent command processing: {e}", exc_info=True)
            return AgentResponse(text=FALLBACK_REPLY, messages=list(history or []))

        response_text = result.output
        logger.debug(f"[{self.agent_name}] Agent reply: {response_text}")

        tool_calls = []
        for msg in result.new_messages():
            if isinstance(msg, ModelResponse):
                for part in msg.parts:
                    if isinstance(part, ToolCallPart):
                        tool_calls.append({"name": part.tool_name, "args": part.args_as_dict()})

        return AgentResponse(
            text=response_text,
            tool_calls=tool_calls,
            messages=list(result.all_messages()),
        )
