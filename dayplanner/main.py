"""Main entry point for the Day Planner console."""

import asyncio
import logging
import sys
from datetime import date
from typing import List, Optional

from .agent.agent_processor import AgentProcessor, AgentResponse
from .agent.prompts import get_system_prompt
from .auth.session import SessionProvider, StaticSession
from .config.config_loader import load_config
from .context.assembler import ContextAssembler
from .context.models import TurnContext
from .llm.base import BaseLLM
from .llm.ollama_llm import OllamaLLM
from .llm.openai_llm import OpenAILLM
from .notifications import ConsoleNotifier
from .storage.event_store import EventStore
from .storage.preferences_store import PreferencesStore
from .tools.registry import ToolRegistry
from .utils.logging import parse_verbosity, setup_logging, strip_verbosity_flags

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/quit", "/exit"}


def create_llm(config) -> BaseLLM:
    """
    Create LLM instance based on configuration.

    Args:
        config: Application configuration

    Returns:
        BaseLLM instance
    """
    provider = config.llm.provider.lower()

    if provider == "ollama":
        if not config.llm.ollama:
            raise ValueError("Ollama configuration is required")
        return OllamaLLM(
            model=config.llm.ollama.model,
            base_url=config.llm.ollama.base_url,
            temperature=config.llm.ollama.temperature,
            max_tokens=config.llm.ollama.max_tokens,
            context_window=config.llm.ollama.context_window,
        )

    elif provider == "openai":
        if not config.llm.openai:
            raise ValueError("OpenAI configuration is required")
        return OpenAILLM(
            api_key=config.llm.openai.api_key,
            model=config.llm.openai.model,
            temperature=config.llm.openai.temperature,
            max_tokens=config.llm.openai.max_tokens,
            organization_id=config.llm.openai.organization_id,
            base_url=config.llm.openai.base_url,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")


async def process_user_message(
    assembler: ContextAssembler,
    processor: AgentProcessor,
    session: SessionProvider,
    text: str,
    reference_date: Optional[date] = None,
    history: Optional[List] = None,
) -> AgentResponse:
    """
    Run one planner turn: build the day's context, then let the agent act.

    Args:
        assembler: Context assembler
        processor: Agent processor
        session: Current session
        text: User message
        reference_date: Day the user is looking at (defaults to today)
        history: Transcript from the previous turn

    Returns:
        AgentResponse for the turn
    """
    bundle = await assembler.build(session, reference_date)
    context = TurnContext(
        session=session,
        timezone=bundle.timezone,
        reference_date=bundle.reference_date,
    )
    return await processor.process_command(text, context, bundle=bundle, history=history)


def parse_date_command(line: str) -> Optional[date]:
    """Parse '/date YYYY-MM-DD' (or '/date today'); None means today."""
    parts = line.split(maxsplit=1)
    if len(parts) < 2 or parts[1].strip().lower() == "today":
        return None
    return date.fromisoformat(parts[1].strip())


async def main():
    """Main entry point."""
    setup_logging(verbosity=parse_verbosity(sys.argv))

    args = strip_verbosity_flags(sys.argv[1:])
    config_path = args[0] if args else "config.yaml"
    logger.info(f"Loading configuration from: {config_path}")

    try:
        config = load_config(config_path)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    event_store = EventStore(config.database.path)
    preferences_store = PreferencesStore(config.database.path)
    await event_store.initialize()
    await preferences_store.initialize()
    logger.info(f"Database ready: {config.database.path}")

    llm = create_llm(config)
    logger.info(f"LLM initialized: {config.llm.provider} / {llm.get_model_name()}")
    try:
        await llm.validate()
    except Exception as e:
        logger.error(f"LLM validation failed: {e}")
        sys.exit(1)

    registry = ToolRegistry()
    registry.initialize_tools(config, event_store, preferences_store, notifier=ConsoleNotifier())

    agent_config = config.agent
    processor = AgentProcessor(
        llm=llm,
        tools=registry.get_all_tools(),
        system_prompt=get_system_prompt(
            timezone=agent_config.preferences.timezone,
            app_name=agent_config.app_name,
            inject_datetime=agent_config.inject_datetime,
        ),
    )
    assembler = ContextAssembler(
        event_store,
        preferences_store,
        default_timezone=agent_config.preferences.timezone,
        app_name=agent_config.app_name,
    )

    session = StaticSession(config.session.user_id)
    if not config.session.user_id:
        logger.warning("No session.user_id configured; calendar tools will refuse every call")

    selected_date: Optional[date] = None
    history: List = []
    print(f"{agent_config.app_name} ready. '/date YYYY-MM-DD' selects a day, '/quit' exits.")

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except (EOFError, KeyboardInterrupt):
            break

        line = line.strip()
        if not line:
            continue
        if line in EXIT_COMMANDS:
            break
        if line.startswith("/date"):
            try:
                selected_date = parse_date_command(line)
            except ValueError:
                print("Use /date YYYY-MM-DD")
                continue
            print(f"Selected {selected_date.isoformat() if selected_date else 'today'}")
            continue

        response = await process_user_message(
            assembler, processor, session, line, selected_date, history
        )
        history = response.messages
        print(response.text)

    logger.info("Shutting down")


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
