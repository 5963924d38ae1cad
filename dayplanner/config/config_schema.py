"""Pydantic models for configuration validation."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class OllamaConfig(BaseModel):
    """Ollama LLM configuration."""

    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    model: str = Field(..., description="Model name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2048, gt=0, description="Maximum tokens")
    context_window: Optional[int] = Field(default=None, description="Context window size")


class OpenAIConfig(BaseModel):
    """OpenAI LLM configuration."""

    api_key: str = Field(..., description="OpenAI API key")
    model: str = Field(default="gpt-4o-mini", description="Model name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2048, gt=0, description="Maximum tokens")
    organization_id: Optional[str] = Field(default=None, description="Organization ID")
    base_url: Optional[str] = Field(default=None, description="Override for OpenAI-compatible servers")


class LLMConfig(BaseModel):
    """LLM configuration."""

    provider: str = Field(..., description="Provider: 'ollama' or 'openai'")
    ollama: Optional[OllamaConfig] = Field(default=None, description="Ollama configuration")
    openai: Optional[OpenAIConfig] = Field(default=None, description="OpenAI configuration")


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = Field(default="data/planner.db", description="SQLite file holding events and preferences")


class SessionConfig(BaseModel):
    """Principal used by the console runtime."""

    user_id: Optional[str] = Field(
        default=None,
        description="Authenticated user id; leave empty to run without a session",
    )


class AgentPreferencesConfig(BaseModel):
    """Agent preferences configuration."""

    timezone: str = Field(
        default="UTC",
        description="Detected timezone used when the user has none (e.g., 'America/New_York')"
    )

    @model_validator(mode='after')
    def validate_timezone(self) -> 'AgentPreferencesConfig':
        """Validate timezone string using zoneinfo."""
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(
                f"Invalid timezone: '{self.timezone}'. "
                f"Must be a valid IANA timezone (e.g., 'America/New_York', 'UTC', 'Asia/Tokyo')"
            )
        return self


class PolicyConfig(BaseModel):
    """Conflict/preference policy configuration."""

    enforce_time_blocks: bool = Field(
        default=False,
        description="Reject create_events batches overlapping enabled time blocks (default: warn only)",
    )


class AgentConfig(BaseModel):
    """Agent configuration."""

    app_name: str = Field(default="Day Planner", description="Name shown to the agent")
    preferences: AgentPreferencesConfig = Field(
        default_factory=AgentPreferencesConfig,
        description="Agent preferences (timezone)"
    )
    inject_datetime: bool = Field(
        default=True,
        description="Whether to inject current datetime into prompts"
    )
    policy: PolicyConfig = Field(
        default_factory=PolicyConfig,
        description="Time block policy"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    llm: LLMConfig = Field(..., description="LLM configuration")
    database: DatabaseConfig = Field(default_factory=DatabaseConfig, description="Database configuration")
    session: SessionConfig = Field(default_factory=SessionConfig, description="Session configuration")
    agent: AgentConfig = Field(
        default_factory=AgentConfig,
        description="Agent configuration and preferences"
    )

    def validate(self) -> None:
        """Validate configuration consistency."""
        provider_configs = {
            "ollama": self.llm.ollama,
            "openai": self.llm.openai,
        }

        provider = self.llm.provider.lower()
        if provider not in provider_configs:
            raise ValueError(f"Unknown LLM provider: {self.llm.provider}")

        if not provider_configs[provider]:
            raise ValueError(f"{provider} configuration is required when provider is '{self.llm.provider}'")
