"""Configuration loader for YAML files."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from .config_schema import AppConfig

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def resolve_env_vars(value: Any) -> Any:
    """
    Recursively replace ``${VAR_NAME}`` references in string values.

    Raises:
        ValueError: If a referenced environment variable is not set
    """
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    missing = []

    def _replace(match: re.Match) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is None:
            missing.append(match.group(1))
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(_replace, value)
    if missing:
        raise ValueError(f"Unresolved environment variable(s) in config: {', '.join(missing)}")
    return result


class ConfigLoader:
    """Load and validate configuration from YAML files."""

    @staticmethod
    def load_config(path: str = "config.yaml") -> AppConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            raise ValueError("Configuration file is empty")

        config = AppConfig(**resolve_env_vars(config_dict))
        config.validate()

        return config


def load_config(path: str = "config.yaml") -> AppConfig:
    """Convenience function to load configuration."""
    return ConfigLoader.load_config(path)
