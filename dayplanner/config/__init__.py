"""Configuration management module."""

from .config_loader import ConfigLoader, load_config, resolve_env_vars
from .config_schema import AppConfig

__all__ = ["ConfigLoader", "load_config", "resolve_env_vars", "AppConfig"]
