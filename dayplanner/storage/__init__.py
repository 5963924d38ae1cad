"""Persistence collaborators for events and preferences."""

from .event_store import EventStore
from .preferences_store import PreferencesStore

__all__ = ["EventStore", "PreferencesStore"]
