"""Shared fixtures: temporary SQLite stores and per-user turn contexts."""

import pytest

from dayplanner.auth.session import AnonymousSession, StaticSession
from dayplanner.context.models import TurnContext
from dayplanner.notifications import CollectingNotifier
from dayplanner.storage.event_store import EventStore
from dayplanner.storage.preferences_store import PreferencesStore


@pytest.fixture
def db_path(tmp_path):
    """Path to a fresh SQLite file."""
    return str(tmp_path / "planner.db")


@pytest.fixture
def event_store(db_path):
    return EventStore(db_path)


@pytest.fixture
def preferences_store(db_path):
    return PreferencesStore(db_path)


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def alice():
    """Turn context for user 'alice' in UTC."""
    return TurnContext(session=StaticSession("alice"), timezone="UTC")


@pytest.fixture
def bob():
    """Turn context for user 'bob' in UTC."""
    return TurnContext(session=StaticSession("bob"), timezone="UTC")


@pytest.fixture
def anonymous():
    return TurnContext(session=AnonymousSession(), timezone="UTC")
