"""SQLite store holding one preferences document per user."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite
from pydantic import ValidationError

from ..errors import StoreUnavailable
from ..scheduling.models import Preferences

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Stores Preferences as an opaque JSON document keyed by user id."""

    def __init__(self, db_path: str = "data/planner.db"):
        self.db_path = db_path
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS preferences (
                        user_id TEXT PRIMARY KEY,
                        document TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.error(f"Preferences store failure ({self.db_path}): {e}", exc_info=True)
            raise StoreUnavailable(f"Preferences store unavailable: {e}") from e

        self._initialized = True

    async def get(self, user_id: str) -> Optional[Preferences]:
        """
        Get a user's preferences.

        Returns:
            Preferences, or None if the user has no record yet

        Raises:
            StoreUnavailable: On driver failure or a document that fails validation
        """
        await self.initialize()

        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(
                    "SELECT document FROM preferences WHERE user_id = ?",
                    (user_id,),
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error(f"Failed to read preferences for {user_id}: {e}", exc_info=True)
            raise StoreUnavailable(f"Preferences store unavailable: {e}") from e

        if row is None:
            return None

        try:
            return Preferences.model_validate_json(row[0])
        except ValidationError as e:
            logger.error(f"Corrupt preferences document for {user_id}: {e}")
            raise StoreUnavailable(f"Preferences document for {user_id} is invalid") from e

    async def save(self, user_id: str, preferences: Preferences) -> None:
        """Insert or replace a user's preferences document."""
        await self.initialize()

        now = datetime.now(timezone.utc).isoformat()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    INSERT INTO preferences (user_id, document, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        document = excluded.document,
                        updated_at = excluded.updated_at
                    """,
                    (user_id, preferences.model_dump_json(), now),
                )
                await db.commit()
        except aiosqlite.Error as e:
            logger.error(f"Failed to save preferences for {user_id}: {e}", exc_info=True)
            raise StoreUnavailable(f"Preferences store unavailable: {e}") from e
