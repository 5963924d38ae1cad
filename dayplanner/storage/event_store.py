"""SQLite store for calendar events. Every query is scoped by owner id."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import aiosqlite

from ..errors import StoreUnavailable
from ..scheduling.models import Event, EventSource
from ..scheduling.normalization import from_canonical, to_canonical

logger = logging.getLogger(__name__)

EVENT_COLUMNS = "id, user_id, title, start_ts, end_ts, memo, source"

# Patchable columns; anything else in an update is rejected
UPDATABLE_COLUMNS = ("title", "start_ts", "end_ts", "memo")


class EventStore:
    """Row store for events backed by SQLite."""

    def __init__(self, db_path: str = "data/planner.db"):
        """
        Initialize event store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._initialized = False

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection, mapping driver failures to StoreUnavailable."""
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except (aiosqlite.Error, OSError) as e:
            logger.error(f"Event store failure ({self.db_path}): {e}", exc_info=True)
            raise StoreUnavailable(f"Event store unavailable: {e}") from e

    async def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Event store unavailable: {e}") from e

        async with self._connect() as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS events (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    start_ts TEXT NOT NULL,
                    end_ts TEXT NOT NULL,
                    memo TEXT,
                    source TEXT NOT NULL DEFAULT 'ai',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_events_user_start
                ON events(user_id, start_ts)
                """
            )
            await db.commit()

        self._initialized = True

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> Event:
        try:
            source = EventSource(row["source"])
        except ValueError:
            logger.warning(f"Event {row['id']} has unknown source '{row['source']}'")
            source = EventSource.MANUAL
        return Event(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            start=from_canonical(row["start_ts"]),
            end=from_canonical(row["end_ts"]),
            memo=row["memo"],
            source=source,
        )

    @staticmethod
    def _event_params(event: Event, now: str) -> tuple:
        return (
            event.id,
            event.user_id,
            event.title,
            to_canonical(event.start),
            to_canonical(event.end),
            event.memo,
            event.source.value,
            now,
            now,
        )

    async def list_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[Event]:
        """
        Get a user's events whose start lies in [start, end].

        Returns:
            List of Event objects, ordered by start ascending
        """
        await self.initialize()

        async with self._connect() as db:
            async with db.execute(
                f"""
                SELECT {EVENT_COLUMNS}
                FROM events
                WHERE user_id = ? AND start_ts >= ? AND start_ts <= ?
                ORDER BY start_ts ASC, id ASC
                """,
                (user_id, to_canonical(start), to_canonical(end)),
            ) as cursor:
                rows = await cursor.fetchall()

        return [self._row_to_event(row) for row in rows]

    async def get(self, user_id: str, event_id: str) -> Optional[Event]:
        """Get one event, or None if absent or owned by someone else."""
        await self.initialize()

        async with self._connect() as db:
            async with db.execute(
                f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ? AND user_id = ?",
                (event_id, user_id),
            ) as cursor:
                row = await cursor.fetchone()

        return self._row_to_event(row) if row else None

    async def insert(self, event: Event) -> Event:
        """Insert a single event."""
        await self.insert_many([event])
        return event

    async def insert_many(self, events: Sequence[Event]) -> int:
        """
        Insert a batch of events in one transaction.

        Either every row is written or none is.

        Returns:
            Number of rows inserted
        """
        if not events:
            return 0

        await self.initialize()
        now = to_canonical(datetime.now(timezone.utc))

        async with self._connect() as db:
            try:
                await db.executemany(
                    """
                    INSERT INTO events (id, user_id, title, start_ts, end_ts, memo, source, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [self._event_params(event, now) for event in events],
                )
                await db.commit()
            except aiosqlite.Error:
                await db.rollback()
                raise

        logger.debug(f"Inserted {len(events)} event(s)")
        return len(events)

    async def update(
        self, user_id: str, event_id: str, fields: Dict[str, Any]
    ) -> bool:
        """
        Patch columns of one owned event.

        Args:
            user_id: Owner id
            event_id: Event id
            fields: Column name to new value; only UPDATABLE_COLUMNS allowed

        Returns:
            True if a row was updated
        """
        unknown = set(fields) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")

        await self.initialize()

        columns = [c for c in UPDATABLE_COLUMNS if c in fields]
        assignments = ", ".join(f"{c} = ?" for c in columns + ["updated_at"])
        params = [fields[c] for c in columns]
        params.append(to_canonical(datetime.now(timezone.utc)))
        params.extend([event_id, user_id])

        async with self._connect() as db:
            cursor = await db.execute(
                f"UPDATE events SET {assignments} WHERE id = ? AND user_id = ?",
                params,
            )
            await db.commit()
            updated = cursor.rowcount

        return updated > 0

    async def delete(self, user_id: str, event_id: str) -> bool:
        """Delete one owned event. Returns True if a row was removed."""
        await self.initialize()

        async with self._connect() as db:
            cursor = await db.execute(
                "DELETE FROM events WHERE id = ? AND user_id = ?",
                (event_id, user_id),
            )
            await db.commit()
            deleted = cursor.rowcount

        return deleted > 0
