"""SQLite-backed event store.

Persists events to a local SQLite database (default ``data/sonar_edm.db``)
using ``aiosqlite``.  Source-reported fields live in the ``payload`` JSON
column; the pipeline's derived fields live in ``derived`` plus the
``status``/``version``/``last_updated`` bookkeeping columns.  Ingestion
only ever touches ``payload``; enhancement only ever touches the rest, in
one ``UPDATE`` statement.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.event_store_provider import IEventStoreProvider
from src.models.enhancement import EventEnhancement
from src.models.event import EnhancementStatus, Event
from src.utils.errors import EnhancementError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/sonar_edm.db")

_SOURCE_FIELDS = {
    "source",
    "source_id",
    "name",
    "description",
    "start",
    "venue",
    "artists",
    "genres",
    "image_url",
    "ticket_url",
}

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS events (
    id            TEXT PRIMARY KEY,
    source        TEXT NOT NULL,
    name          TEXT NOT NULL,
    payload       TEXT NOT NULL,
    derived       TEXT,
    status        TEXT NOT NULL DEFAULT 'pending',
    version       TEXT,
    last_updated  TEXT,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_events_status_version ON events(status, version);",
    "CREATE INDEX IF NOT EXISTS idx_events_source ON events(source);",
]

_UPSERT_SQL = """\
INSERT INTO events (id, source, name, payload)
VALUES (?, ?, ?, ?)
ON CONFLICT(id)
DO UPDATE SET name    = excluded.name,
              payload = excluded.payload;
"""

_SAVE_ENHANCEMENT_SQL = """\
UPDATE events
SET derived = ?, status = ?, version = ?, last_updated = ?
WHERE id = ?;
"""

_SELECT_COLUMNS = "id, payload, derived, status, version, last_updated"


class SQLiteEventStore(IEventStoreProvider):
    """Event persistence in SQLite."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the events table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("event_store_initialized", path=str(self._db_path))

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> Event:
        data: dict[str, Any] = json.loads(row["payload"])
        if row["derived"]:
            data.update(json.loads(row["derived"]))
        data["enhancement"] = {
            "status": row["status"],
            "version": row["version"],
            "last_updated": row["last_updated"],
        }
        return Event.model_validate(data)

    # -- IEventStoreProvider implementation ------------------------------------

    async def upsert_events(self, events: list[Event]) -> int:
        rows = [
            (
                event.id,
                event.source,
                event.name,
                json.dumps(event.model_dump(mode="json", include=_SOURCE_FIELDS)),
            )
            for event in events
        ]
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.executemany(_UPSERT_SQL, rows)
            await db.commit()
        logger.info("events_upserted", count=len(rows))
        return len(rows)

    async def get_event(self, event_id: str) -> Event | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT {_SELECT_COLUMNS} FROM events WHERE id = ?", (event_id,))
            row = await cursor.fetchone()
        return self._row_to_event(row) if row else None

    async def get_events(self, event_ids: list[str]) -> list[Event]:
        if not event_ids:
            return []
        placeholders = ", ".join("?" for _ in event_ids)
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM events WHERE id IN ({placeholders})",
                tuple(event_ids),
            )
            rows = await cursor.fetchall()
        by_id = {row["id"]: row for row in rows}
        return [self._row_to_event(by_id[event_id]) for event_id in event_ids if event_id in by_id]

    async def list_pending_ids(self, version: str, limit: int | None = None) -> list[str]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "SELECT id FROM events "
                "WHERE NOT (status = ? AND version IS ?) "
                "ORDER BY created_at, rowid LIMIT ?",
                (EnhancementStatus.COMPLETED.value, version, -1 if limit is None else limit),
            )
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def save_enhancement(self, enhancement: EventEnhancement) -> None:
        derived = enhancement.model_dump(
            mode="json",
            include={
                "artist_metadata",
                "enhanced_genres",
                "sound_characteristics",
                "is_music_event",
                "edm_weight",
            },
        )
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    _SAVE_ENHANCEMENT_SQL,
                    (
                        json.dumps(derived),
                        EnhancementStatus.COMPLETED.value,
                        enhancement.version,
                        enhancement.last_updated.isoformat(),
                        enhancement.event_id,
                    ),
                )
                await db.commit()
                updated = cursor.rowcount
        except aiosqlite.Error as exc:
            raise EnhancementError(
                f"Write failed: {exc}",
                provider_name=self.get_provider_name(),
                event_id=enhancement.event_id,
            ) from exc

        if updated == 0:
            raise EnhancementError(
                f"Unknown event {enhancement.event_id}",
                provider_name=self.get_provider_name(),
                event_id=enhancement.event_id,
            )

    async def count_by_status(self) -> dict[str, int]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute("SELECT status, COUNT(*) FROM events GROUP BY status")
            rows = await cursor.fetchall()
        return {row[0]: row[1] for row in rows}

    def get_provider_name(self) -> str:
        return "sqlite_store"
