"""SQLite-backed artist catalog.

Reads the ``artists`` table that the ingestion process fills.  Genres are
stored as a JSON array.  Matching keys are precomputed on write so exact
lookups use the ``name_key``/``original_key`` indices.
"""

from __future__ import annotations

import json
from pathlib import Path

import aiosqlite
import structlog

from src.interfaces.artist_catalog_provider import IArtistCatalogProvider
from src.models.artist import CatalogArtist
from src.utils.text_normalizer import normalize_for_matching

logger = structlog.get_logger(logger_name=__name__)

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS artists (
    name_key      TEXT PRIMARY KEY,
    original_key  TEXT,
    name          TEXT NOT NULL,
    original_name TEXT,
    genres        TEXT NOT NULL DEFAULT '[]',
    external_id   TEXT,
    popularity    INTEGER NOT NULL DEFAULT 50
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_artists_original_key ON artists(original_key);",
]

_UPSERT_SQL = """\
INSERT INTO artists (name_key, original_key, name, original_name, genres, external_id, popularity)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(name_key)
DO UPDATE SET original_key  = excluded.original_key,
              name          = excluded.name,
              original_name = excluded.original_name,
              genres        = excluded.genres,
              external_id   = excluded.external_id,
              popularity    = excluded.popularity;
"""

_SELECT_COLUMNS = "name, original_name, genres, external_id, popularity"


class SQLiteArtistCatalog(IArtistCatalogProvider):
    """Artist catalog persisted in SQLite."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the artists table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("artist_catalog_db_initialized", path=str(self._db_path))

    @staticmethod
    def _row_to_artist(row: aiosqlite.Row) -> CatalogArtist:
        return CatalogArtist(
            name=row["name"],
            original_name=row["original_name"],
            genres=json.loads(row["genres"] or "[]"),
            external_id=row["external_id"],
            popularity=row["popularity"],
        )

    # -- IArtistCatalogProvider implementation ---------------------------------

    async def find_exact(self, matching_key: str) -> CatalogArtist | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM artists "
                "WHERE name_key = ? OR original_key = ? "
                "ORDER BY name_key = ? DESC LIMIT 1",
                (matching_key, matching_key, matching_key),
            )
            row = await cursor.fetchone()
        return self._row_to_artist(row) if row else None

    async def get_all_artists(self) -> list[CatalogArtist]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT {_SELECT_COLUMNS} FROM artists ORDER BY name_key")
            rows = await cursor.fetchall()
        return [self._row_to_artist(row) for row in rows]

    async def add_artists(self, artists: list[CatalogArtist]) -> int:
        rows = []
        for artist in artists:
            name_key = normalize_for_matching(artist.name)
            if not name_key:
                continue
            original_key = normalize_for_matching(artist.original_name) if artist.original_name else None
            rows.append(
                (
                    name_key,
                    original_key,
                    artist.name,
                    artist.original_name,
                    json.dumps(artist.genres),
                    artist.external_id,
                    artist.popularity,
                )
            )
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.executemany(_UPSERT_SQL, rows)
            await db.commit()
        logger.info("artist_catalog_upserted", count=len(rows))
        return len(rows)

    def get_provider_name(self) -> str:
        return "sqlite_catalog"
