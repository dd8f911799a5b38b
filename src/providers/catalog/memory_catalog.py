"""In-memory artist catalog.

Indexes every entry under the matching key of its primary name and, when
present, its original name, so exact lookups are a single dict access.
"""

from __future__ import annotations

import structlog

from src.config.loader import load_yaml_list
from src.interfaces.artist_catalog_provider import IArtistCatalogProvider
from src.models.artist import CatalogArtist
from src.utils.text_normalizer import normalize_for_matching

logger = structlog.get_logger(logger_name=__name__)


class InMemoryArtistCatalog(IArtistCatalogProvider):
    """Artist catalog held in process memory."""

    def __init__(self, artists: list[CatalogArtist] | None = None) -> None:
        self._artists: dict[str, CatalogArtist] = {}
        self._index: dict[str, str] = {}
        for artist in artists or []:
            self._add(artist)

    @classmethod
    def from_yaml(cls, path: str) -> InMemoryArtistCatalog:
        """Build a catalog from a YAML file with a top-level ``artists:`` list."""
        entries = load_yaml_list(path, "artists")
        artists = [CatalogArtist.model_validate(entry) for entry in entries]
        logger.info("artist_catalog_loaded", path=path, artists=len(artists))
        return cls(artists)

    def _add(self, artist: CatalogArtist) -> None:
        primary_key = normalize_for_matching(artist.name)
        if not primary_key:
            return
        self._artists[primary_key] = artist
        self._index[primary_key] = primary_key
        if artist.original_name:
            original_key = normalize_for_matching(artist.original_name)
            if original_key:
                self._index.setdefault(original_key, primary_key)

    # -- IArtistCatalogProvider implementation ---------------------------------

    async def find_exact(self, matching_key: str) -> CatalogArtist | None:
        primary_key = self._index.get(matching_key)
        return self._artists.get(primary_key) if primary_key else None

    async def get_all_artists(self) -> list[CatalogArtist]:
        return list(self._artists.values())

    async def add_artists(self, artists: list[CatalogArtist]) -> int:
        for artist in artists:
            self._add(artist)
        return len(artists)

    def get_provider_name(self) -> str:
        return "memory_catalog"
