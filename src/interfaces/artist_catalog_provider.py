"""Abstract base class for the known-artist catalog.

The catalog is read-mostly reference data populated by a separate
ingestion process.  The resolver only reads from it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.artist import CatalogArtist


class IArtistCatalogProvider(ABC):
    """Contract for artist catalog lookups."""

    @abstractmethod
    async def find_exact(self, matching_key: str) -> CatalogArtist | None:
        """Return the artist whose primary or original name has this matching key.

        Parameters
        ----------
        matching_key:
            Output of ``normalize_for_matching`` for the candidate name.
        """

    @abstractmethod
    async def get_all_artists(self) -> list[CatalogArtist]:
        """Return every catalog entry (used for fuzzy matching)."""

    @abstractmethod
    async def add_artists(self, artists: list[CatalogArtist]) -> int:
        """Insert or replace catalog entries; returns the number written."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
