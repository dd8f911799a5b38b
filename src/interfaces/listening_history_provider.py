"""Abstract base class for listening-history sources.

Per recency window (``short_term``, ``medium_term``, ``long_term``) the
source returns a ranked list of top artists and top tracks, best first,
with embedded genre tags.  A new user simply yields empty lists.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.taste_profile import TopArtistEntry, TrackEntry


class IListeningHistoryProvider(ABC):
    """Contract for per-user listening history."""

    @abstractmethod
    async def get_top_artists(self, user_id: str, time_range: str, limit: int = 50) -> list[TopArtistEntry]:
        """Return the user's top artists for *time_range*, best first."""

    @abstractmethod
    async def get_top_tracks(self, user_id: str, time_range: str, limit: int = 50) -> list[TrackEntry]:
        """Return the user's top tracks for *time_range*, best first."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
