"""Abstract base class for negative-signal and seasonal-history data.

Both are optional inputs to the taste profile: ``None`` from either method
means "no data" and the profile service substitutes its defaults (empty
negative signals, the default seasonal table).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.taste_profile import NegativeSignals


class ITasteSignalProvider(ABC):
    """Contract for auxiliary taste signals."""

    @abstractmethod
    async def get_negative_signals(self, user_id: str) -> NegativeSignals | None:
        """Removed tracks, skipped artists and abandoned playlists for the user."""

    @abstractmethod
    async def get_seasonal_preferences(self, user_id: str) -> dict[str, list[str]] | None:
        """Per-season preferred genres from historical analysis, if any."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
