"""Abstract base class for ticketing/event-listing sources.

Sources return raw :class:`~src.models.event.Event` records queried by
geographic radius and keyword.  Partial records (no classifications, no
venue coordinates, no attractions) must come back as events with empty
fields, never as errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.event import Event


class IEventSourceProvider(ABC):
    """Contract for event listing searches."""

    @abstractmethod
    async def search_events(
        self,
        latitude: float,
        longitude: float,
        radius_km: int = 50,
        keyword: str | None = None,
        classification: str | None = "music",
        size: int = 50,
    ) -> list[Event]:
        """Search upcoming events around a coordinate."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when credentials are configured."""
