"""Abstract base class for event persistence.

The store owns the event collection.  The enhancement pipeline reads
pending events from it and writes the derived-field block back with
:meth:`IEventStoreProvider.save_enhancement`, which must apply all
derived fields in one atomic operation: a crash can leave an event
un-enhanced, never half-enhanced.

Personalized scores are never written here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.enhancement import EventEnhancement
from src.models.event import Event


class IEventStoreProvider(ABC):
    """Contract for event storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def upsert_events(self, events: list[Event]) -> int:
        """Insert or update source-reported fields; derived fields are left untouched.

        Returns
        -------
        int
            Number of events written.
        """

    @abstractmethod
    async def get_event(self, event_id: str) -> Event | None:
        """Return one event by its source-qualified id."""

    @abstractmethod
    async def get_events(self, event_ids: list[str]) -> list[Event]:
        """Return the events for *event_ids* in the given order, skipping unknown ids."""

    @abstractmethod
    async def list_pending_ids(self, version: str, limit: int | None = None) -> list[str]:
        """Ids of events not yet completed for enhancement *version*, oldest first."""

    @abstractmethod
    async def save_enhancement(self, enhancement: EventEnhancement) -> None:
        """Atomically write every derived field of one event.

        Raises
        ------
        EnhancementError
            If the event does not exist or the write fails.
        """

    @abstractmethod
    async def count_by_status(self) -> dict[str, int]:
        """Event counts keyed by enhancement status."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
