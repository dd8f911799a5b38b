"""In-memory event store.

Events are immutable models, so an enhancement is applied by replacing
the stored object in one assignment: readers see either the old event or
the fully enhanced one.
"""

from __future__ import annotations

from collections import Counter

import structlog

from src.interfaces.event_store_provider import IEventStoreProvider
from src.models.enhancement import EventEnhancement
from src.models.event import DERIVED_FIELDS, Event
from src.utils.errors import EnhancementError

logger = structlog.get_logger(logger_name=__name__)


class InMemoryEventStore(IEventStoreProvider):
    """Event collection held in an insertion-ordered dict."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self._events: dict[str, Event] = {}
        for event in events or []:
            self._events[event.id] = event

    async def initialize(self) -> None:
        return None

    async def upsert_events(self, events: list[Event]) -> int:
        for event in events:
            existing = self._events.get(event.id)
            if existing is not None:
                # Keep what the pipeline derived; refresh what the source reports.
                event = event.model_copy(update={name: getattr(existing, name) for name in DERIVED_FIELDS})
            self._events[event.id] = event
        logger.debug("events_upserted", count=len(events))
        return len(events)

    async def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    async def get_events(self, event_ids: list[str]) -> list[Event]:
        return [self._events[event_id] for event_id in event_ids if event_id in self._events]

    async def list_pending_ids(self, version: str, limit: int | None = None) -> list[str]:
        pending = [event_id for event_id, event in self._events.items() if not event.is_enhanced(version)]
        return pending if limit is None else pending[:limit]

    async def save_enhancement(self, enhancement: EventEnhancement) -> None:
        event = self._events.get(enhancement.event_id)
        if event is None:
            raise EnhancementError(
                f"Unknown event {enhancement.event_id}",
                provider_name=self.get_provider_name(),
                event_id=enhancement.event_id,
            )
        self._events[enhancement.event_id] = enhancement.apply_to(event)

    async def count_by_status(self) -> dict[str, int]:
        counts = Counter(event.enhancement.status.value for event in self._events.values())
        return dict(counts)

    def get_provider_name(self) -> str:
        return "memory_store"
