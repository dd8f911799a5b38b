"""Event store providers.

InMemoryEventStore keeps events in a dict (tests, CLI dry runs).
SQLiteEventStore persists them with aiosqlite. Both apply an enhancement
as a single write of the whole derived-field block.
"""

from src.providers.event_store.memory_store import InMemoryEventStore
from src.providers.event_store.sqlite_store import SQLiteEventStore

__all__ = ["InMemoryEventStore", "SQLiteEventStore"]
