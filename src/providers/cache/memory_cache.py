"""In-memory cache provider using cachetools.TLRUCache.

Process-local, bounded, with per-entry time-to-live: audio features live
24 hours, taste profiles 30 minutes, scores until their profile version
moves on.  Can be swapped for a distributed backend via ICacheProvider.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog
from cachetools import TLRUCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Default time-to-live in seconds for entries stored without one.
    name:
        Label used in log events ("audio", "profile", "score").
    timer:
        Clock used for expiry; injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: int = 3600,
        name: str = "cache",
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl
        self._name = name
        # Entries are stored as (value, ttl) so each can expire on its own schedule.
        self._cache: TLRUCache[str, tuple[Any, int]] = TLRUCache(
            maxsize=max_size,
            ttu=lambda _key, entry, now: now + entry[1],
            timer=timer,
        )

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", cache=self._name, key=key)
            return None
        logger.debug("cache_hit", cache=self._name, key=key)
        return entry[0]

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key* for *ttl* seconds (default TTL when omitted)."""
        self._cache[key] = (value, self._default_ttl if ttl is None else ttl)
        logger.debug("cache_set", cache=self._name, key=key)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", cache=self._name, key=key)

    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return key in self._cache

    async def clear(self) -> None:
        self._cache.clear()
        logger.debug("cache_cleared", cache=self._name)

    def size(self) -> int:
        self._cache.expire()
        return len(self._cache)
