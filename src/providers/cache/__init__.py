"""Cache providers.

MemoryCacheProvider is a bounded, per-entry-TTL cache. It backs the audio
feature cache, the taste profile cache and the score cache, each as its
own instance. It is not shared across processes; a multi-worker
deployment swaps in a networked ICacheProvider without touching the
services.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
