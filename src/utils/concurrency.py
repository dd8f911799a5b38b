"""Shared concurrency primitives for calls to rate-limited upstreams.

Two helpers live here:

1. **RateLimiter** -- enforces a minimum spacing between requests to one
   upstream service.  The "last request" timestamp is the only mutable
   state shared between concurrent callers, so it is read and updated
   under an ``asyncio.Lock``: two coroutines can never both observe the
   same timestamp and fire back-to-back.  Waiting is a sleep, never an
   error.

2. **throttled_gather** -- ``asyncio.gather`` with each awaitable wrapped
   in a semaphore, used by the batch enhancer when it is configured with a
   bounded worker pool.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class RateLimiter:
    """Minimum-interval limiter shared by every caller of one upstream.

    Parameters
    ----------
    min_interval:
        Minimum seconds between the *start* of two consecutive requests.
    name:
        Upstream name, used only in debug logs.
    clock:
        Monotonic time source; injectable for tests.
    sleep:
        Async sleep function; injectable for tests.
    """

    def __init__(
        self,
        min_interval: float,
        name: str = "upstream",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._min_interval = max(0.0, min_interval)
        self._name = name
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def acquire(self) -> float:
        """Wait until the next request may start and claim that slot.

        Returns
        -------
        float
            Seconds spent waiting (0.0 when no wait was needed).
        """
        async with self._lock:
            waited = 0.0
            now = self._clock()
            if self._last_request is not None:
                elapsed = now - self._last_request
                if elapsed < self._min_interval:
                    waited = self._min_interval - elapsed
                    _logger.debug("rate_limit_wait", upstream=self._name, seconds=round(waited, 3))
                    await self._sleep(waited)
                    now = self._clock()
            self._last_request = now
            return waited

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    limit: int = 4,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``limit`` at a time.

    Parameters
    ----------
    coros:
        Awaitables to execute.
    semaphore:
        Existing semaphore to share across calls.  When omitted a fresh
        one of size ``limit`` is created for this call.
    limit:
        Worker-pool size used when no semaphore is supplied.
    return_exceptions:
        Mirrors ``asyncio.gather``: exceptions are returned in place.

    Returns
    -------
    list
        Results in input order.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    return await asyncio.gather(*(_wrapped(c) for c in coros), return_exceptions=return_exceptions)
