"""Unit tests for the rate limiter and throttled gather helpers."""

from __future__ import annotations

import asyncio

import pytest

from src.utils.concurrency import RateLimiter, throttled_gather


class _FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_first_request_never_waits(self) -> None:
        clock = _FakeClock()
        limiter = RateLimiter(0.5, name="reccobeats", clock=clock, sleep=clock.sleep)

        assert await limiter.acquire() == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_back_to_back_requests_are_spaced(self) -> None:
        clock = _FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        clock.now += 0.2
        waited = await limiter.acquire()

        assert waited == pytest.approx(0.3)
        assert clock.sleeps == [pytest.approx(0.3)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self) -> None:
        clock = _FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        clock.now += 2.0

        assert await limiter.acquire() == 0.0

    @pytest.mark.asyncio
    async def test_concurrent_callers_serialised(self) -> None:
        clock = _FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        waits = await asyncio.gather(*(limiter.acquire() for _ in range(4)))

        assert sorted(waits) == [0.0, 1.0, 1.0, 1.0]
        assert clock.now == pytest.approx(103.0)

    @pytest.mark.asyncio
    async def test_context_manager_acquires(self) -> None:
        clock = _FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        async with limiter:
            pass
        async with limiter:
            pass

        assert clock.sleeps == [1.0]

    def test_negative_interval_clamped(self) -> None:
        assert RateLimiter(-1.0).min_interval == 0.0


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_results_in_input_order(self) -> None:
        async def echo(value: int) -> int:
            await asyncio.sleep(0)
            return value

        assert await throttled_gather([echo(i) for i in range(5)], limit=2) == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self) -> None:
        active = 0
        peak = 0

        async def work() -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        await throttled_gather([work() for _ in range(8)], limit=3)

        assert peak == 3

    @pytest.mark.asyncio
    async def test_exceptions_returned_in_place(self) -> None:
        async def ok() -> str:
            return "ok"

        async def boom() -> str:
            raise ValueError("bad event")

        results = await throttled_gather([ok(), boom(), ok()])

        assert results[0] == "ok"
        assert isinstance(results[1], ValueError)
        assert results[2] == "ok"

    @pytest.mark.asyncio
    async def test_exceptions_propagate_when_requested(self) -> None:
        async def boom() -> None:
            raise ValueError("bad event")

        with pytest.raises(ValueError):
            await throttled_gather([boom()], return_exceptions=False)
