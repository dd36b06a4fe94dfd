"""Tests for ProviderPacer."""

import asyncio
import time

import pytest

from feedback_sync.config import ProviderLimitsConfig
from feedback_sync.sync import ProviderPacer, shared_pacer


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestRecommendedDelay:
    def test_no_history_means_no_delay(self, clock):
        pacer = ProviderPacer("clickup", ProviderLimitsConfig(), clock=clock)

        assert pacer.get_recommended_delay() == 0.0

    def test_under_budget_means_no_delay(self, clock):
        pacer = ProviderPacer(
            "clickup", ProviderLimitsConfig(requests_per_minute=3), clock=clock
        )
        pacer.on_request_start()
        pacer.on_request_start()

        assert pacer.get_recommended_delay() == 0.0

    def test_full_window_waits_for_oldest_to_expire(self, clock):
        pacer = ProviderPacer(
            "linear", ProviderLimitsConfig(requests_per_minute=2), clock=clock
        )
        pacer.on_request_start()
        clock.now += 10
        pacer.on_request_start()

        assert pacer.get_recommended_delay() == pytest.approx(50.0)

        clock.now += 50
        assert pacer.get_recommended_delay() == 0.0
        assert pacer.requests_in_window == 1

    def test_min_interval_between_starts(self, clock):
        pacer = ProviderPacer(
            "notion", ProviderLimitsConfig(min_request_interval_ms=350), clock=clock
        )
        pacer.on_request_start()
        clock.now += 0.1

        assert pacer.get_recommended_delay() == pytest.approx(0.25)

    def test_limits_default_to_settings(self):
        pacer = ProviderPacer("notion")

        assert pacer.limits.min_request_interval_ms == 350
        assert pacer.limits.max_concurrent == 2


class TestWait:
    async def test_wait_records_start(self, clock):
        pacer = ProviderPacer("trello", ProviderLimitsConfig(), clock=clock)

        await pacer.wait()
        await pacer.wait()

        assert pacer.requests_in_window == 2

    async def test_wait_sleeps_for_interval(self):
        pacer = ProviderPacer("notion", ProviderLimitsConfig(min_request_interval_ms=50))

        start = time.monotonic()
        await pacer.wait()
        await pacer.wait()

        assert time.monotonic() - start >= 0.045


class TestStats:
    def test_get_stats(self, clock):
        pacer = ProviderPacer(
            "monday", ProviderLimitsConfig(requests_per_minute=1), clock=clock
        )
        pacer.on_request_start()
        clock.now += 20

        stats = pacer.get_stats()

        assert stats == {
            "provider": "monday",
            "requests_in_window": 1,
            "requests_per_minute_limit": 1,
            "recommended_delay_ms": 40000.0,
        }


class TestSlots:
    async def test_slot_caps_concurrency(self):
        pacer = ProviderPacer("clickup", ProviderLimitsConfig(max_concurrent=2))
        in_flight = 0
        peak = 0

        async def request() -> None:
            nonlocal in_flight, peak
            async with pacer.slot():
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1

        await asyncio.gather(*(request() for _ in range(5)))

        assert peak == 2
        assert pacer.requests_in_window == 5

    async def test_shared_pacer_is_per_provider(self):
        assert shared_pacer("linear") is shared_pacer("linear")
        assert shared_pacer("linear") is not shared_pacer("notion")
        assert shared_pacer("notion").limits.min_request_interval_ms == 350
