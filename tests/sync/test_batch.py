"""Tests for BatchExecutor and BatchResult."""

import asyncio

import pytest

from feedback_sync.config import ProviderLimitsConfig
from feedback_sync.sync import BatchExecutor, BatchResult, ProviderPacer


class TestBatchResult:
    def test_counts(self):
        result: BatchResult[int] = BatchResult(succeeded=[1, 2], failed=[(2, ValueError("x"))])

        assert result.total_count == 3
        assert result.success_count == 2
        assert result.failure_count == 1
        assert not result.all_succeeded

    def test_empty_is_all_succeeded(self):
        assert BatchResult().all_succeeded


class TestBatchExecutor:
    async def test_failures_are_isolated(self):
        async def process(n: int) -> int:
            if n % 2:
                raise ValueError(f"odd {n}")
            return n * 10

        result = await BatchExecutor(max_concurrent=3).execute([0, 1, 2, 3, 4], process)

        assert result.succeeded == [0, 20, 40]
        assert [(i, str(e)) for i, e in result.failed] == [(1, "odd 1"), (3, "odd 3")]

    async def test_indices_span_batches(self):
        async def process(n: int) -> int:
            if n == 4:
                raise RuntimeError("boom")
            return n

        result = await BatchExecutor(max_concurrent=2, max_batch_size=2).execute(
            list(range(6)), process
        )

        assert result.succeeded == [0, 1, 2, 3, 5]
        assert [i for i, _ in result.failed] == [4]

    async def test_concurrency_limit(self):
        in_flight = 0
        peak = 0

        async def process(n: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return n

        await BatchExecutor(max_concurrent=3).execute(list(range(10)), process)

        assert peak == 3

    async def test_concurrency_defaults_to_pacer_limit(self):
        pacer = ProviderPacer("trello", ProviderLimitsConfig(max_concurrent=4))
        in_flight = 0
        peak = 0

        async def process(n: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return n

        await BatchExecutor(pacer).execute(list(range(8)), process)

        assert peak == 4
        assert pacer.requests_in_window == 8

    async def test_cancellation_propagates(self):
        async def process(n: int) -> int:
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await BatchExecutor().execute([1], process)
