"""Batch executor for fanning provider calls out with bounded concurrency.

Each item runs under the provider pacer's concurrency slots and request
window, plus an optional per-batch cap. Every item is awaited to
completion; one failure never cancels or short-circuits the rest.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from feedback_sync.logging import get_logger

from .pacing import ProviderPacer

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchResult(Generic[T]):
    """Result of a batch operation."""

    succeeded: list[T] = field(default_factory=list)
    failed: list[tuple[int, Exception]] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        """Total number of items processed."""
        return len(self.succeeded) + len(self.failed)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def all_succeeded(self) -> bool:
        return len(self.failed) == 0


class BatchExecutor(Generic[T, R]):
    """Runs a processor over items with bounded concurrency and pacing.

    Usage:
        executor = BatchExecutor(pacer, max_concurrent=3)

        async def create(feedback_id: int) -> SyncOutcome:
            return await orchestrator.sync(...)

        result = await executor.execute([1, 2, 3], create)
        for index, error in result.failed:
            print(index, error)
    """

    def __init__(
        self,
        pacer: ProviderPacer | None = None,
        *,
        max_concurrent: int | None = None,
        max_batch_size: int = 50,
    ) -> None:
        """Initialize the batch executor.

        Args:
            pacer: Optional pacer awaited before each item starts
            max_concurrent: Extra cap on parallel items (the pacer's slots always
                apply; without a pacer the default is 1)
            max_batch_size: Items submitted together before the next chunk
        """
        self._pacer = pacer
        if max_concurrent is None and pacer is None:
            max_concurrent = 1
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None
        self._max_batch_size = max_batch_size

    async def execute(
        self,
        items: Sequence[T],
        processor: Callable[[T], Awaitable[R]],
    ) -> BatchResult[R]:
        """Execute a batch operation on all items.

        Args:
            items: Sequence of items to process
            processor: Async function to process each item

        Returns:
            BatchResult containing succeeded results and (index, error) failures
        """
        result: BatchResult[R] = BatchResult()

        for batch_start in range(0, len(items), self._max_batch_size):
            batch = items[batch_start : batch_start + self._max_batch_size]
            results = await asyncio.gather(
                *(self._execute_item(item, processor) for item in batch),
                return_exceptions=True,
            )

            for offset, res in enumerate(results):
                if isinstance(res, Exception):
                    logger.debug("Batch item {} failed: {}", batch_start + offset, res)
                    result.failed.append((batch_start + offset, res))
                elif isinstance(res, BaseException):
                    # Cancellation and interpreter exits are not item failures
                    raise res
                else:
                    result.succeeded.append(res)

        return result

    async def _execute_item(self, item: T, processor: Callable[[T], Awaitable[R]]) -> R:
        async with contextlib.AsyncExitStack() as stack:
            if self._semaphore is not None:
                await stack.enter_async_context(self._semaphore)
            if self._pacer is not None:
                await stack.enter_async_context(self._pacer.slot())
            return await processor(item)
