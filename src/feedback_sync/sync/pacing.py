"""Per-provider request pacing.

Providers publish fixed budgets (requests per minute, sometimes a per-second
cap) rather than GitHub-style remaining/reset headers, so pacing is a
sliding one-minute window plus a minimum interval between request starts.
"""

from __future__ import annotations

import asyncio
import time
import weakref
from collections import deque
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from feedback_sync.config import ProviderLimitsConfig, get_settings
from feedback_sync.logging import get_logger

logger = get_logger(__name__)

WINDOW_SECONDS = 60.0


class ProviderPacer:
    """Calculates request delays for one provider.

    Usage:
        pacer = ProviderPacer("clickup")

        # Before each request
        await pacer.wait()
        # Make request...
    """

    def __init__(
        self,
        provider: str,
        limits: ProviderLimitsConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the pacer.

        Args:
            provider: Provider identifier (used for logging and default limits)
            limits: Optional limits (uses settings if not provided)
            clock: Monotonic time source in seconds
        """
        self._provider = provider
        self._limits = limits or get_settings().limits_for(provider)
        self._clock = clock
        self._starts: deque[float] = deque()
        self._lock = asyncio.Lock()
        self._slots = asyncio.Semaphore(self._limits.max_concurrent)

    @property
    def limits(self) -> ProviderLimitsConfig:
        return self._limits

    def _prune(self, now: float) -> None:
        cutoff = now - WINDOW_SECONDS
        while self._starts and self._starts[0] <= cutoff:
            self._starts.popleft()

    # -------------------------------------------------------------------------
    # Delay Calculation
    # -------------------------------------------------------------------------
    def get_recommended_delay(self) -> float:
        """Seconds to wait before the next request may start (0 = now)."""
        now = self._clock()
        self._prune(now)
        delay = 0.0

        interval = self._limits.min_request_interval_ms / 1000
        if interval and self._starts:
            delay = max(delay, self._starts[-1] + interval - now)

        if len(self._starts) >= self._limits.requests_per_minute:
            # Oldest start in the window must age out first
            delay = max(delay, self._starts[0] + WINDOW_SECONDS - now)

        return max(0.0, delay)

    # -------------------------------------------------------------------------
    # Request Lifecycle
    # -------------------------------------------------------------------------
    def on_request_start(self) -> None:
        """Record that a request is starting."""
        now = self._clock()
        self._starts.append(now)
        self._prune(now)

    async def wait(self) -> None:
        """Sleep until a request may start, then record the start.

        Waiters are served one at a time so concurrent callers never
        overrun the window.
        """
        async with self._lock:
            delay = self.get_recommended_delay()
            while delay > 0:
                logger.debug("Pacing {}: waiting {:.2f}s before request", self._provider, delay)
                await asyncio.sleep(delay)
                delay = self.get_recommended_delay()
            self.on_request_start()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one of the provider's concurrent slots for a paced request."""
        async with self._slots:
            await self.wait()
            yield

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------
    @property
    def requests_in_window(self) -> int:
        """Request starts recorded in the last 60 seconds."""
        self._prune(self._clock())
        return len(self._starts)

    def get_stats(self) -> dict[str, float | int | str]:
        """Get pacer statistics for monitoring."""
        return {
            "provider": self._provider,
            "requests_in_window": self.requests_in_window,
            "requests_per_minute_limit": self._limits.requests_per_minute,
            "recommended_delay_ms": round(self.get_recommended_delay() * 1000, 2),
        }


# One pacer per provider and event loop, shared by every caller on that loop
_shared: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, ProviderPacer]] = (
    weakref.WeakKeyDictionary()
)


def shared_pacer(provider: str) -> ProviderPacer:
    """Get the process-wide pacer for a provider.

    Bulk runs, retries and hooks on the same provider draw from one budget
    and one concurrency limit. Must be called from a running event loop.
    """
    pacers = _shared.setdefault(asyncio.get_running_loop(), {})
    if provider not in pacers:
        pacers[provider] = ProviderPacer(provider)
    return pacers[provider]
