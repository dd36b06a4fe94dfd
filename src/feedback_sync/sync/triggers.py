"""Event-Triggered Sync - fire-and-forget hooks for feedback lifecycle events.

The feedback write that fires a hook has already committed; the hook only
schedules a detached task and returns. Sync failures are logged and
swallowed, never propagated back to the write.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Literal

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_sync.config import get_settings
from feedback_sync.db.engine import get_session_factory
from feedback_sync.db.repositories import FeedbackRepository, IntegrationConfigRepository
from feedback_sync.logging import bind_link, get_logger
from feedback_sync.providers import ProviderRegistry
from feedback_sync.schemas import FeedbackSnapshot, FeedbackStatus, ProjectSnapshot

from .operations import AddComment, SetVotes, SyncOperation, UpdateStatus
from .orchestrator import SyncOrchestrator
from .results import SyncOutcome

logger = get_logger(__name__)

Toggle = Literal["sync_status", "sync_comments", "sync_votes"]


class EventTriggeredSync:
    """Dispatches update syncs for linked providers as detached tasks.

    Usage:
        hooks = EventTriggeredSync()

        # After the status change has been committed
        hooks.notify_status_changed(feedback.id, FeedbackStatus.COMPLETED)

        # On shutdown
        await hooks.drain()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        registry: ProviderRegistry | None = None,
        *,
        timeout_seconds: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the hooks.

        Args:
            session_factory: Factory for the short-lived session each task opens
            registry: Provider registry (defaults to the built-in providers)
            timeout_seconds: Upper bound per task before it is cancelled
            http_client: Optional shared client injected into HTTP adapters
        """
        self._session_factory = session_factory or get_session_factory()
        self._registry = registry or ProviderRegistry.default()
        self._timeout = timeout_seconds or get_settings().sync.trigger_timeout_seconds
        self._http_client = http_client
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of dispatched tasks still running."""
        return len(self._tasks)

    # -------------------------------------------------------------------------
    # Hook points
    # -------------------------------------------------------------------------
    def notify_status_changed(
        self, feedback_id: int, new_status: FeedbackStatus
    ) -> asyncio.Task[None]:
        """Mirror a committed status change to every linked provider."""
        return self._dispatch(feedback_id, "sync_status", lambda: UpdateStatus(new_status))

    def notify_comment_added(
        self, feedback_id: int, comment_text: str, author_label: str = "User"
    ) -> asyncio.Task[None]:
        """Mirror a committed comment to every linked provider."""
        return self._dispatch(
            feedback_id, "sync_comments", lambda: AddComment(comment_text, author_label)
        )

    def notify_vote_count_changed(self, feedback_id: int, new_count: int) -> asyncio.Task[None]:
        """Mirror a committed vote count to every linked provider."""
        return self._dispatch(feedback_id, "sync_votes", lambda: SetVotes(new_count))

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for dispatched tasks to finish (graceful shutdown).

        Tasks still running after ``timeout`` seconds are cancelled.
        """
        if not self._tasks:
            return
        tasks = list(self._tasks)
        _, still_running = await asyncio.wait(tasks, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled {} sync tasks still running at shutdown", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------
    def _dispatch(
        self,
        feedback_id: int,
        toggle: Toggle,
        make_op: Callable[[], SyncOperation],
    ) -> asyncio.Task[None]:
        task = asyncio.create_task(
            self._run(feedback_id, toggle, make_op()),
            name=f"sync-{toggle}-{feedback_id}",
        )
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, feedback_id: int, toggle: Toggle, op: SyncOperation) -> None:
        try:
            await asyncio.wait_for(self._sync_linked(feedback_id, toggle, op), self._timeout)
        except TimeoutError:
            logger.warning(
                "{} for feedback {} timed out after {:.0f}s",
                op.action.value,
                feedback_id,
                self._timeout,
            )
        except Exception:
            logger.opt(exception=True).warning(
                "{} for feedback {} failed", op.action.value, feedback_id
            )

    async def _sync_linked(
        self, feedback_id: int, toggle: Toggle, op: SyncOperation
    ) -> list[SyncOutcome]:
        async with self._session_factory() as session:
            feedback = await FeedbackRepository(session).get_with_links(feedback_id)
            if feedback is None:
                logger.debug("Feedback {} vanished before {}", feedback_id, op.action.value)
                return []

            linked = {link.provider for link in feedback.links}
            configs = await IntegrationConfigRepository(session).list_for_project(
                feedback.project_id
            )
            providers = [
                config.provider
                for config in configs
                if config.is_active
                and getattr(config, toggle)
                and config.provider in linked
                and config.provider in self._registry
            ]
            if not providers:
                return []

            snapshot = FeedbackSnapshot.from_orm(feedback)
            project = ProjectSnapshot.from_orm(feedback.project)

            async with SyncOrchestrator(
                session, self._registry, http_client=self._http_client
            ) as orchestrator:
                outcomes = await asyncio.gather(
                    *(orchestrator.sync(snapshot, project, p, op) for p in providers)
                )

        for outcome in outcomes:
            if not outcome.succeeded:
                bind_link(feedback_id, outcome.provider).warning(
                    "Event sync {} failed: {}", op.action.value, outcome.error
                )
        return list(outcomes)
