"""Bulk Sync Coordinator - create links for many feedback items at once.

Drives the orchestrator's create path over a set of feedback ids with
bounded per-provider concurrency. Every item settles independently: one
failure never aborts, rolls back or hides the others.
"""

from __future__ import annotations

import time
from collections.abc import Iterable

from feedback_sync.config import get_settings
from feedback_sync.db.repositories import (
    FeedbackRepository,
    LinkStateRepository,
    SyncFailureRepository,
)
from feedback_sync.exceptions import (
    AlreadyLinkedError,
    FeedbackNotFoundError,
    LocalSyncError,
)
from feedback_sync.logging import bind_provider
from feedback_sync.schemas import FeedbackSnapshot, ProjectSnapshot

from .batch import BatchExecutor
from .operations import Create
from .orchestrator import SyncOrchestrator
from .pacing import ProviderPacer, shared_pacer
from .results import BulkSyncResult, SyncOutcome


class BulkSyncCoordinator:
    """Service for bulk link creation on one provider.

    Usage:
        async with get_session() as session:
            async with SyncOrchestrator(session) as orchestrator:
                coordinator = BulkSyncCoordinator(orchestrator)
                result = await coordinator.bulk_create([1, 2, 3], project, "trello")
                print(result.created_count, result.failed)
    """

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        *,
        pacer: ProviderPacer | None = None,
        max_concurrent: int | None = None,
        max_batch_size: int | None = None,
        record_failures: bool = True,
    ) -> None:
        """Initialize the coordinator.

        Args:
            orchestrator: Orchestrator whose session and lock are shared
            pacer: Optional pacer (the provider's shared pacer otherwise)
            max_concurrent: Override the provider's configured concurrency
            max_batch_size: Override the configured batch size
            record_failures: Store remote failures in sync_failures for retry
        """
        self._orchestrator = orchestrator
        self._session = orchestrator.session
        self._lock = orchestrator.write_lock
        self._pacer = pacer
        self._max_concurrent = max_concurrent
        self._max_batch_size = max_batch_size or get_settings().sync.bulk_max_batch_size
        self._record_failures = record_failures

    async def bulk_create(
        self,
        feedback_ids: Iterable[int],
        project: ProjectSnapshot,
        provider_id: str,
        *,
        tags: Iterable[str] = (),
    ) -> BulkSyncResult:
        """Create remote resources for every eligible feedback item.

        Items already linked on the provider (or unknown to the project) are
        reported as failed without any network call.

        Args:
            feedback_ids: Feedback ids to link (duplicates are ignored)
            project: Project owning the feedback items
            provider_id: Target provider
            tags: Extra tags merged with the integration's default tags

        Returns:
            BulkSyncResult with created links and failed ids
        """
        start_time = time.monotonic()
        log = bind_provider(provider_id)
        ids = list(dict.fromkeys(feedback_ids))
        result = BulkSyncResult(provider=provider_id)

        if not ids:
            return result

        async with self._lock:
            feedbacks = await FeedbackRepository(self._session).get_many(ids)
            linked = await LinkStateRepository(self._session).linked_ids(ids, provider_id)

        eligible: list[FeedbackSnapshot] = []
        for feedback_id in ids:
            feedback = feedbacks.get(feedback_id)
            if feedback is None or feedback.project_id != project.id:
                result.add_failure(feedback_id, FeedbackNotFoundError(feedback_id))
            elif feedback_id in linked:
                result.add_failure(feedback_id, AlreadyLinkedError(feedback_id, provider_id))
            else:
                eligible.append(FeedbackSnapshot.from_orm(feedback))

        log.info(
            "Bulk create: {} requested, {} eligible, {} skipped",
            len(ids),
            len(eligible),
            result.failed_count,
        )

        op = Create(tags=tuple(tags))

        async def create(feedback: FeedbackSnapshot) -> SyncOutcome:
            return await self._orchestrator.sync(feedback, project, provider_id, op)

        executor: BatchExecutor[FeedbackSnapshot, SyncOutcome] = BatchExecutor(
            self._pacer or shared_pacer(provider_id),
            max_concurrent=self._max_concurrent,
            max_batch_size=self._max_batch_size,
        )
        batch = await executor.execute(eligible, create)

        for outcome in batch.succeeded:
            result.add(outcome)
        for index, error in batch.failed:
            log.opt(exception=error).error("Unexpected error creating item {}", eligible[index].id)
            result.add_failure(eligible[index].id, error)

        if self._record_failures:
            await self._record(result, provider_id)

        log.info(
            "Bulk create complete: created={}, failed={} ({:.1f}s)",
            result.created_count,
            result.failed_count,
            time.monotonic() - start_time,
        )
        return result

    async def _record(self, result: BulkSyncResult, provider_id: str) -> None:
        """Store retryable (non-local) failures for the retry service."""
        retryable = {
            fid: err for fid, err in result.errors.items() if not isinstance(err, LocalSyncError)
        }
        if not retryable:
            return

        async with self._lock:
            failures = SyncFailureRepository(self._session)
            for feedback_id, error in retryable.items():
                await failures.record_failure(feedback_id, provider_id, error)
            await self._session.commit()
