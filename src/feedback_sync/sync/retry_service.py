"""Failure Retry Service - retry previously failed link creations.

Re-runs the create path for failures stored in the sync_failures table,
with a max retry limit and status tracking. The orchestrator itself stays
single-attempt; this is the caller-side retry.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from feedback_sync.db.repositories import FeedbackRepository, SyncFailureRepository
from feedback_sync.exceptions import AlreadyLinkedError, FeedbackNotFoundError
from feedback_sync.logging import get_logger
from feedback_sync.schemas import FeedbackSnapshot, ProjectSnapshot

from .enums import SyncAction
from .operations import Create
from .orchestrator import SyncOrchestrator
from .pacing import shared_pacer
from .results import SyncOutcome

logger = get_logger(__name__)


@dataclass
class RetryResult:
    """Result of a failure retry operation."""

    total_pending: int = 0
    """Total pending failures found to retry."""

    succeeded: int = 0
    """Failures that were resolved (created, or found linked meanwhile)."""

    failed_again: int = 0
    """Failures that failed again on retry."""

    marked_permanent: int = 0
    """Failures marked as permanent (max retries exceeded or feedback gone)."""

    skipped_dry_run: int = 0
    """Failures skipped due to dry-run mode."""

    duration_seconds: float = 0.0
    """Total time taken for the operation."""

    results: list[tuple[int, SyncOutcome]] = field(default_factory=list)
    """List of (feedback_id, outcome) tuples."""

    @property
    def total_attempted(self) -> int:
        """Total failures that were actually attempted (not dry-run)."""
        return self.succeeded + self.failed_again + self.marked_permanent

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_pending": self.total_pending,
            "succeeded": self.succeeded,
            "failed_again": self.failed_again,
            "marked_permanent": self.marked_permanent,
            "skipped_dry_run": self.skipped_dry_run,
            "total_attempted": self.total_attempted,
            "duration_seconds": round(self.duration_seconds, 2),
            "results": [
                {
                    "feedback_id": feedback_id,
                    "provider": outcome.provider,
                    "success": outcome.succeeded,
                    "error": str(outcome.error) if outcome.error else None,
                }
                for feedback_id, outcome in self.results
            ],
        }


class FailureRetryService:
    """Service for retrying previously failed link creations.

    Usage:
        async with get_session() as session:
            async with SyncOrchestrator(session) as orchestrator:
                service = FailureRetryService(orchestrator)
                result = await service.retry_failures(provider="clickup")
                print(f"Resolved: {result.succeeded}, Failed again: {result.failed_again}")
    """

    MAX_RETRIES = 3
    """Maximum retry attempts before marking failure as permanent."""

    def __init__(self, orchestrator: SyncOrchestrator) -> None:
        self._orchestrator = orchestrator
        self._session = orchestrator.session
        self._failures = SyncFailureRepository(orchestrator.session)
        self._feedbacks = FeedbackRepository(orchestrator.session)

    async def retry_failures(
        self,
        provider: str | None = None,
        max_items: int | None = None,
        dry_run: bool = False,
    ) -> RetryResult:
        """Retry pending failures.

        Args:
            provider: Filter by provider (optional)
            max_items: Maximum number of failures to retry (optional)
            dry_run: If True, don't actually retry, just report what would happen

        Returns:
            RetryResult with aggregated statistics
        """
        start_time = time.monotonic()
        result = RetryResult()

        limit = max_items or 100
        pending = await self._failures.get_pending(provider=provider, limit=limit)
        result.total_pending = len(pending)

        if not pending:
            logger.info("No pending failures to retry")
            result.duration_seconds = time.monotonic() - start_time
            return result

        logger.info(
            "Found {} pending failures to retry (limit={}, dry_run={})",
            len(pending),
            limit,
            dry_run,
        )

        # Plain values: a rolled-back link insert expires loaded rows
        work = [(f.id, f.feedback_id, f.provider, f.retry_count) for f in pending]

        for failure_id, feedback_id, failure_provider, retry_count in work:
            outcome = await self._retry_single(feedback_id, failure_provider, dry_run)
            result.results.append((feedback_id, outcome))

            if dry_run:
                result.skipped_dry_run += 1
            elif outcome.succeeded or isinstance(outcome.error, AlreadyLinkedError):
                result.succeeded += 1
                await self._failures.mark_resolved(failure_id)
                logger.info(
                    "Resolved failure for feedback {} on {} (retry {})",
                    feedback_id,
                    failure_provider,
                    retry_count,
                )
            elif isinstance(outcome.error, FeedbackNotFoundError):
                result.marked_permanent += 1
                await self._failures.mark_permanent(failure_id)
            elif retry_count >= self.MAX_RETRIES - 1:  # -1 because we just tried
                result.marked_permanent += 1
                await self._failures.mark_permanent(failure_id)
                logger.warning(
                    "Feedback {} on {} failed permanently after {} retries: {}",
                    feedback_id,
                    failure_provider,
                    retry_count + 1,
                    outcome.error,
                )
            else:
                result.failed_again += 1
                await self._failures.record_failure(
                    feedback_id,
                    failure_provider,
                    outcome.error or Exception("Unknown error"),
                )
                logger.warning(
                    "Feedback {} on {} failed again (retry {}/{}): {}",
                    feedback_id,
                    failure_provider,
                    retry_count + 1,
                    self.MAX_RETRIES,
                    outcome.error,
                )

        if not dry_run:
            await self._session.commit()

        result.duration_seconds = time.monotonic() - start_time

        logger.info(
            "Retry complete: succeeded={}, failed_again={}, permanent={} ({:.1f}s)",
            result.succeeded,
            result.failed_again,
            result.marked_permanent,
            result.duration_seconds,
        )

        return result

    async def _retry_single(
        self,
        feedback_id: int,
        provider: str,
        dry_run: bool,
    ) -> SyncOutcome:
        """Retry a single failure.

        Returns:
            SyncOutcome from the create attempt (a synthetic success in dry-run)
        """
        feedback = await self._feedbacks.get_with_links(feedback_id)
        if feedback is None:
            logger.error("Feedback {} not found for pending failure", feedback_id)
            return SyncOutcome.from_error(
                feedback_id,
                provider,
                SyncAction.CREATE,
                FeedbackNotFoundError(feedback_id),
            )

        if dry_run:
            return SyncOutcome.from_success(feedback_id, provider, SyncAction.CREATE)

        logger.debug("Retrying create for feedback {} on {}", feedback_id, provider)
        async with shared_pacer(provider).slot():
            return await self._orchestrator.sync(
                FeedbackSnapshot.from_orm(feedback),
                ProjectSnapshot.from_orm(feedback.project),
                provider,
                Create(),
            )

    async def get_failure_stats(self, provider: str | None = None) -> dict[str, Any]:
        """Get statistics about failures, by status."""
        return await self._failures.get_stats(provider)
