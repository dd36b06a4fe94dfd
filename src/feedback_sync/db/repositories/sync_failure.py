"""Repository for SyncFailure model CRUD operations."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.models import SyncFailure, SyncFailureStatus

from .base import BaseRepository


class SyncFailureRepository(BaseRepository[SyncFailure]):
    """Repository for tracking failed link creations.

    Manages the lifecycle of sync failures:
    - Recording new failures
    - Querying pending failures for retry
    - Marking failures as resolved or permanent
    - Tracking retry counts
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SyncFailure)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_pending(
        self,
        provider: str | None = None,
        limit: int = 100,
    ) -> list[SyncFailure]:
        """Get pending failures ready for retry.

        Args:
            provider: Filter by provider (optional)
            limit: Maximum number of failures to return

        Returns:
            List of pending failures ordered by failed_at (oldest first)
        """
        stmt = (
            select(SyncFailure)
            .where(SyncFailure.status == SyncFailureStatus.PENDING)
            .order_by(SyncFailure.failed_at)
            .limit(limit)
        )

        if provider is not None:
            stmt = stmt.where(SyncFailure.provider == provider)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_for(
        self,
        feedback_id: int,
        provider: str,
        status: SyncFailureStatus = SyncFailureStatus.PENDING,
    ) -> SyncFailure | None:
        """Get the failure record of a feedback item on one provider.

        Args:
            feedback_id: Feedback ID
            provider: Provider identifier
            status: Status to match (defaults to PENDING)

        Returns:
            SyncFailure or None if not found
        """
        stmt = (
            select(SyncFailure)
            .where(
                SyncFailure.feedback_id == feedback_id,
                SyncFailure.provider == provider,
                SyncFailure.status == status,
            )
            .order_by(SyncFailure.failed_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_stats(self, provider: str | None = None) -> dict[str, Any]:
        """Get failure statistics by status.

        Args:
            provider: Filter by provider (optional)

        Returns:
            Dictionary with counts by status and total
        """
        base_stmt = select(SyncFailure.status, func.count(SyncFailure.id))

        if provider is not None:
            base_stmt = base_stmt.where(SyncFailure.provider == provider)

        stmt = base_stmt.group_by(SyncFailure.status)
        result = await self._session.execute(stmt)
        rows = result.all()

        stats: dict[str, Any] = {
            "pending": 0,
            "resolved": 0,
            "permanent": 0,
            "total": 0,
        }

        for status, count in rows:
            stats[status.value] = count
            stats["total"] += count

        return stats

    # -------------------------------------------------------------------------
    # Create/Update Methods
    # -------------------------------------------------------------------------

    async def record_failure(
        self,
        feedback_id: int,
        provider: str,
        error: Exception | str,
    ) -> SyncFailure:
        """Record a new failure or increment retry count on existing.

        If a pending failure already exists for this feedback item and
        provider, increments the retry count. Otherwise, creates a new record.

        Args:
            feedback_id: Feedback ID that failed to link
            provider: Provider identifier
            error: Exception or error message string

        Returns:
            The failure record (new or updated)
        """
        error_message = str(error)
        error_type = type(error).__name__ if isinstance(error, Exception) else "Unknown"

        existing = await self.get_for(feedback_id, provider, SyncFailureStatus.PENDING)

        if existing is not None:
            existing.retry_count += 1
            existing.error_message = error_message
            existing.error_type = error_type
            existing.failed_at = datetime.now(UTC)
            await self.flush()
            return existing

        failure = SyncFailure(
            feedback_id=feedback_id,
            provider=provider,
            error_message=error_message,
            error_type=error_type,
            retry_count=0,
            status=SyncFailureStatus.PENDING,
            failed_at=datetime.now(UTC),
        )
        self.add(failure)
        await self.flush()
        return failure

    async def mark_resolved(self, failure_id: int) -> SyncFailure | None:
        """Mark a failure as resolved after successful retry."""
        failure = await self.get_by_id(failure_id)
        if failure is None:
            return None

        failure.status = SyncFailureStatus.RESOLVED
        failure.resolved_at = datetime.now(UTC)
        await self.flush()
        return failure

    async def mark_permanent(self, failure_id: int) -> SyncFailure | None:
        """Mark a failure as permanent (no more retries).

        Use when max retries exceeded or error is non-retryable.
        """
        failure = await self.get_by_id(failure_id)
        if failure is None:
            return None

        failure.status = SyncFailureStatus.PERMANENT
        await self.flush()
        return failure

    async def delete_resolved(self, before: datetime | None = None) -> int:
        """Delete resolved failures.

        Args:
            before: Only delete failures resolved before this time

        Returns:
            Number of deleted records
        """
        stmt = delete(SyncFailure).where(SyncFailure.status == SyncFailureStatus.RESOLVED)

        if before is not None:
            stmt = stmt.where(SyncFailure.resolved_at < before)

        cursor_result = await self._session.execute(stmt)
        row_count: int = getattr(cursor_result, "rowcount", 0) or 0
        return row_count
