"""Tests for FailureRetryService."""

from unittest.mock import AsyncMock, patch

import pytest

from feedback_sync.db.models import SyncFailureStatus
from feedback_sync.db.repositories import FeedbackRepository, LinkStateRepository
from feedback_sync.sync import FailureRetryService, SyncOrchestrator
from tests.factories import make_link_state, make_sync_failure, seed_linkable
from tests.fakes import PROVIDER


@pytest.fixture
async def orchestrator(db_session, fake_registry):
    async with SyncOrchestrator(db_session, fake_registry) as orch:
        yield orch


async def seed_failure(db_session, *, retry_count=0, linked=False):
    _, feedbacks, _ = await seed_linkable(db_session)
    if linked:
        make_link_state(db_session, feedbacks[0])
    failure = make_sync_failure(db_session, feedbacks[0], retry_count=retry_count)
    await db_session.commit()
    return feedbacks[0], failure


class TestRetryFailures:
    async def test_no_pending(self, orchestrator):
        result = await FailureRetryService(orchestrator).retry_failures()

        assert result.total_pending == 0
        assert result.total_attempted == 0

    async def test_success_resolves_failure(self, db_session, orchestrator, tracker):
        feedback, failure = await seed_failure(db_session)

        result = await FailureRetryService(orchestrator).retry_failures()

        assert result.succeeded == 1
        assert len(tracker.calls_of("create_item")) == 1
        await db_session.refresh(failure)
        assert failure.status == SyncFailureStatus.RESOLVED
        assert failure.resolved_at is not None
        assert await LinkStateRepository(db_session).get_for(feedback.id, PROVIDER) is not None

    async def test_already_linked_counts_as_resolved(self, db_session, orchestrator, tracker):
        _, failure = await seed_failure(db_session, linked=True)

        result = await FailureRetryService(orchestrator).retry_failures()

        assert result.succeeded == 1
        assert tracker.calls == []
        await db_session.refresh(failure)
        assert failure.status == SyncFailureStatus.RESOLVED

    async def test_failed_again_increments_retry_count(self, db_session, orchestrator, tracker):
        _, failure = await seed_failure(db_session)
        tracker.fail_all = True

        result = await FailureRetryService(orchestrator).retry_failures()

        assert result.failed_again == 1
        await db_session.refresh(failure)
        assert failure.status == SyncFailureStatus.PENDING
        assert failure.retry_count == 1
        assert "503" in failure.error_message

    async def test_permanent_after_max_retries(self, db_session, orchestrator, tracker):
        _, failure = await seed_failure(
            db_session, retry_count=FailureRetryService.MAX_RETRIES - 1
        )
        tracker.fail_all = True

        result = await FailureRetryService(orchestrator).retry_failures()

        assert result.marked_permanent == 1
        await db_session.refresh(failure)
        assert failure.status == SyncFailureStatus.PERMANENT

    async def test_missing_feedback_is_permanent(self, db_session, orchestrator, tracker):
        _, failure = await seed_failure(db_session)

        with patch.object(FeedbackRepository, "get_with_links", AsyncMock(return_value=None)):
            result = await FailureRetryService(orchestrator).retry_failures()

        assert result.marked_permanent == 1
        assert tracker.calls == []
        await db_session.refresh(failure)
        assert failure.status == SyncFailureStatus.PERMANENT

    async def test_dry_run_changes_nothing(self, db_session, orchestrator, tracker):
        _, failure = await seed_failure(db_session)

        result = await FailureRetryService(orchestrator).retry_failures(dry_run=True)

        assert result.skipped_dry_run == 1
        assert result.total_attempted == 0
        assert tracker.calls == []
        await db_session.refresh(failure)
        assert failure.status == SyncFailureStatus.PENDING

    async def test_provider_filter(self, db_session, orchestrator, tracker):
        await seed_failure(db_session)

        result = await FailureRetryService(orchestrator).retry_failures(provider="linear")

        assert result.total_pending == 0
        assert tracker.calls == []

    async def test_to_dict(self, db_session, orchestrator):
        feedback, _ = await seed_failure(db_session)

        data = (await FailureRetryService(orchestrator).retry_failures()).to_dict()

        assert data["succeeded"] == 1
        assert data["results"] == [
            {"feedback_id": feedback.id, "provider": PROVIDER, "success": True, "error": None}
        ]


class TestFailureStats:
    async def test_get_failure_stats(self, db_session, orchestrator):
        _, feedbacks, _ = await seed_linkable(db_session, count=2)
        make_sync_failure(db_session, feedbacks[0])
        make_sync_failure(db_session, feedbacks[1], status=SyncFailureStatus.PERMANENT)
        await db_session.commit()

        stats = await FailureRetryService(orchestrator).get_failure_stats()

        assert stats == {"pending": 1, "resolved": 0, "permanent": 1, "total": 2}
