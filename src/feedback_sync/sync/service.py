"""Integration Sync Service - engine surface for host API handlers.

Loads feedback and project state by id, delegates to the orchestrator,
bulk coordinator and hierarchy browser, and records create failures for
later retry.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.repositories import (
    FeedbackRepository,
    IntegrationConfigRepository,
    LinkStateRepository,
    SyncFailureRepository,
)
from feedback_sync.exceptions import FeedbackNotFoundError, NotConfiguredError
from feedback_sync.logging import get_logger
from feedback_sync.providers import ProviderRegistry
from feedback_sync.schemas import FeedbackSnapshot, LinkStateRead, ProjectSnapshot, Resource

from .bulk import BulkSyncCoordinator
from .enums import SyncAction
from .hierarchy import HierarchyBrowser
from .operations import Create
from .orchestrator import SyncOrchestrator
from .results import BulkSyncResult, SyncOutcome

logger = get_logger(__name__)


class IntegrationSyncService:
    """Provider-agnostic link operations scoped to one session.

    Usage:
        async with get_session() as session:
            async with IntegrationSyncService(session) as service:
                outcome = await service.create_link(42, "linear")
                result = await service.bulk_create_links([1, 2, 3], "clickup")
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: ProviderRegistry | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        record_failures: bool = True,
    ) -> None:
        self._session = session
        self._registry = registry or ProviderRegistry.default()
        self._orchestrator = SyncOrchestrator(session, self._registry, http_client=http_client)
        self._browser = HierarchyBrowser(self._registry, http_client=http_client)
        self._record_failures = record_failures

    @property
    def orchestrator(self) -> SyncOrchestrator:
        return self._orchestrator

    async def close(self) -> None:
        await self._orchestrator.close()

    async def __aenter__(self) -> IntegrationSyncService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Link creation
    # -------------------------------------------------------------------------
    async def create_link(
        self,
        feedback_id: int,
        provider_id: str,
        *,
        tags: Iterable[str] = (),
    ) -> SyncOutcome:
        """Create the remote resource for one feedback item.

        Create-path failures are returned (never raised) so the caller can
        surface them; remote failures are also recorded for retry.
        """
        async with self._orchestrator.write_lock:
            feedback = await FeedbackRepository(self._session).get_with_links(feedback_id)
            if feedback is not None:
                snapshot = FeedbackSnapshot.from_orm(feedback)
                project = ProjectSnapshot.from_orm(feedback.project)

        if feedback is None:
            return SyncOutcome.from_error(
                feedback_id, provider_id, SyncAction.CREATE, FeedbackNotFoundError(feedback_id)
            )

        outcome = await self._orchestrator.sync(snapshot, project, provider_id, Create(tuple(tags)))

        if outcome.error is not None and not outcome.is_local_failure and self._record_failures:
            async with self._orchestrator.write_lock:
                await SyncFailureRepository(self._session).record_failure(
                    feedback_id, provider_id, outcome.error
                )
                await self._session.commit()
            logger.debug("Recorded create failure for feedback {} on {}", feedback_id, provider_id)

        return outcome

    async def bulk_create_links(
        self,
        feedback_ids: Sequence[int],
        provider_id: str,
        *,
        tags: Iterable[str] = (),
    ) -> BulkSyncResult:
        """Create remote resources for many feedback items.

        Items are grouped by project; unknown ids are reported as failed.
        """
        ids = list(dict.fromkeys(feedback_ids))
        result = BulkSyncResult(provider=provider_id)

        async with self._orchestrator.write_lock:
            feedbacks = await FeedbackRepository(self._session).get_many(ids)
            projects = {
                f.project_id: ProjectSnapshot.from_orm(f.project) for f in feedbacks.values()
            }

        by_project: dict[int, list[int]] = {}
        for feedback_id in ids:
            feedback = feedbacks.get(feedback_id)
            if feedback is None:
                result.add_failure(feedback_id, FeedbackNotFoundError(feedback_id))
            else:
                by_project.setdefault(feedback.project_id, []).append(feedback_id)

        coordinator = BulkSyncCoordinator(
            self._orchestrator, record_failures=self._record_failures
        )
        for project_id, project_ids in by_project.items():
            partial = await coordinator.bulk_create(
                project_ids, projects[project_id], provider_id, tags=tags
            )
            result.created.extend(partial.created)
            for feedback_id in partial.failed:
                result.add_failure(feedback_id, partial.errors[feedback_id])

        return result

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------
    async def link_for(self, feedback_id: int, provider_id: str) -> LinkStateRead | None:
        """Get the link of a feedback item on one provider."""
        async with self._orchestrator.write_lock:
            row = await LinkStateRepository(self._session).get_for(feedback_id, provider_id)
            return LinkStateRead.from_orm(row) if row is not None else None

    async def links_for(self, feedback_id: int) -> dict[str, LinkStateRead]:
        """Get every link of a feedback item, keyed by provider."""
        async with self._orchestrator.write_lock:
            rows = await LinkStateRepository(self._session).list_for_feedback(feedback_id)
            return {row.provider: LinkStateRead.from_orm(row) for row in rows}

    # -------------------------------------------------------------------------
    # Hierarchy
    # -------------------------------------------------------------------------
    async def browse_hierarchy(
        self,
        provider_id: str,
        path: Sequence[str] = (),
        *,
        project_id: int | None = None,
        credential: str | None = None,
    ) -> list[Resource]:
        """List configuration choices beneath ``path``.

        The credential is taken from the project's integration config unless
        given explicitly (e.g., while the user is still entering settings).

        Raises:
            NotConfiguredError: If no credential is available
            LocalSyncError: For unknown providers or unsupported depths
            RemoteError: If the provider rejects the call
        """
        if credential is None and project_id is not None:
            async with self._orchestrator.write_lock:
                config = await IntegrationConfigRepository(self._session).get_for(
                    project_id, provider_id
                )
                credential = config.credential if config is not None else None

        if credential is None:
            raise NotConfiguredError(provider_id, ["credential"])
        return await self._browser.list_children(provider_id, credential, path)
