"""Sync Orchestrator - decides and executes one sync call.

Given (feedback, project, provider, operation), the orchestrator checks the
integration config and link state, calls the provider adapter once, and
records the link after a successful create. Every call resolves to a
SyncOutcome; nothing raised by a provider escapes.
"""

from __future__ import annotations

import asyncio

import httpx
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.repositories import (
    DuplicateLinkError,
    IntegrationConfigRepository,
    LinkStateRepository,
)
from feedback_sync.exceptions import (
    AlreadyLinkedError,
    InactiveError,
    LinkPersistenceError,
    LocalSyncError,
    NotConfiguredError,
    NotLinkedError,
    SyncError,
    UnsupportedOperationError,
)
from feedback_sync.logging import bind_link
from feedback_sync.providers import ProviderAdapter, ProviderEntry, ProviderRegistry
from feedback_sync.schemas import (
    FeedbackSnapshot,
    IntegrationConfigRead,
    LinkStateRead,
    ProjectSnapshot,
    RemoteRef,
    build_item_payload,
    merge_tags,
    render_comment,
)

from .operations import AddComment, Create, SetVotes, SyncOperation, UpdateStatus
from .results import SyncOutcome


class SyncOrchestrator:
    """Core decision/execution unit for one feedback item on one provider.

    Usage:
        async with get_session() as session:
            async with SyncOrchestrator(session) as orchestrator:
                outcome = await orchestrator.sync(feedback, project, "clickup", Create())
                if outcome.succeeded:
                    print(outcome.link.remote_url)

    Concurrency:
        Several coroutines may share one orchestrator (bulk creates). Every
        database access happens under ``write_lock``; provider calls do not.
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: ProviderRegistry | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            registry: Provider registry (defaults to the built-in providers)
            http_client: Optional shared client injected into HTTP adapters
            write_lock: Optional lock serializing session use
        """
        self._session = session
        self._registry = registry or ProviderRegistry.default()
        self._http_client = http_client
        self._lock = write_lock or asyncio.Lock()
        self._configs = IntegrationConfigRepository(session)
        self._links = LinkStateRepository(session)
        self._adapters: dict[tuple[int, str], ProviderAdapter] = {}

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def write_lock(self) -> asyncio.Lock:
        return self._lock

    async def close(self) -> None:
        """Close every adapter opened by this orchestrator."""
        adapters = list(self._adapters.values())
        self._adapters.clear()
        for adapter in adapters:
            await adapter.close()

    async def __aenter__(self) -> SyncOrchestrator:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------
    async def sync(
        self,
        feedback: FeedbackSnapshot,
        project: ProjectSnapshot,
        provider_id: str,
        op: SyncOperation,
    ) -> SyncOutcome:
        """Run one operation for a feedback item against a provider.

        Args:
            feedback: Current feedback state
            project: Owning project
            provider_id: Registered provider identifier
            op: Create, UpdateStatus, AddComment or SetVotes

        Returns:
            SyncOutcome carrying the link on success or the error on failure
        """
        log = bind_link(feedback.id, provider_id)

        try:
            entry = self._registry.get(provider_id)
            config = await self._load_config(project.id, entry)

            match op:
                case Create():
                    link = await self._create(feedback, project, config, entry, op)
                    log.info(
                        "Linked to {} ({})", link.display_id or link.remote_id, link.remote_url
                    )
                case UpdateStatus():
                    link = await self._require_link(feedback.id, provider_id)
                    token = entry.status_mapping.map(op.status)
                    await self._adapter(config).update_status(link.remote_id, token)
                    log.debug("Status {} pushed as '{}'", op.status.value, token)
                case AddComment():
                    link = await self._require_link(feedback.id, provider_id)
                    text = render_comment(op.text, op.author_label)
                    await self._adapter(config).add_comment(link.remote_id, text)
                    log.debug("Comment pushed")
                case SetVotes():
                    link = await self._require_link(feedback.id, provider_id)
                    adapter = self._adapter(config)
                    if not adapter.supports_numeric_fields:
                        raise UnsupportedOperationError(provider_id, "numeric fields")
                    if not config.votes_field_ref:
                        raise NotConfiguredError(provider_id, ["votes_field_ref"])
                    await adapter.set_numeric_field(
                        link.remote_id, config.votes_field_ref, op.count
                    )
                    log.debug("Vote count {} pushed", op.count)
                case _:
                    raise TypeError(f"Unsupported sync operation: {op!r}")

        except LocalSyncError as e:
            log.debug("{} skipped: {}", op.action.value, e)
            return SyncOutcome.from_error(feedback.id, provider_id, op.action, e)
        except SyncError as e:
            log.warning("{} failed: {}", op.action.value, e)
            return SyncOutcome.from_error(feedback.id, provider_id, op.action, e)

        return SyncOutcome.from_success(feedback.id, provider_id, op.action, link)

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------
    async def _load_config(self, project_id: int, entry: ProviderEntry) -> IntegrationConfigRead:
        async with self._lock:
            row = await self._configs.get_for(project_id, entry.provider_id)
            try:
                config = IntegrationConfigRead.from_orm(row) if row is not None else None
            except ValidationError as e:
                # Stored settings a collaborator wrote in an unusable shape
                fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
                raise NotConfiguredError(entry.provider_id, fields) from e

        if config is None:
            raise NotConfiguredError(
                entry.provider_id, ["credential", *entry.required_target_keys]
            )
        if not config.is_configured(entry.required_target_keys):
            missing = config.missing_target_keys(entry.required_target_keys)
            if not (config.credential or "").strip():
                missing.insert(0, "credential")
            raise NotConfiguredError(entry.provider_id, missing)
        if not config.is_active:
            raise InactiveError(entry.provider_id)
        return config

    async def _require_link(self, feedback_id: int, provider_id: str) -> LinkStateRead:
        async with self._lock:
            row = await self._links.get_for(feedback_id, provider_id)
            link = LinkStateRead.from_orm(row) if row is not None else None
        if link is None:
            raise NotLinkedError(feedback_id, provider_id)
        return link

    def _adapter(self, config: IntegrationConfigRead) -> ProviderAdapter:
        key = (config.project_id, config.provider)
        if key not in self._adapters:
            self._adapters[key] = self._registry.adapter_for(config, http_client=self._http_client)
        return self._adapters[key]

    # -------------------------------------------------------------------------
    # Create path
    # -------------------------------------------------------------------------
    async def _create(
        self,
        feedback: FeedbackSnapshot,
        project: ProjectSnapshot,
        config: IntegrationConfigRead,
        entry: ProviderEntry,
        op: Create,
    ) -> LinkStateRead:
        provider_id = entry.provider_id

        async with self._lock:
            existing = await self._links.get_for(feedback.id, provider_id)
        if existing is not None:
            raise AlreadyLinkedError(feedback.id, provider_id)

        payload = build_item_payload(feedback, project, merge_tags(config.default_tags, op.tags))
        ref = await self._adapter(config).create_item(
            config.target_ref, payload.title, payload.body, payload.tags
        )
        return await self._persist_link(feedback.id, provider_id, ref)

    async def _persist_link(
        self, feedback_id: int, provider_id: str, ref: RemoteRef
    ) -> LinkStateRead:
        """Store the link for a resource the provider already created.

        There is no compensating remote delete: if this fails, the remote
        resource is left orphaned and logged.
        """
        log = bind_link(feedback_id, provider_id)
        async with self._lock:
            try:
                row = await self._links.create(feedback_id, provider_id, ref)
                link = LinkStateRead.from_orm(row)
                await self._session.commit()
            except DuplicateLinkError as e:
                log.error(
                    "Orphaned remote resource {} ({}): link already recorded concurrently",
                    ref.remote_id,
                    ref.remote_url,
                )
                raise AlreadyLinkedError(feedback_id, provider_id) from e
            except SQLAlchemyError as e:
                await self._session.rollback()
                log.error(
                    "Orphaned remote resource {} ({}): {}",
                    ref.remote_id,
                    ref.remote_url,
                    e,
                )
                raise LinkPersistenceError(
                    provider_id, ref.remote_id, ref.remote_url, str(e)
                ) from e
        return link
