"""Shared base for the engine's async SQLAlchemy repositories."""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Session holder with primary-key lookup and unflushed adds.

    Usage:
        class LinkStateRepository(BaseRepository[LinkState]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, LinkState)

    Repositories never commit. Callers sharing one session across
    coroutines serialize access with their own lock (see SyncOrchestrator).
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelT]) -> None:
        self._session = session
        self._model_class = model_class

    async def get_by_id(self, id: int) -> ModelT | None:
        """Get an entity by its primary key ID."""
        return await self._session.get(self._model_class, id)

    def add(self, entity: ModelT) -> ModelT:
        """Add an entity to the session (does not flush)."""
        self._session.add(entity)
        return entity

    async def flush(self) -> None:
        await self._session.flush()
