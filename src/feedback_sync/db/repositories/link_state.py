"""Repository for LinkState model operations.

Links are written once, when a remote create succeeds, and never updated
or deleted here.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.models import LinkState
from feedback_sync.schemas import RemoteRef

from .base import BaseRepository


class DuplicateLinkError(Exception):
    """A link for this feedback item and provider already exists."""

    def __init__(self, feedback_id: int, provider: str) -> None:
        self.feedback_id = feedback_id
        self.provider = provider
        super().__init__(f"Feedback {feedback_id} is already linked on {provider}")


class LinkStateRepository(BaseRepository[LinkState]):
    """Repository for feedback-to-remote links."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, LinkState)

    async def get_for(self, feedback_id: int, provider: str) -> LinkState | None:
        """Get the link of a feedback item on one provider."""
        stmt = select(LinkState).where(
            LinkState.feedback_id == feedback_id,
            LinkState.provider == provider,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_feedback(self, feedback_id: int) -> list[LinkState]:
        """Get every link of a feedback item."""
        stmt = (
            select(LinkState)
            .where(LinkState.feedback_id == feedback_id)
            .order_by(LinkState.provider)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def linked_ids(self, feedback_ids: list[int], provider: str) -> set[int]:
        """Return which of the given feedback items already have a link."""
        if not feedback_ids:
            return set()
        stmt = select(LinkState.feedback_id).where(
            LinkState.provider == provider,
            LinkState.feedback_id.in_(feedback_ids),
        )
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    async def create(self, feedback_id: int, provider: str, ref: RemoteRef) -> LinkState:
        """Record the remote item created for a feedback item.

        A duplicate rolls back the session before raising, so callers should
        commit earlier work before creating links.

        Raises:
            DuplicateLinkError: If a link already exists for the pair
        """
        link = LinkState(
            feedback_id=feedback_id,
            provider=provider,
            remote_id=ref.remote_id,
            remote_url=ref.remote_url,
            display_id=ref.display_id,
        )
        self.add(link)
        try:
            await self.flush()
        except IntegrityError as e:
            # The failed flush leaves the transaction unusable
            await self._session.rollback()
            raise DuplicateLinkError(feedback_id, provider) from e
        await self._session.refresh(link)
        return link
