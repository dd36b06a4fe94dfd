"""Repository for Project and Feedback reads."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from feedback_sync.db.models import Feedback, Project

from .base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Projects are created by collaborators; the engine reads them."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def create(self, name: str) -> Project:
        """Create a project (used by seeding and tests)."""
        project = Project(name=name)
        self.add(project)
        await self.flush()
        return project


class FeedbackRepository(BaseRepository[Feedback]):
    """Read access to feedback items and their loaded links."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Feedback)

    async def get_with_links(self, feedback_id: int) -> Feedback | None:
        """Get a feedback item with its project and links eagerly loaded."""
        stmt = (
            select(Feedback)
            .where(Feedback.id == feedback_id)
            .options(selectinload(Feedback.links), selectinload(Feedback.project))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, feedback_ids: list[int]) -> dict[int, Feedback]:
        """Get feedback items by ID, keyed by ID. Unknown IDs are omitted."""
        if not feedback_ids:
            return {}
        stmt = (
            select(Feedback)
            .where(Feedback.id.in_(feedback_ids))
            .options(selectinload(Feedback.links), selectinload(Feedback.project))
        )
        result = await self._session.execute(stmt)
        return {feedback.id: feedback for feedback in result.scalars().all()}

    async def list_for_project(self, project_id: int) -> list[Feedback]:
        """List feedback items of a project, oldest first."""
        stmt = (
            select(Feedback)
            .where(Feedback.project_id == project_id)
            .order_by(Feedback.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
