"""Repository for IntegrationConfig model CRUD operations."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.models import IntegrationConfig

from .base import BaseRepository


class IntegrationConfigRepository(BaseRepository[IntegrationConfig]):
    """Repository for per-project, per-provider integration settings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, IntegrationConfig)

    async def get_for(self, project_id: int, provider: str) -> IntegrationConfig | None:
        """Get the config of one provider for a project."""
        stmt = select(IntegrationConfig).where(
            IntegrationConfig.project_id == project_id,
            IntegrationConfig.provider == provider,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: int) -> list[IntegrationConfig]:
        """Get every provider config of a project."""
        stmt = (
            select(IntegrationConfig)
            .where(IntegrationConfig.project_id == project_id)
            .order_by(IntegrationConfig.provider)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def upsert(self, project_id: int, provider: str, **fields: Any) -> IntegrationConfig:
        """Create or update a provider config.

        Only the given fields are written; the rest keep their stored values.

        Args:
            project_id: Project ID
            provider: Provider identifier
            **fields: Column values to set (e.g., credential, target_ref)

        Returns:
            The created or updated config
        """
        config = await self.get_for(project_id, provider)
        if config is None:
            config = IntegrationConfig(project_id=project_id, provider=provider)
            self.add(config)
        for name, value in fields.items():
            if not hasattr(IntegrationConfig, name):
                raise AttributeError(f"IntegrationConfig has no field '{name}'")
            setattr(config, name, value)
        await self.flush()
        return config
