"""Factory functions for creating test data.

Design principles:
- Factories provide sensible defaults that can be overridden
- Model factories add to session but don't flush (tests control flush timing)
"""

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from feedback_sync.db.models import (
    Feedback,
    IntegrationConfig,
    LinkState,
    Project,
    SyncFailure,
    SyncFailureStatus,
)
from feedback_sync.schemas import FeedbackCategory, FeedbackStatus
from tests.conftest import JAN_15
from tests.fakes import PROVIDER


# -----------------------------------------------------------------------------
# Model Factories
# -----------------------------------------------------------------------------
def make_project(session: AsyncSession, *, name: str = "Acme", **overrides: Any) -> Project:
    """Create a Project model instance (added to session, not flushed)."""
    project = Project(name=name, **overrides)
    session.add(project)
    return project


def make_feedback(
    session: AsyncSession,
    project: Project,
    *,
    title: str = "Dark mode",
    description: str = "Please add a dark theme.",
    status: FeedbackStatus = FeedbackStatus.PENDING,
    category: FeedbackCategory = FeedbackCategory.FEATURE_REQUEST,
    vote_count: int = 3,
    submitter_email: str | None = "ana@example.com",
    mrr: float | None = None,
    **overrides: Any,
) -> Feedback:
    """Create a Feedback model instance.

    Args:
        session: Async database session (model will be added but not flushed)
        project: Owning project (must be flushed so it has an id)
        title: Feedback title
        description: Feedback body
        status: Lifecycle status
        category: Feedback kind
        vote_count: Current votes
        submitter_email: Submitter contact shown in remote descriptions
        mrr: Submitter MRR
        **overrides: Additional field overrides

    Returns:
        Feedback instance (added to session, not flushed)
    """
    feedback = Feedback(
        project_id=project.id,
        title=title,
        description=description,
        status=status,
        category=category,
        vote_count=vote_count,
        submitter_email=submitter_email,
        mrr=mrr,
        **overrides,
    )
    session.add(feedback)
    return feedback


def make_integration_config(
    session: AsyncSession,
    project: Project,
    *,
    provider: str = PROVIDER,
    credential: str | None = "secret-token",
    target_ref: dict[str, str] | None = None,
    default_tags: list[str] | None = None,
    sync_status: bool = True,
    sync_comments: bool = True,
    sync_votes: bool = True,
    votes_field_ref: str | None = "votes",
    is_active: bool = True,
    **overrides: Any,
) -> IntegrationConfig:
    """Create an IntegrationConfig (defaults: configured, active, all toggles on)."""
    config = IntegrationConfig(
        project_id=project.id,
        provider=provider,
        credential=credential,
        target_ref={"board_id": "b1"} if target_ref is None else target_ref,
        target_names={},
        default_tags=default_tags or [],
        sync_status=sync_status,
        sync_comments=sync_comments,
        sync_votes=sync_votes,
        votes_field_ref=votes_field_ref,
        is_active=is_active,
        **overrides,
    )
    session.add(config)
    return config


def make_link_state(
    session: AsyncSession,
    feedback: Feedback,
    *,
    provider: str = PROVIDER,
    remote_id: str = "T-99",
    remote_url: str | None = None,
    display_id: str | None = "#99",
) -> LinkState:
    """Create a LinkState for an already-linked feedback item."""
    link = LinkState(
        feedback_id=feedback.id,
        provider=provider,
        remote_id=remote_id,
        remote_url=remote_url or f"https://trackerx.test/items/{remote_id}",
        display_id=display_id,
    )
    session.add(link)
    return link


def make_sync_failure(
    session: AsyncSession,
    feedback: Feedback,
    *,
    provider: str = PROVIDER,
    error_message: str = "trackerx error (503): service unavailable",
    error_type: str = "RemoteError",
    retry_count: int = 0,
    status: SyncFailureStatus = SyncFailureStatus.PENDING,
    failed_at: datetime | None = None,
    resolved_at: datetime | None = None,
) -> SyncFailure:
    """Create a SyncFailure model instance (added to session, not flushed)."""
    failure = SyncFailure(
        feedback_id=feedback.id,
        provider=provider,
        error_message=error_message,
        error_type=error_type,
        retry_count=retry_count,
        status=status,
        failed_at=failed_at or JAN_15,
        resolved_at=resolved_at,
    )
    session.add(failure)
    return failure


async def seed_linkable(
    session: AsyncSession,
    *,
    count: int = 1,
    **config_overrides: Any,
) -> tuple[Project, list[Feedback], IntegrationConfig]:
    """Create a project, ``count`` feedback items and a trackerx integration, flushed."""
    project = make_project(session)
    await session.flush()
    feedbacks = [make_feedback(session, project, title=f"Idea {i + 1}") for i in range(count)]
    config = make_integration_config(session, project, **config_overrides)
    await session.flush()
    return project, feedbacks, config
