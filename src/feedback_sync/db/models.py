"""SQLAlchemy ORM models for the feedback sync engine."""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)
from sqlalchemy.types import JSON

from feedback_sync.schemas.enums import FeedbackCategory, FeedbackStatus


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class SyncFailureStatus(str, Enum):
    """Status of a sync failure for retry tracking."""

    PENDING = "pending"  # Waiting for retry
    RESOLVED = "resolved"  # Successfully retried
    PERMANENT = "permanent"  # Max retries exceeded or non-retryable error


# ------------------------------------------------------------------------------
# Project model (collaborator-owned)
# ------------------------------------------------------------------------------
class Project(Base):
    """Feedback project."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    feedbacks: Mapped[list["Feedback"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )
    integrations: Mapped[list["IntegrationConfig"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"


# ------------------------------------------------------------------------------
# Feedback model (collaborator-owned, links written by the engine)
# ------------------------------------------------------------------------------
class Feedback(Base):
    """A feedback item submitted to a project."""

    __tablename__ = "feedbacks"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"))

    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[FeedbackStatus] = mapped_column(default=FeedbackStatus.PENDING)
    category: Mapped[FeedbackCategory] = mapped_column(default=FeedbackCategory.FEATURE_REQUEST)

    vote_count: Mapped[int] = mapped_column(default=0)
    comment_count: Mapped[int] = mapped_column(default=0)

    submitter_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    submitter_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    mrr: Mapped[float | None] = mapped_column(Float, nullable=True)  # computed by billing

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    project: Mapped["Project"] = relationship(back_populates="feedbacks")
    links: Mapped[list["LinkState"]] = relationship(
        back_populates="feedback",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, project={self.project_id}, status={self.status.value})>"

    def link_for(self, provider: str) -> "LinkState | None":
        """Return the loaded link for a provider, if any."""
        for link in self.links:
            if link.provider == provider:
                return link
        return None


# ------------------------------------------------------------------------------
# IntegrationConfig model (edited by settings operations, read by the engine)
# ------------------------------------------------------------------------------
class IntegrationConfig(Base):
    """Per-project, per-provider integration settings.

    A missing credential or target reference leaves the provider
    unconfigured; is_active=False suspends sync without losing settings.
    """

    __tablename__ = "integration_configs"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"))
    provider: Mapped[str] = mapped_column(String(50))

    credential: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_ref: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)  # e.g. {"list_id": "9"}
    target_names: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)  # cached labels
    default_tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    sync_status: Mapped[bool] = mapped_column(default=False)
    sync_comments: Mapped[bool] = mapped_column(default=False)
    sync_votes: Mapped[bool] = mapped_column(default=False)
    votes_field_ref: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status_field_ref: Mapped[str | None] = mapped_column(String(200), nullable=True)

    is_active: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    project: Mapped["Project"] = relationship(back_populates="integrations")

    __table_args__ = (UniqueConstraint("project_id", "provider", name="uq_project_provider"),)

    def __repr__(self) -> str:
        return (
            f"<IntegrationConfig(id={self.id}, project={self.project_id}, "
            f"provider='{self.provider}', active={self.is_active})>"
        )


# ------------------------------------------------------------------------------
# LinkState model (engine-owned)
# ------------------------------------------------------------------------------
class LinkState(Base):
    """Remote resource created for a feedback item on one provider.

    Written once when the create call succeeds; never rewritten or deleted
    by the engine.
    """

    __tablename__ = "link_states"

    id: Mapped[int] = mapped_column(primary_key=True)
    feedback_id: Mapped[int] = mapped_column(ForeignKey("feedbacks.id", ondelete="CASCADE"))
    provider: Mapped[str] = mapped_column(String(50))

    remote_id: Mapped[str] = mapped_column(String(200))
    remote_url: Mapped[str] = mapped_column(String(1000))
    display_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    feedback: Mapped["Feedback"] = relationship(back_populates="links")

    # One link per feedback item and provider
    __table_args__ = (UniqueConstraint("feedback_id", "provider", name="uq_feedback_provider"),)

    def __repr__(self) -> str:
        return (
            f"<LinkState(feedback={self.feedback_id}, provider='{self.provider}', "
            f"remote_id='{self.remote_id}')>"
        )


# ------------------------------------------------------------------------------
# SyncFailure model
# ------------------------------------------------------------------------------
class SyncFailure(Base):
    """Track failed create attempts for retry.

    Records failures during single and bulk link creation, enabling:
    - Manual retry via `fbsync failures retry`
    - Failure analysis and metrics
    """

    __tablename__ = "sync_failures"

    id: Mapped[int] = mapped_column(primary_key=True)

    feedback_id: Mapped[int] = mapped_column(ForeignKey("feedbacks.id", ondelete="CASCADE"))
    provider: Mapped[str] = mapped_column(String(50))

    error_message: Mapped[str] = mapped_column(Text)
    error_type: Mapped[str] = mapped_column(String(100))  # e.g., "RemoteError"

    retry_count: Mapped[int] = mapped_column(default=0)
    status: Mapped[SyncFailureStatus] = mapped_column(default=SyncFailureStatus.PENDING)

    failed_at: Mapped[datetime] = mapped_column(DateTime)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    feedback: Mapped["Feedback"] = relationship()

    __table_args__ = (Index("ix_sync_failures_feedback_provider", "feedback_id", "provider"),)

    def __repr__(self) -> str:
        return (
            f"<SyncFailure(id={self.id}, feedback={self.feedback_id}, "
            f"provider='{self.provider}', status={self.status.value})>"
        )
