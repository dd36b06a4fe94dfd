"""Read models for the state the engine consumes and produces.

Feedback and projects are owned by collaborators; the engine only reads
them. Link states are owned by the engine.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .base import SchemaBase
from .enums import FeedbackCategory, FeedbackStatus


class ProjectSnapshot(SchemaBase):
    """Project fields needed to render remote items."""

    id: int = Field(description="Project ID")
    name: str = Field(min_length=1, description="Project display name")


class FeedbackSnapshot(SchemaBase):
    """Current state of a feedback item as seen by the engine."""

    id: int = Field(description="Feedback ID")
    project_id: int = Field(description="Owning project ID")
    title: str = Field(min_length=1, max_length=500)
    description: str = Field(default="")
    status: FeedbackStatus = Field(default=FeedbackStatus.PENDING)
    category: FeedbackCategory = Field(default=FeedbackCategory.FEATURE_REQUEST)
    vote_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    submitter_id: str | None = Field(default=None)
    submitter_email: str | None = Field(default=None)
    mrr: float | None = Field(default=None, description="Submitter MRR computed by billing")


class IntegrationConfigRead(SchemaBase):
    """Per-project, per-provider integration settings."""

    project_id: int
    provider: str
    credential: str | None = None
    target_ref: dict[str, str] = Field(default_factory=dict)
    target_names: dict[str, str] = Field(default_factory=dict)
    default_tags: list[str] = Field(default_factory=list)
    sync_status: bool = False
    sync_comments: bool = False
    sync_votes: bool = False
    votes_field_ref: str | None = None
    status_field_ref: str | None = None
    is_active: bool = True

    @field_validator("target_ref", "target_names", mode="before")
    @classmethod
    def stringify_values(cls, v: Any) -> dict[str, str] | Any:
        """Coerce stored JSON values (e.g., numeric board ids) to strings."""
        if not v:
            return {}
        if isinstance(v, dict):
            return {str(key): "" if value is None else str(value) for key, value in v.items()}
        return v

    def missing_target_keys(self, required: tuple[str, ...]) -> list[str]:
        """Return the required target keys that are absent or blank."""
        return [key for key in required if not (self.target_ref.get(key) or "").strip()]

    def is_configured(self, required: tuple[str, ...]) -> bool:
        """Whether a credential and every required target key are present."""
        has_credential = bool(self.credential and self.credential.strip())
        return has_credential and not self.missing_target_keys(required)


class LinkStateRead(SchemaBase):
    """The remote resource produced for a feedback item on one provider."""

    feedback_id: int
    provider: str
    remote_id: str
    remote_url: str
    display_id: str | None = None
    created_at: datetime | None = None


class RemoteRef(BaseModel):
    """Reference to a resource created on a provider."""

    remote_id: str = Field(min_length=1, description="Provider-side identifier")
    remote_url: str = Field(description="Browser URL of the resource")
    display_id: str | None = Field(
        default=None, description="Human-facing key (e.g., 'ENG-42', '#17')"
    )


class Resource(BaseModel):
    """A node returned while browsing a provider's hierarchy."""

    id: str
    name: str
    kind: str | None = Field(default=None, description="Node type (e.g., 'list', 'folder')")
