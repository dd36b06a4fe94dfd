"""Enums shared by schemas, ORM models and providers."""

from enum import Enum


class FeedbackStatus(str, Enum):
    """Lifecycle status of a feedback item."""

    PENDING = "pending"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    BETA = "beta"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @property
    def display_name(self) -> str:
        """Human-readable label (e.g., "In Progress")."""
        return self.value.replace("_", " ").title()


class FeedbackCategory(str, Enum):
    """Kind of feedback submitted."""

    FEATURE_REQUEST = "feature_request"
    BUG_REPORT = "bug_report"
    IMPROVEMENT = "improvement"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Human-readable label (e.g., "Feature Request")."""
        return self.value.replace("_", " ").title()


class ProviderId(str, Enum):
    """Built-in external trackers."""

    GITHUB = "github"
    CLICKUP = "clickup"
    TRELLO = "trello"
    LINEAR = "linear"
    NOTION = "notion"
    MONDAY = "monday"
