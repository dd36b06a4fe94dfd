"""Database module for the feedback sync engine."""

from feedback_sync.db.engine import (
    create_tables,
    dispose_engine,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from feedback_sync.db.models import (
    Base,
    Feedback,
    IntegrationConfig,
    LinkState,
    Project,
    SyncFailure,
    SyncFailureStatus,
)
from feedback_sync.db.repositories import (
    BaseRepository,
    DuplicateLinkError,
    FeedbackRepository,
    IntegrationConfigRepository,
    LinkStateRepository,
    ProjectRepository,
    SyncFailureRepository,
)

__all__ = [
    # Models
    "Base",
    "Feedback",
    "IntegrationConfig",
    "LinkState",
    "Project",
    "SyncFailure",
    "SyncFailureStatus",
    # Engine
    "create_tables",
    "dispose_engine",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Repositories
    "BaseRepository",
    "DuplicateLinkError",
    "FeedbackRepository",
    "IntegrationConfigRepository",
    "LinkStateRepository",
    "ProjectRepository",
    "SyncFailureRepository",
]
