"""Repository pattern implementation for database access.

This module provides repository classes that encapsulate all database
access logic, providing a clean abstraction over SQLAlchemy models.
"""

from .base import BaseRepository
from .integration_config import IntegrationConfigRepository
from .link_state import DuplicateLinkError, LinkStateRepository
from .project import FeedbackRepository, ProjectRepository
from .sync_failure import SyncFailureRepository

__all__ = [
    "BaseRepository",
    "DuplicateLinkError",
    "FeedbackRepository",
    "IntegrationConfigRepository",
    "LinkStateRepository",
    "ProjectRepository",
    "SyncFailureRepository",
]
