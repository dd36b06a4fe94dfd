"""Sync engine for feedback integrations.

This module provides:
- SyncOrchestrator: one operation for one feedback item on one provider
- BulkSyncCoordinator: bounded-concurrency link creation for many items
- EventTriggeredSync: fire-and-forget hooks for lifecycle events
- HierarchyBrowser: configuration-time browsing of provider containers
- IntegrationSyncService: id-based surface for host API handlers
- FailureRetryService: retries of recorded create failures
"""

from .batch import BatchExecutor, BatchResult
from .bulk import BulkSyncCoordinator
from .enums import OutputFormat, SyncAction
from .hierarchy import HierarchyBrowser
from .operations import AddComment, Create, SetVotes, SyncOperation, UpdateStatus
from .orchestrator import SyncOrchestrator
from .pacing import ProviderPacer, shared_pacer
from .results import BulkSyncResult, SyncOutcome
from .retry_service import FailureRetryService, RetryResult
from .service import IntegrationSyncService
from .triggers import EventTriggeredSync

__all__ = [
    # Enums
    "OutputFormat",
    "SyncAction",
    # Operations
    "AddComment",
    "Create",
    "SetVotes",
    "SyncOperation",
    "UpdateStatus",
    # Results
    "BulkSyncResult",
    "RetryResult",
    "SyncOutcome",
    # Execution
    "BatchExecutor",
    "BatchResult",
    "ProviderPacer",
    "shared_pacer",
    # Services
    "BulkSyncCoordinator",
    "EventTriggeredSync",
    "FailureRetryService",
    "HierarchyBrowser",
    "IntegrationSyncService",
    "SyncOrchestrator",
]
