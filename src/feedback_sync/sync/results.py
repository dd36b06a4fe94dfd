"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from dataclasses import dataclass, field

from feedback_sync.exceptions import AlreadyLinkedError, LocalSyncError
from feedback_sync.schemas import LinkStateRead

from .enums import SyncAction


@dataclass
class SyncOutcome:
    """Result of a single orchestrator call.

    Either ``Succeeded(link)`` or ``Failed(feedback_id, reason)``: exactly
    one of ``link`` (for creates) or ``error`` is meaningful.
    """

    feedback_id: int
    provider: str
    action: SyncAction

    link: LinkStateRead | None = None
    """The link read after the call (set for creates and updates)."""

    error: Exception | None = None
    """Exception if the call failed."""

    @property
    def succeeded(self) -> bool:
        """Check if the call completed without errors."""
        return self.error is None

    @property
    def is_local_failure(self) -> bool:
        """Whether the failure was decided locally, without a network call."""
        return isinstance(self.error, LocalSyncError)

    @property
    def reason(self) -> str | None:
        """Short failure reason (error class name), or None on success."""
        return type(self.error).__name__ if self.error else None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, object] = {
            "success": self.succeeded,
            "action": self.action.value,
            "feedback_id": self.feedback_id,
            "provider": self.provider,
        }

        if self.link:
            result["remote_id"] = self.link.remote_id
            result["remote_url"] = self.link.remote_url
            if self.link.display_id:
                result["display_id"] = self.link.display_id

        if self.error:
            result["error"] = str(self.error)
            result["error_type"] = type(self.error).__name__

        return result

    @classmethod
    def from_success(
        cls,
        feedback_id: int,
        provider: str,
        action: SyncAction,
        link: LinkStateRead | None = None,
    ) -> "SyncOutcome":
        """Create an outcome for a call the provider accepted."""
        return cls(feedback_id=feedback_id, provider=provider, action=action, link=link)

    @classmethod
    def from_error(
        cls,
        feedback_id: int,
        provider: str,
        action: SyncAction,
        error: Exception,
    ) -> "SyncOutcome":
        """Create an outcome representing a failed call."""
        return cls(feedback_id=feedback_id, provider=provider, action=action, error=error)


@dataclass
class BulkSyncResult:
    """Aggregate of a bulk create.

    The external contract is ``created`` plus the flat ``failed`` id list.
    ``errors`` keeps the reason per failed id for diagnostics.
    """

    provider: str
    created: list[LinkStateRead] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    errors: dict[int, Exception] = field(default_factory=dict)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total_count(self) -> int:
        return self.created_count + self.failed_count

    @property
    def already_linked(self) -> list[int]:
        """Failed ids that were skipped because a link already existed."""
        return [fid for fid in self.failed if isinstance(self.errors.get(fid), AlreadyLinkedError)]

    def add(self, outcome: SyncOutcome) -> None:
        """Fold one create outcome into the aggregate."""
        if outcome.succeeded and outcome.link is not None:
            self.created.append(outcome.link)
            return
        self.add_failure(
            outcome.feedback_id,
            outcome.error or RuntimeError("create returned no link"),
        )

    def add_failure(self, feedback_id: int, error: Exception) -> None:
        if feedback_id not in self.errors:
            self.failed.append(feedback_id)
        self.errors[feedback_id] = error

    def to_dict(self, *, include_errors: bool = False) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Args:
            include_errors: Add per-id failure reasons
        """
        result: dict[str, object] = {
            "provider": self.provider,
            "created": [link.model_dump(mode="json") for link in self.created],
            "failed": list(self.failed),
        }
        if include_errors:
            result["errors"] = {
                str(fid): {"error": str(err), "error_type": type(err).__name__}
                for fid, err in self.errors.items()
            }
        return result
