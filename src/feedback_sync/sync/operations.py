"""Operations accepted by the sync orchestrator."""

from dataclasses import dataclass, field

from feedback_sync.schemas.enums import FeedbackStatus

from .enums import SyncAction


@dataclass(frozen=True)
class Create:
    """Create the remote resource for a feedback item."""

    tags: tuple[str, ...] = field(default_factory=tuple)

    action = SyncAction.CREATE


@dataclass(frozen=True)
class UpdateStatus:
    """Mirror a status change onto the linked resource."""

    status: FeedbackStatus

    action = SyncAction.UPDATE_STATUS


@dataclass(frozen=True)
class AddComment:
    """Mirror a new comment onto the linked resource."""

    text: str
    author_label: str = "User"

    action = SyncAction.ADD_COMMENT


@dataclass(frozen=True)
class SetVotes:
    """Mirror the vote count into the provider's numeric field."""

    count: int

    action = SyncAction.SET_VOTES


SyncOperation = Create | UpdateStatus | AddComment | SetVotes
