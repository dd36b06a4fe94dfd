"""Status taxonomy mapping from feedback statuses to provider tokens.

Each provider publishes a literal table. Tokens are either status names
(ClickUp, Notion, Monday), list names resolved against the board (Trello),
workflow state *types* resolved against the team (Linear), or issue
states (GitHub).
"""

from dataclasses import dataclass, field

from feedback_sync.schemas.enums import FeedbackStatus


@dataclass(frozen=True)
class StatusMapping:
    """Static mapping with a default token for unmapped statuses."""

    default: str
    table: dict[FeedbackStatus, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.default:
            raise ValueError("StatusMapping requires a non-empty default token")

    def map(self, status: FeedbackStatus) -> str:
        """Translate a feedback status into the provider's token."""
        return self.table.get(status) or self.default


def _table(*tokens: str) -> dict[FeedbackStatus, str]:
    """Build a table from tokens listed in FeedbackStatus declaration order."""
    return dict(zip(FeedbackStatus, tokens, strict=True))


GITHUB_STATUS = StatusMapping(
    default="open",
    table=_table("open", "open", "open", "open", "closed", "not_planned"),
)

CLICKUP_STATUS = StatusMapping(
    default="to do",
    table=_table("to do", "approved", "in progress", "in review", "complete", "closed"),
)

TRELLO_STATUS = StatusMapping(
    default="To Do",
    table=_table("To Do", "Approved", "In Progress", "In Review", "Done", "Closed"),
)

LINEAR_STATUS = StatusMapping(
    default="backlog",
    table=_table("backlog", "unstarted", "started", "started", "completed", "canceled"),
)

NOTION_STATUS = StatusMapping(
    default="To Do",
    table=_table("To Do", "Approved", "In Progress", "In Review", "Complete", "Closed"),
)

MONDAY_STATUS = StatusMapping(
    default="Pending",
    table=_table("Pending", "Approved", "Working on it", "In Review", "Done", "Stuck"),
)
