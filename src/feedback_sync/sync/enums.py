"""Enums for sync operations."""

from enum import Enum


class SyncAction(str, Enum):
    """What a sync call did (or attempted) on the provider."""

    CREATE = "create"
    """Create the remote resource and record the link."""

    UPDATE_STATUS = "update_status"
    """Push a mapped status token to the linked resource."""

    ADD_COMMENT = "add_comment"
    """Append a comment to the linked resource."""

    SET_VOTES = "set_votes"
    """Write the vote count into the configured numeric field."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
