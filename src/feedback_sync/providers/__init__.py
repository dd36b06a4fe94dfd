"""Provider adapters for external trackers.

This module provides:
- ProviderAdapter: uniform capability contract
- One adapter per built-in provider (GitHub, ClickUp, Trello, Linear, Notion, monday.com)
- StatusMapping tables and the ProviderRegistry that pairs them with adapters
"""

from .base import HttpProviderAdapter, ProviderAdapter
from .clickup import ClickUpAdapter
from .github import GitHubAdapter
from .linear import LinearAdapter
from .monday import MondayAdapter
from .notion import NotionAdapter
from .registry import ProviderEntry, ProviderRegistry
from .status import (
    CLICKUP_STATUS,
    GITHUB_STATUS,
    LINEAR_STATUS,
    MONDAY_STATUS,
    NOTION_STATUS,
    TRELLO_STATUS,
    StatusMapping,
)
from .trello import TrelloAdapter

__all__ = [
    # Contract
    "HttpProviderAdapter",
    "ProviderAdapter",
    # Adapters
    "ClickUpAdapter",
    "GitHubAdapter",
    "LinearAdapter",
    "MondayAdapter",
    "NotionAdapter",
    "TrelloAdapter",
    # Registry
    "ProviderEntry",
    "ProviderRegistry",
    # Status mapping
    "CLICKUP_STATUS",
    "GITHUB_STATUS",
    "LINEAR_STATUS",
    "MONDAY_STATUS",
    "NOTION_STATUS",
    "TRELLO_STATUS",
    "StatusMapping",
]
