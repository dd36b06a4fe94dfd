"""Common CLI option factories and helpers.

This module centralizes reusable CLI options as Annotated aliases.

It also provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- `parse_ids`: Comma-separated feedback id parsing
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console

from feedback_sync.sync.enums import OutputFormat

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


def print_json(data: dict[str, Any]) -> None:
    """Print a result dictionary as formatted JSON."""
    console.print_json(json.dumps(data, default=str))


# Reusable option and argument types

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Don't call providers or write to the database, just show what would happen",
    ),
]

FeedbackIdArgument = Annotated[
    int,
    typer.Argument(help="Feedback item id"),
]

ProviderArgument = Annotated[
    str,
    typer.Argument(
        help="Provider identifier (github, clickup, trello, linear, notion, monday)",
    ),
]

ProviderFilterOption = Annotated[
    str | None,
    typer.Option(
        "--provider",
        "-p",
        help="Filter by provider",
    ),
]

TagsOption = Annotated[
    str | None,
    typer.Option(
        "--tags",
        "-t",
        help="Comma-separated extra tags, merged with the integration's default tags",
    ),
]


# -----------------------------------------------------------------------------
# Parsing Helpers
# -----------------------------------------------------------------------------


def parse_ids(ids_str: str) -> list[int]:
    """Parse a comma-separated list of feedback ids.

    Raises:
        typer.Exit(1): If any entry is not an integer
    """
    ids: list[int] = []
    for part in ids_str.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            console.print(f"[red]Error:[/red] '{part}' is not a feedback id")
            raise typer.Exit(1) from None
    if not ids:
        console.print("[red]Error:[/red] No feedback ids given")
        raise typer.Exit(1)
    return ids


def parse_tags(tags_str: str | None) -> list[str]:
    """Parse a comma-separated tag list (None means no tags)."""
    if tags_str is None:
        return []
    return [t.strip() for t in tags_str.split(",") if t.strip()]
