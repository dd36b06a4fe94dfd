"""Failure commands: inspect and retry recorded create failures."""

from typing import Annotated, Any

import typer
from rich.table import Table

from feedback_sync.cli.common import (
    DryRunOption,
    OutputFormatOption,
    ProviderFilterOption,
    console,
    print_json,
    run_async_command,
)
from feedback_sync.db import get_session
from feedback_sync.sync import FailureRetryService, OutputFormat, SyncOrchestrator

app = typer.Typer(help="Inspect and retry failed link creations")


@app.command("stats")
def failures_stats(
    provider: ProviderFilterOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show failure counts by status.

    Examples:
        fbsync failures stats
        fbsync failures stats --provider linear --format json
    """

    async def _stats() -> dict[str, Any]:
        async with get_session() as session:
            async with SyncOrchestrator(session) as orchestrator:
                return await FailureRetryService(orchestrator).get_failure_stats(provider)

    stats = run_async_command(_stats())

    if output_format == OutputFormat.JSON:
        print_json(stats)
        return

    table = Table(title=f"Sync failures{f' ({provider})' if provider else ''}")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    table.add_row("[yellow]pending[/yellow]", str(stats["pending"]))
    table.add_row("[green]resolved[/green]", str(stats["resolved"]))
    table.add_row("[red]permanent[/red]", str(stats["permanent"]))
    table.add_row("[bold]total[/bold]", str(stats["total"]))
    console.print(table)


@app.command("retry")
def failures_retry(
    provider: ProviderFilterOption = None,
    max_items: Annotated[
        int | None,
        typer.Option("--max", "-m", help="Maximum number of failures to retry"),
    ] = None,
    dry_run: DryRunOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Retry previously failed link creations.

    Failures are recorded automatically when a create fails remotely.

    Examples:
        fbsync failures retry                       # Retry all pending failures
        fbsync failures retry --provider clickup    # Retry failures for one provider
        fbsync failures retry --max 10              # Retry up to 10 failures
        fbsync failures retry --dry-run             # Preview without changes
    """

    async def _retry() -> dict[str, Any]:
        async with get_session() as session:
            async with SyncOrchestrator(session) as orchestrator:
                service = FailureRetryService(orchestrator)
                result = await service.retry_failures(
                    provider=provider,
                    max_items=max_items,
                    dry_run=dry_run,
                )
                return result.to_dict()

    result = run_async_command(_retry(), error_prefix="Retry failed")

    if output_format == OutputFormat.JSON:
        print_json(result)
        return

    total_pending = result.get("total_pending", 0)

    if total_pending == 0:
        console.print("[dim]No pending failures to retry[/dim]")
        return

    prefix = "[dim](dry-run)[/dim] " if dry_run else ""
    console.print(f"{prefix}[bold]Retry Results[/bold]")
    console.print()
    console.print(f"  Pending failures:   {total_pending}")
    console.print(f"  [green]Succeeded:[/green]          {result.get('succeeded', 0)}")
    console.print(f"  [yellow]Failed again:[/yellow]       {result.get('failed_again', 0)}")
    console.print(f"  [red]Marked permanent:[/red]   {result.get('marked_permanent', 0)}")
    console.print()
    console.print(f"  Duration: {result.get('duration_seconds', 0):.1f}s")

    results = result.get("results", [])
    if results:
        console.print()
        console.print("[bold]Individual Results:[/bold]")
        for item in results[:20]:
            label = f"{item['feedback_id']} on {item['provider']}"
            if item.get("success"):
                console.print(f"  [green]✓[/green] {label}")
            else:
                error = item.get("error") or "Unknown error"
                error_msg = error[:60] + "..." if len(error) > 60 else error
                console.print(f"  [red]✗[/red] {label}: {error_msg}")

        if len(results) > 20:
            console.print(f"  ... and {len(results) - 20} more")
