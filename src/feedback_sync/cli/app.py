"""Main CLI application for the feedback sync engine."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from feedback_sync import __version__
from feedback_sync.cli import database as database_cmd
from feedback_sync.cli import failures as failures_cmd
from feedback_sync.cli import link as link_cmd
from feedback_sync.cli.common import (
    OutputFormatOption,
    ProviderArgument,
    console,
    print_json,
    run_async_command,
)
from feedback_sync.config import get_settings
from feedback_sync.db import get_session
from feedback_sync.logging import setup_logging
from feedback_sync.schemas import Resource
from feedback_sync.sync import IntegrationSyncService, OutputFormat

app = typer.Typer(
    name="fbsync",
    help="Mirror product feedback into external project trackers.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"fbsync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """Feedback Sync - link feedback items to GitHub, ClickUp, Trello, Linear, Notion and monday."""
    settings = get_settings()
    log_config = settings.logging

    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


@app.command()
def browse(
    provider: ProviderArgument,
    path: Annotated[
        list[str] | None,
        typer.Argument(help="Container ids from the root down (empty lists the root)"),
    ] = None,
    project_id: Annotated[
        int | None,
        typer.Option("--project", help="Use this project's stored credential"),
    ] = None,
    credential: Annotated[
        str | None,
        typer.Option("--credential", "-c", help="Provider credential (overrides --project)"),
    ] = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Browse a provider's containers to pick integration targets.

    Examples:
        fbsync browse clickup --project 1
        fbsync browse clickup 9001 90020 --project 1
        fbsync browse trello --credential $TRELLO_TOKEN --format json
    """

    async def _browse() -> list[Resource]:
        async with get_session() as session:
            async with IntegrationSyncService(session) as service:
                return await service.browse_hierarchy(
                    provider,
                    path or [],
                    project_id=project_id,
                    credential=credential,
                )

    resources = run_async_command(_browse())

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "provider": provider,
                "path": path or [],
                "resources": [r.model_dump(mode="json") for r in resources],
            }
        )
        return

    if not resources:
        console.print("[dim]Nothing found at this level[/dim]")
        return

    table = Table(title=f"{provider} /{'/'.join(path or [])}")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Kind", style="dim")
    for resource in resources:
        table.add_row(resource.id, resource.name, resource.kind or "")
    console.print(table)


# Register subcommands
app.add_typer(link_cmd.app, name="link")
app.add_typer(failures_cmd.app, name="failures")
app.add_typer(database_cmd.app, name="db")


if __name__ == "__main__":
    app()
