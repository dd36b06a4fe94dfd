"""Link commands: create remote items for feedback and inspect links."""

from typing import Annotated, Any

import typer

from feedback_sync.cli.common import (
    FeedbackIdArgument,
    OutputFormatOption,
    ProviderArgument,
    TagsOption,
    console,
    parse_ids,
    parse_tags,
    print_json,
    run_async_command,
)
from feedback_sync.db import get_session
from feedback_sync.sync import IntegrationSyncService, OutputFormat

app = typer.Typer(help="Link feedback items to provider resources")


@app.command("create")
def link_create(
    feedback_id: FeedbackIdArgument,
    provider: ProviderArgument,
    tags: TagsOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Create the remote resource for one feedback item.

    Examples:
        fbsync link create 42 linear
        fbsync link create 42 github --tags ui,roadmap
        fbsync link create 42 clickup --format json
    """

    async def _create() -> dict[str, Any]:
        async with get_session() as session:
            async with IntegrationSyncService(session) as service:
                outcome = await service.create_link(
                    feedback_id, provider, tags=parse_tags(tags)
                )
                return outcome.to_dict()

    result = run_async_command(_create())

    if output_format == OutputFormat.JSON:
        print_json(result)
        if not result["success"]:
            raise typer.Exit(1)
        return

    if not result["success"]:
        console.print(f"[red]Error:[/red] {result.get('error', 'Unknown error')}")
        raise typer.Exit(1)

    label = result.get("display_id") or result["remote_id"]
    console.print(
        f"[green]Linked[/green] feedback {feedback_id} to {provider} "
        f"[bold]{label}[/bold]: {result['remote_url']}"
    )


@app.command("bulk")
def link_bulk(
    ids: Annotated[str, typer.Argument(help="Comma-separated feedback ids (e.g., 1,2,3)")],
    provider: ProviderArgument,
    tags: TagsOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Create remote resources for many feedback items.

    Items already linked on the provider are reported as failed and skipped.

    Examples:
        fbsync link bulk 1,2,3 trello
        fbsync link bulk 1,2,3 notion --format json
    """
    feedback_ids = parse_ids(ids)

    async def _bulk() -> dict[str, Any]:
        async with get_session() as session:
            async with IntegrationSyncService(session) as service:
                result = await service.bulk_create_links(
                    feedback_ids, provider, tags=parse_tags(tags)
                )
                return result.to_dict(include_errors=True)

    result = run_async_command(_bulk(), error_prefix="Bulk create failed")

    if output_format == OutputFormat.JSON:
        print_json(result)
        return

    created = result["created"]
    failed = result["failed"]
    errors = result.get("errors", {})

    console.print(f"[bold]Bulk create on {provider}[/bold]")
    console.print()
    console.print(f"  [green]Created:[/green] {len(created)}")
    console.print(f"  [red]Failed:[/red]  {len(failed)}")

    if created:
        console.print()
        for link in created[:20]:
            label = link.get("display_id") or link["remote_id"]
            console.print(f"  [green]✓[/green] {link['feedback_id']}: {label} {link['remote_url']}")
        if len(created) > 20:
            console.print(f"  ... and {len(created) - 20} more")

    if failed:
        console.print()
        for feedback_id in failed[:20]:
            error = errors.get(str(feedback_id), {}).get("error", "Unknown error")
            error_msg = error[:60] + "..." if len(error) > 60 else error
            console.print(f"  [red]✗[/red] {feedback_id}: {error_msg}")
        if len(failed) > 20:
            console.print(f"  ... and {len(failed) - 20} more")


@app.command("show")
def link_show(
    feedback_id: FeedbackIdArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show every provider link of a feedback item.

    Examples:
        fbsync link show 42
        fbsync link show 42 --format json
    """

    async def _show() -> dict[str, Any]:
        async with get_session() as session:
            async with IntegrationSyncService(session) as service:
                links = await service.links_for(feedback_id)
                return {p: link.model_dump(mode="json") for p, link in links.items()}

    links = run_async_command(_show())

    if output_format == OutputFormat.JSON:
        print_json({"feedback_id": feedback_id, "links": links})
        return

    if not links:
        console.print(f"[dim]Feedback {feedback_id} is not linked to any provider[/dim]")
        return

    for provider, link in sorted(links.items()):
        label = link.get("display_id") or link["remote_id"]
        console.print(f"  [bold]{provider:<8}[/bold] {label:<12} {link['remote_url']}")
