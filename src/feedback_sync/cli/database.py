"""Database commands."""

import typer

from feedback_sync.cli.common import console, run_async_command
from feedback_sync.config import get_settings
from feedback_sync.db import create_tables, dispose_engine

app = typer.Typer(help="Database management")


@app.command("init")
def db_init() -> None:
    """Create the engine's tables in the configured database.

    Production deployments should prefer `alembic upgrade head`.
    """

    async def _init() -> None:
        try:
            await create_tables()
        finally:
            await dispose_engine()

    run_async_command(_init(), error_prefix="Database init failed")
    console.print(f"[green]Initialized[/green] {get_settings().database_url}")
