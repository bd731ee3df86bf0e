"""
CLI: ``hangar db`` — schema management commands.
"""

from __future__ import annotations

import typer

from hangar.cli.utils import cli_errors, console, get_adapter
from hangar.planes.schema import PARTS_TABLE, PLANES_TABLE, bootstrap_schema, ensure_schema, table_exists

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL or path"),
    force: bool = typer.Option(False, "--force", help="Drop and recreate the tables even if present"),
) -> None:
    """Create the planes/parts tables if they are missing."""
    with cli_errors(), get_adapter(database) as adapter:
        if force:
            bootstrap_schema(adapter)
            created = True
        else:
            created = ensure_schema(adapter)
    if created:
        console.print("[green]Schema created[/green] (existing plane data, if any, was dropped)")
    else:
        console.print("Schema already present")


@app.command()
def status(
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL or path"),
) -> None:
    """Show whether the planes/parts tables exist."""
    with cli_errors(), get_adapter(database) as adapter:
        for table in (PLANES_TABLE, PARTS_TABLE):
            state = "[green]present[/green]" if table_exists(adapter, table) else "[red]missing[/red]"
            console.print(f"{table}: {state}")
