"""
CLI: ``hangar planes`` — list, show, import and delete planes.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from hangar.cli.utils import (
    cli_errors,
    console,
    err_console,
    open_repository,
    parts_table,
    planes_table,
    print_json,
)
from hangar.planes import Plane

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_planes(
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL or path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List every plane with its part count."""
    with cli_errors(), open_repository(database) as repo:
        planes = repo.find_all()
    if json_out:
        print_json([p.to_dict() for p in planes])
        return
    console.print(planes_table(planes))


@app.command()
def show(
    plane_id: int = typer.Argument(..., help="Plane ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one plane and its parts."""
    with cli_errors(), open_repository(database) as repo:
        plane = repo.find_by_id(plane_id)
    if plane is None:
        err_console.print(f"[bold red]Plane {plane_id} not found[/bold red]")
        raise typer.Exit(code=1)
    if json_out:
        print_json(plane.to_dict())
        return
    console.print(planes_table([plane], title=f"Plane {plane_id}"))
    console.print(parts_table(plane))


@app.command("import")
def import_planes(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file: a plane or a list of planes"),
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """Save planes from a JSON file (an ``id`` that matches a row updates it)."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        items = payload if isinstance(payload, list) else [payload]
        planes = [Plane.from_dict(item) for item in items]
    except (ValueError, TypeError, AttributeError) as e:
        err_console.print(f"[bold red]Invalid plane file[/bold red]: {e}")
        raise typer.Exit(code=1) from e

    with cli_errors(), open_repository(database) as repo:
        saved = [repo.save(plane) for plane in planes]
    console.print(f"Saved {len(saved)} plane(s): {', '.join(str(p.id) for p in saved)}")


@app.command()
def delete(
    plane_id: int = typer.Argument(..., help="Plane ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """Delete a plane and its parts."""
    with cli_errors(), open_repository(database) as repo:
        repo.delete_by_id(plane_id)
    console.print(f"Deleted plane {plane_id}")


@app.command()
def purge(
    database: str | None = typer.Option(None, "--database", "-d"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every plane and part."""
    if not yes:
        typer.confirm("Delete ALL planes and parts?", abort=True)
    with cli_errors(), open_repository(database) as repo:
        repo.delete_all()
    console.print("All planes deleted")
