"""
CLI utility helpers — output formatting and repository construction.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from hangar.core.adapters import DatabaseAdapter
from hangar.core.connection import create_adapter
from hangar.core.errors import HangarError
from hangar.core.settings import get_settings
from hangar.planes import Plane, PlaneRepository

console = Console()
err_console = Console(stderr=True)


# ── Connection helpers ───────────────────────────────────────────────────


def get_adapter(database: str | None = None) -> DatabaseAdapter:
    """Adapter for ``database``, or for the configured URL when omitted."""
    settings = get_settings()
    return create_adapter(
        database or settings.resolved_database_url(),
        pool_size=settings.pool_size,
        pool_timeout=settings.pool_timeout,
        connect_timeout=settings.connect_timeout,
    )


@contextmanager
def open_repository(database: str | None = None) -> Iterator[PlaneRepository]:
    """Repository over a connected adapter that is closed when the block exits."""
    with get_adapter(database) as adapter:
        yield PlaneRepository(adapter)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Report hangar errors on stderr and exit with status 1."""
    try:
        yield
    except HangarError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1) from e


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def planes_table(planes: list[Plane], *, title: str = "Planes") -> Table:
    table = Table(title=title)
    for column in ("ID", "Name", "Length", "Wingspan", "First flight", "Category", "Parts"):
        table.add_column(column)
    for plane in planes:
        table.add_row(
            str(plane.id),
            plane.name or "",
            _num(plane.length),
            _num(plane.wingspan),
            plane.first_flight.isoformat() if plane.first_flight else "",
            plane.category or "",
            str(len(plane.parts)),
        )
    return table


def parts_table(plane: Plane) -> Table:
    table = Table(title=f"Parts of plane {plane.id}")
    for column in ("ID", "Code", "Description", "Duration"):
        table.add_column(column)
    for part in sorted(plane.parts, key=lambda p: p.id or 0):
        table.add_row(str(part.id), part.part_code or "", part.description or "", _num(part.duration))
    return table


def _num(value: float | None) -> str:
    return "" if value is None else f"{value:g}"
