"""
Root Typer application for the hangar CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from hangar.core.logging import configure_logging
from hangar.core.settings import get_settings

app = Typer(
    name="hangar",
    help="hangar — plane/part persistence over hand-written SQL.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from hangar import __version__

        typer.echo(f"hangar {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override HANGAR_LOG_LEVEL."),
) -> None:
    """hangar CLI — manage the plane database."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.effective_log_level(),
        json_format=settings.json_logs,
    )


# ── Sub-command registration ─────────────────────────────────────────────

from hangar.cli.db import app as db_app  # noqa: E402
from hangar.cli.planes import app as planes_app  # noqa: E402

app.add_typer(db_app, name="db", help="Schema management.")
app.add_typer(planes_app, name="planes", help="Plane management.")


if __name__ == "__main__":
    app()
