"""
CLI layer for hangar.

A Typer application whose commands only parse arguments and format output;
persistence goes through :class:`hangar.planes.PlaneRepository`.

Entry point::

    hangar --help
"""

from hangar.cli.app import app

__all__ = ["app"]
