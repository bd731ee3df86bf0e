"""Pooled connection sources for hangar repositories.

Usage::

    from hangar.core.adapters import SQLiteAdapter

    adapter = SQLiteAdapter("planes.db")
    with adapter.transaction() as conn:
        conn.execute("DELETE FROM parts")
"""

from .base import CursorConnection, DatabaseAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "CursorConnection",
    "DatabaseAdapter",
    "DatabaseConfig",
    "DatabaseType",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
]
