"""
Protocol definitions for the storage boundary.

Repositories depend on these shapes, never on a driver.  Any object that
matches them works, which is what lets the same repository code run on an
in-memory SQLite database in tests and a pooled PostgreSQL server in
production.

Architecture:
    ::

        protocols.py
        ├── Connection          — one checked-out connection (execute, fetch, commit)
        └── ConnectionProvider  — pooled source with scoped acquisition

        ConnectionProvider:
        ┌────────────────────────────────────────────────────────────┐
        │ connection()   → context manager, connection released on    │
        │                  every exit path                            │
        │ transaction()  → same, wrapped in BEGIN / COMMIT, ROLLBACK  │
        │                  on any exception                           │
        │ dialect        → SQL fragments for the backend              │
        └────────────────────────────────────────────────────────────┘

Tags:
    protocol, connection, database, hangar, contracts
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from hangar.core.dialect import Dialect


@runtime_checkable
class Connection(Protocol):
    """
    Minimal synchronous connection interface.

    ``execute`` returns an object with ``fetchone`` / ``fetchall`` /
    ``description`` / ``lastrowid`` (a DB-API cursor or the connection
    wrapper itself).

    Examples:
        >>> cursor = conn.execute("SELECT * FROM planes WHERE id = ?", (1,))
        >>> row = cursor.fetchone()
    """

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with optional parameters."""
        ...

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        """Execute SQL statement for multiple parameter sets."""
        ...

    def fetchone(self) -> Any:
        """Fetch one row from last query."""
        ...

    def fetchall(self) -> list:
        """Fetch all rows from last query."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    """
    Pooled connection source with scoped acquisition.

    Examples:
        >>> with provider.transaction() as conn:
        ...     conn.execute("DELETE FROM planes WHERE id = ?", (1,))
        ...     conn.execute("DELETE FROM parts WHERE planeid = ?", (1,))
        ...     # commits on exit, rolls back if either statement fails
    """

    @property
    def dialect(self) -> Dialect:
        """SQL dialect of the backing store."""
        ...

    def connection(self) -> AbstractContextManager[Connection]:
        """Check out a connection for the duration of the ``with`` block."""
        ...

    def transaction(self) -> AbstractContextManager[Connection]:
        """Check out a connection inside an explicit transaction."""
        ...


__all__ = [
    "Connection",
    "ConnectionProvider",
]
