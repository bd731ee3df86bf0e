"""SQL dialect abstraction for backend-agnostic repositories.

Provides a ``Dialect`` protocol and the two supported implementations.
Repositories use ``Dialect`` methods to produce SQL fragments (placeholders,
auto-increment keys, generated-key retrieval, transaction start, row locks)
and to bind values, so no repository ever references a driver.

Architecture::

    Repository code:
    ┌────────────────────────────────────────────────────────────────┐
    │  sql = f"SELECT * FROM planes WHERE id = {d.placeholder(0)}"   │
    │  sql += d.for_update()                                         │
    │  conn.execute(sql, (plane_id,))                                │
    └────────────────────────────────────────────────────────────────┘
                              │
                 ┌────────────┴─────────────┐
                 ▼                          ▼
    ┌──────────────────────────┐ ┌──────────────────────────────┐
    │ SQLite                   │ │ PostgreSQL                   │
    │ ?, ?, ?                  │ │ %s, %s, %s                   │
    │ INTEGER PRIMARY KEY ...  │ │ SERIAL PRIMARY KEY           │
    │ cursor.lastrowid         │ │ INSERT ... RETURNING id      │
    │ BEGIN IMMEDIATE          │ │ implicit BEGIN, FOR UPDATE   │
    │ dates bound as ISO text  │ │ dates bound as date          │
    └──────────────────────────┘ └──────────────────────────────┘

Examples:
    >>> from hangar.core.dialect import get_dialect
    >>> d = get_dialect("sqlite")
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> get_dialect("postgresql").insert_returning("planes", ["name"], "id")
    'INSERT INTO planes (name) VALUES (%s) RETURNING id'

Tags:
    dialect, sql, abstraction, portability, database, hangar
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Fragment methods return strings valid for the target database; ``bind_*``
    methods convert Python values into what the driver accepts.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    @property
    def returns_generated_keys(self) -> bool:
        """Whether :meth:`insert_returning` yields the key as a result row.

        When ``False`` the key is read from ``cursor.lastrowid``.
        """
        ...

    # -- Placeholder generation --------------------------------------------

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    # -- DML helpers -------------------------------------------------------

    def insert_returning(self, table: str, columns: list[str], key: str) -> str:
        """``INSERT`` statement that makes the generated ``key`` retrievable."""
        ...

    def for_update(self) -> str:
        """Row-lock suffix for a ``SELECT`` inside a transaction (may be empty)."""
        ...

    # -- Transactions ------------------------------------------------------

    def begin(self) -> str | None:
        """Statement that opens a write transaction, or ``None`` if implicit."""
        ...

    # -- DDL helpers -------------------------------------------------------

    def auto_increment(self) -> str:
        """DDL fragment for an auto-incrementing primary key column type."""
        ...

    def drop_table_if_exists(self, table: str) -> str:
        """``DROP TABLE IF EXISTS`` for a single table."""
        ...

    # -- Value binding -----------------------------------------------------

    def bind_date(self, value: date | None) -> Any:
        """Convert a ``date`` into a driver parameter."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class SQLiteDialect:
    """SQLite dialect — ``?`` placeholders, ``lastrowid`` keys."""

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def returns_generated_keys(self) -> bool:
        return False

    # -- Placeholders ------------------------------------------------------

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    # -- DML ---------------------------------------------------------------

    def insert_returning(self, table: str, columns: list[str], key: str) -> str:  # noqa: ARG002
        cols = ", ".join(columns)
        ph = self.placeholders(len(columns))
        return f"INSERT INTO {table} ({cols}) VALUES ({ph})"

    def for_update(self) -> str:
        # BEGIN IMMEDIATE already holds the database write lock
        return ""

    # -- Transactions ------------------------------------------------------

    def begin(self) -> str | None:
        return "BEGIN IMMEDIATE"

    # -- DDL ---------------------------------------------------------------

    def auto_increment(self) -> str:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"

    def drop_table_if_exists(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {table}"

    # -- Values ------------------------------------------------------------

    def bind_date(self, value: date | None) -> Any:
        return value.isoformat() if value is not None else None


class PostgreSQLDialect:
    """PostgreSQL dialect — ``%s`` placeholders (psycopg2), ``RETURNING`` keys."""

    @property
    def name(self) -> str:
        return "postgresql"

    @property
    def returns_generated_keys(self) -> bool:
        return True

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def insert_returning(self, table: str, columns: list[str], key: str) -> str:
        cols = ", ".join(columns)
        ph = self.placeholders(len(columns))
        return f"INSERT INTO {table} ({cols}) VALUES ({ph}) RETURNING {key}"

    def for_update(self) -> str:
        return " FOR UPDATE"

    def begin(self) -> str | None:
        # psycopg2 opens a transaction on the first statement
        return None

    def auto_increment(self) -> str:
        return "SERIAL PRIMARY KEY"

    def drop_table_if_exists(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {table}"

    def bind_date(self, value: date | None) -> Any:
        return value


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
]
