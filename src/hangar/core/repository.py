"""Base repository with dialect-aware database access.

Provides :class:`BaseRepository`, which pairs a
:class:`~hangar.core.protocols.ConnectionProvider` with its
:class:`~hangar.core.dialect.Dialect` so that aggregate repositories write
portable SQL, and :class:`Repository`, the generic CRUD contract they expose.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   provider: ConnectionProvider   ← pooled, scoped connections      │
    │   dialect: Dialect               ← provider.dialect                │
    │                                                                    │
    │   query(conn, sql, params)            → list[dict]                 │
    │   query_one(conn, sql, params)        → dict | None                │
    │   insert(conn, table, data)           → cursor                     │
    │   insert_returning_id(conn, table, d) → int                        │
    │   insert_many(conn, table, rows)      → int                        │
    └────────────────────────────────────────────────────────────────────┘

Helpers take the connection explicitly: a public repository method opens
one ``provider.connection()`` or ``provider.transaction()`` scope and passes
that connection through every step, so a multi-statement operation never
spans two connections.

Usage:
    >>> class PartRepo(BaseRepository):
    ...     def codes(self, plane_id: int) -> list[str]:
    ...         with self.provider.connection() as conn:
    ...             rows = self.query(
    ...                 conn,
    ...                 f"SELECT partcode FROM parts WHERE planeid = {self.ph(1)}",
    ...                 (plane_id,),
    ...             )
    ...         return [r["partcode"] for r in rows]

Tags:
    repository, database, abstraction, portability
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

from hangar.core.dialect import Dialect
from hangar.core.errors import QueryError
from hangar.core.protocols import Connection, ConnectionProvider

T = TypeVar("T")
ID = TypeVar("ID")


@runtime_checkable
class Repository(Protocol[T, ID]):
    """Generic aggregate repository contract.

    ``find_by_id`` returns ``None`` for an unknown identifier; that is a
    normal outcome, not an error.  Every method may raise a
    :class:`~hangar.core.errors.DatabaseError`.
    """

    def find_by_id(self, id: ID) -> T | None: ...

    def find_all(self) -> Iterable[T]: ...

    def save(self, entity: T) -> T: ...

    def delete(self, entity: T) -> None: ...

    def delete_by_id(self, id: ID) -> None: ...

    def delete_all(self) -> None: ...


class BaseRepository:
    """Dialect-aware base class for data-access repositories.

    Parameters:
        provider: Any object satisfying :class:`ConnectionProvider`.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        self.provider = provider

    @property
    def dialect(self) -> Dialect:
        return self.provider.dialect

    # -- Convenience shortcuts ---------------------------------------------

    def ph(self, count: int) -> str:
        """Shortcut for ``self.dialect.placeholders(count)``.

        Embed directly in f-strings:

            f"SELECT * FROM planes WHERE id = {self.ph(1)}"
        """
        return self.dialect.placeholders(count)

    # -- Query helpers -----------------------------------------------------

    def execute(self, conn: Connection, sql: str, params: tuple = ()) -> Any:
        """Execute a statement and return the raw cursor/result."""
        return conn.execute(sql, params)

    def query(self, conn: Connection, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a SELECT and return rows as dicts.

        Plain tuple rows (psycopg2) are zipped with ``cursor.description``;
        mapping rows (``sqlite3.Row``, dict cursors) go through ``dict(row)``.
        """
        cursor = conn.execute(sql, params)
        rows = cursor.fetchall()
        if not rows:
            return []

        if isinstance(rows[0], tuple):
            columns = [desc[0] for desc in cursor.description]
            return [dict(zip(columns, row, strict=False)) for row in rows]
        return [dict(row) for row in rows]

    def query_one(self, conn: Connection, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        """Execute a SELECT and return the first row as a dict (or None)."""
        results = self.query(conn, sql, params)
        return results[0] if results else None

    # -- Insert helpers ----------------------------------------------------

    def insert(self, conn: Connection, table: str, data: dict[str, Any]) -> Any:
        """Insert a single row from a dict.

        Column names come from ``data.keys()``; values are bound via
        dialect placeholders.
        """
        columns = list(data.keys())
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({self.ph(len(columns))})"
        return conn.execute(sql, tuple(data.values()))

    def insert_returning_id(
        self,
        conn: Connection,
        table: str,
        data: dict[str, Any],
        key: str = "id",
    ) -> int:
        """Insert a single row and return the key the store generated for it."""
        sql = self.dialect.insert_returning(table, list(data.keys()), key)
        cursor = conn.execute(sql, tuple(data.values()))
        if self.dialect.returns_generated_keys:
            row = cursor.fetchone()
            generated = row[0] if row is not None else None
        else:
            generated = cursor.lastrowid
        if generated is None:
            raise QueryError(f"No generated key returned for insert into {table}").with_context(
                table=table, sql=sql
            )
        return int(generated)

    def insert_many(self, conn: Connection, table: str, rows: list[dict[str, Any]]) -> int:
        """Insert multiple rows from a list of dicts.

        Returns the number of rows inserted.
        """
        if not rows:
            return 0

        columns = list(rows[0].keys())
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({self.ph(len(columns))})"
        params = [tuple(row[col] for col in columns) for row in rows]
        conn.executemany(sql, params)
        return len(rows)


__all__ = [
    "BaseRepository",
    "Repository",
]
