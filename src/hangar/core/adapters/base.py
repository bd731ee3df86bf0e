"""Database adapter base class.

An adapter is the pooled connection source repositories draw from.  It owns
the driver, hands out one connection per ``with`` block and guarantees the
connection goes back on every exit path, including failures.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``_acquire()``, ``_release()``
    - ``connection()``: scoped acquisition, commit on success, rollback on error
    - ``transaction()``: same, preceded by the dialect's ``BEGIN``
    - ``CursorConnection``: wraps a DB-API connection and translates driver
      exceptions into :mod:`hangar.core.errors` types

Tags:
    hangar, database, abstract-base, adapter-pattern, pool

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from hangar.core.dialect import Dialect, get_dialect
from hangar.core.errors import translate_driver_error
from hangar.core.logging import get_logger

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class CursorConnection:
    """Adapter: DB-API connection → ``Connection`` protocol.

    Maintains a single cursor so that ``execute`` / ``fetchone`` /
    ``fetchall`` operate on the same result set.  Every driver exception is
    re-raised as a :class:`~hangar.core.errors.DatabaseError` subclass with
    the original chained.
    """

    def __init__(
        self,
        raw: Any,
        driver: Any,
        *,
        connection_errors: tuple[type[BaseException], ...] = (),
    ) -> None:
        self._conn = raw
        self._driver = driver
        self._connection_errors = connection_errors
        self._cursor = raw.cursor()

    # -- Connection protocol -----------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> CursorConnection:
        try:
            if params:
                self._cursor.execute(sql, params)
            else:
                self._cursor.execute(sql)
        except self._driver.Error as e:
            raise self._translate(e, sql) from e
        return self

    def executemany(self, sql: str, params: list[tuple]) -> CursorConnection:
        try:
            self._cursor.executemany(sql, params)
        except self._driver.Error as e:
            raise self._translate(e, sql) from e
        return self

    def fetchone(self) -> Any:
        try:
            return self._cursor.fetchone()
        except self._driver.Error as e:
            raise self._translate(e) from e

    def fetchall(self) -> list:
        try:
            return self._cursor.fetchall()
        except self._driver.Error as e:
            raise self._translate(e) from e

    def commit(self) -> None:
        try:
            self._conn.commit()
        except self._driver.Error as e:
            raise self._translate(e) from e

    def rollback(self) -> None:
        try:
            self._conn.rollback()
        except self._driver.Error as e:
            raise self._translate(e) from e

    def close(self) -> None:
        self._cursor.close()

    # -- cursor attributes -------------------------------------------------

    @property
    def description(self) -> Any:
        return self._cursor.description

    @property
    def lastrowid(self) -> Any:
        return self._cursor.lastrowid

    @property
    def raw(self) -> Any:
        """Access the underlying driver connection."""
        return self._conn

    def _translate(self, error: BaseException, sql: str | None = None) -> Exception:
        return translate_driver_error(
            self._driver,
            error,
            sql=sql,
            connection_errors=self._connection_errors,
        )

    def __repr__(self) -> str:
        return f"CursorConnection({self._conn!r})"


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses implement the driver lifecycle (``connect`` / ``disconnect``)
    and checkout (``_acquire`` / ``_release``); the scoping rules live here.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Establish connection (or pool) to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection (or pool) to database."""
        ...

    @abstractmethod
    def _acquire(self) -> CursorConnection:
        """Check out a connection."""
        ...

    @abstractmethod
    def _release(self, conn: CursorConnection) -> None:
        """Give a checked-out connection back."""
        ...

    @contextmanager
    def connection(self) -> Iterator[CursorConnection]:
        """Scoped connection: committed on success, rolled back on error, always released."""
        if not self._connected:
            self.connect()
        conn = self._acquire()
        try:
            yield conn
            conn.commit()
        except BaseException:
            self._rollback_quietly(conn)
            raise
        finally:
            self._release(conn)

    @contextmanager
    def transaction(self) -> Iterator[CursorConnection]:
        """Explicit transaction on one connection.

        Every statement issued inside the block commits together or not at
        all.  The connection is released on every exit path.
        """
        if not self._connected:
            self.connect()
        conn = self._acquire()
        try:
            begin = self._dialect.begin()
            if begin:
                conn.execute(begin)
            yield conn
            conn.commit()
        except BaseException:
            self._rollback_quietly(conn)
            raise
        finally:
            self._release(conn)

    def _rollback_quietly(self, conn: CursorConnection) -> None:
        # The original exception is the one the caller needs to see
        try:
            conn.rollback()
        except Exception as e:
            logger.warning("rollback_failed", error=str(e), db_type=self.db_type.value)

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "CursorConnection",
    "DatabaseAdapter",
]
