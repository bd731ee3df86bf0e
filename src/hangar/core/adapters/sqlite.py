"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any

from hangar.core.errors import DatabaseConnectionError
from hangar.core.logging import get_logger

from .base import CursorConnection, DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

MEMORY = ":memory:"


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module in autocommit mode; transactions are
    opened explicitly with ``BEGIN IMMEDIATE`` by :meth:`transaction`.

    - File databases open a fresh connection per checkout.
    - ``:memory:`` databases exist only inside one connection, so a single
      shared connection is handed out under a re-entrant lock.

    Suitable for development, tests and single-process applications.
    """

    def __init__(
        self,
        path: str = MEMORY,
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            readonly=readonly,
            pool_timeout=timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._shared: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._config.path or MEMORY

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY

    def connect(self) -> None:
        """Open the shared in-memory connection, or check the file is reachable."""
        if self._connected:
            return
        if self.is_memory:
            self._shared = self._open()
        else:
            if not self.path.startswith("file:"):
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._open().close()
        self._connected = True
        logger.debug("sqlite_connected", path=self.path)

    def disconnect(self) -> None:
        """Close the shared connection (file connections close on release)."""
        with self._lock:
            if self._shared is not None:
                self._shared.close()
                self._shared = None
            self._connected = False

    def _open(self) -> sqlite3.Connection:
        uri = self.path.startswith("file:")
        try:
            conn = sqlite3.connect(
                self.path,
                timeout=self._config.pool_timeout,
                isolation_level=None,
                check_same_thread=False,
                uri=uri,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if self._config.readonly:
                conn.execute("PRAGMA query_only = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e
        return conn

    def _acquire(self) -> CursorConnection:
        if self.is_memory:
            self._lock.acquire()
            if self._shared is None:
                self._lock.release()
                raise DatabaseConnectionError("SQLite adapter is disconnected")
            return CursorConnection(self._shared, sqlite3)
        return CursorConnection(self._open(), sqlite3)

    def _release(self, conn: CursorConnection) -> None:
        conn.close()
        if self.is_memory:
            self._lock.release()
        else:
            conn.raw.close()

    def __repr__(self) -> str:
        return f"SQLiteAdapter(path={self.path!r})"


__all__ = [
    "SQLiteAdapter",
]
