"""PostgreSQL database adapter."""

from __future__ import annotations

from typing import Any

from hangar.core.errors import ConfigError, DatabaseConnectionError
from hangar.core.logging import get_logger

from .base import CursorConnection, DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter.

    Connections come from a ``psycopg2.pool.ThreadedConnectionPool`` sized
    by ``pool_size``; each checkout is returned with ``putconn`` (broken
    connections are discarded).  Suitable for production deployments.
    """

    def __init__(
        self,
        dsn: str | None = None,
        *,
        host: str = "localhost",
        port: int = 5432,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        pool_size: int = 5,
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.POSTGRESQL,
            dsn=dsn,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            pool_size=pool_size,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._pool: Any = None
        self._driver: Any = None

    def _load_driver(self) -> Any:
        try:
            import psycopg2
            import psycopg2.pool
        except ImportError:
            raise ConfigError(
                "psycopg2 is required for PostgreSQL. Install with: pip install hangar[postgres]"
            ) from None
        return psycopg2

    def connect(self) -> None:
        """Create the connection pool."""
        if self._connected:
            return
        psycopg2 = self._load_driver()
        try:
            self._pool = psycopg2.pool.ThreadedConnectionPool(
                1,
                self._config.pool_size,
                self._config.to_connection_string(),
                connect_timeout=self._config.connect_timeout,
                **self._config.options,
            )
        except psycopg2.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ) from e
        self._driver = psycopg2
        self._connected = True
        logger.info("postgres_pool_created", max_size=self._config.pool_size)

    def disconnect(self) -> None:
        """Close PostgreSQL connection pool."""
        if self._pool:
            self._pool.closeall()
            self._pool = None
            self._connected = False
            logger.info("postgres_pool_closed")

    def _acquire(self) -> CursorConnection:
        try:
            raw = self._pool.getconn()
        except self._driver.pool.PoolError as e:
            raise DatabaseConnectionError(f"Connection pool exhausted: {e}", cause=e) from e
        return CursorConnection(
            raw,
            self._driver,
            connection_errors=(self._driver.OperationalError,),
        )

    def _release(self, conn: CursorConnection) -> None:
        """Return connection to pool."""
        raw = conn.raw
        if not raw.closed:
            conn.close()
        if self._pool:
            self._pool.putconn(raw, close=bool(raw.closed))

    def __repr__(self) -> str:
        return f"PostgreSQLAdapter(host={self._config.host!r}, database={self._config.database!r})"


__all__ = [
    "PostgreSQLAdapter",
]
