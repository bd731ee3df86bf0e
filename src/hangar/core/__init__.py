"""Storage primitives: errors, logging, settings, dialects, adapters, base repository."""

from hangar.core.dialect import Dialect, PostgreSQLDialect, SQLiteDialect, get_dialect
from hangar.core.errors import (
    DatabaseConnectionError,
    DatabaseError,
    HangarError,
    IntegrityError,
    QueryError,
    SchemaBootstrapError,
)
from hangar.core.protocols import Connection, ConnectionProvider
from hangar.core.repository import BaseRepository, Repository

__all__ = [
    "BaseRepository",
    "Connection",
    "ConnectionProvider",
    "DatabaseConnectionError",
    "DatabaseError",
    "Dialect",
    "HangarError",
    "IntegrityError",
    "PostgreSQLDialect",
    "QueryError",
    "Repository",
    "SQLiteDialect",
    "SchemaBootstrapError",
    "get_dialect",
]
