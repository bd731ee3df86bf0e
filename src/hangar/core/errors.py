"""
Structured error types for hangar.

Every failure that crosses the storage boundary is re-raised as a typed
:class:`HangarError` subclass.  The error carries a category, a retry hint,
structured context (table, statement, plane id) and the chained driver
exception, so callers can log it or route it without parsing messages.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        HangarError                            │
        │       (category, retryable, context, cause)                   │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  DatabaseError              DatabaseConnectionError           │
        │  (DATABASE)                 (DATABASE, retryable)             │
        │     │                                                         │
        │  QueryError                 ConfigError                       │
        │  IntegrityError             (CONFIG)                          │
        │  SchemaBootstrapError          │                              │
        │                             InvalidConfigError                │
        │                                                               │
        │  ValidationError (VALIDATION)                                 │
        └──────────────────────────────────────────────────────────────┘

Policy:
    - A query returning no rows is not an error (repositories return ``None``).
    - A storage failure is fatal to the calling operation.  Nothing here
      retries; ``retryable`` is only a hint for callers.
    - Driver exceptions are never swallowed.  Pass them as ``cause=``.

Examples:
    >>> err = QueryError("no such table: planes").with_context(table="planes")
    >>> err.context.table
    'planes'
    >>> err.to_dict()["category"]
    'DATABASE'

Tags:
    error-handling, exception-hierarchy, database, hangar
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"  # Statement, constraint, schema failures
    CONFIG = "CONFIG"  # Missing or invalid settings
    VALIDATION = "VALIDATION"  # Bad input from the caller
    INTERNAL = "INTERNAL"  # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-``None`` fields are serialized by :meth:`to_dict`; anything that
    has no dedicated field goes into ``metadata``.

    Attributes:
        operation: Repository operation in progress (``save``, ``delete`` ...)
        table: Table the failing statement touched
        sql: The statement text (never the bound parameters)
        entity_id: Aggregate identifier involved, if any
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    table: str | None = None
    sql: str | None = None
    entity_id: Any = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "table", "sql", "entity_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class HangarError(Exception):
    """
    Base exception for all hangar errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can be
    overridden per instance.  When ``cause`` is given it is also installed as
    ``__cause__`` so tracebacks show the original driver exception.

    Examples:
        >>> try:
        ...     raise OSError("disk full")
        ... except OSError as e:
        ...     error = HangarError("write failed", cause=e)
        >>> error.cause
        OSError('disk full')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> HangarError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("failed").with_context(table="parts", entity_id=3)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(HangarError):
    """Database statement or transaction error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """SQL statement failed (bad SQL, missing table, driver error)."""

    pass


class IntegrityError(DatabaseError):
    """Database integrity constraint violation."""

    pass


class SchemaBootstrapError(DatabaseError):
    """The destructive schema bootstrap could not be executed."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Connecting to the database or acquiring a pooled connection failed."""

    default_retryable = True


# =============================================================================
# CONFIGURATION / VALIDATION ERRORS
# =============================================================================


class ConfigError(HangarError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


class ValidationError(HangarError):
    """Caller passed data the repository cannot persist."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


# =============================================================================
# DRIVER ERROR TRANSLATION
# =============================================================================


def translate_driver_error(
    driver: Any,
    error: BaseException,
    *,
    sql: str | None = None,
    connection_errors: tuple[type[BaseException], ...] = (),
) -> DatabaseError:
    """Map a DB-API exception onto the hangar hierarchy.

    ``driver`` is the DB-API module (``sqlite3``, ``psycopg2``) whose
    exception classes are inspected.  ``connection_errors`` lists driver
    classes that mean the connection itself is unusable.
    """
    message = str(error).strip() or error.__class__.__name__
    if isinstance(error, driver.IntegrityError):
        translated: DatabaseError = IntegrityError(message, cause=error)
    elif isinstance(error, (driver.InterfaceError, *connection_errors)):
        translated = DatabaseConnectionError(message, cause=error)
    else:
        translated = QueryError(message, cause=error)
    if sql is not None:
        translated.with_context(sql=" ".join(sql.split()))
    return translated


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "HangarError",
    "DatabaseError",
    "QueryError",
    "IntegrityError",
    "SchemaBootstrapError",
    "DatabaseConnectionError",
    "ConfigError",
    "InvalidConfigError",
    "ValidationError",
    "translate_driver_error",
]
