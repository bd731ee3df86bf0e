"""
Schema for the plane aggregate, and its destructive bootstrap.

Two tables back the aggregate:

    ┌────────────────────────────┐        ┌────────────────────────────────┐
    │ planes                     │        │ parts                          │
    ├────────────────────────────┤        ├────────────────────────────────┤
    │ id          auto pk        │◄───────┤ planeid     → planes(id)       │
    │ name        varchar(50)    │        │ id          auto pk            │
    │ length      double         │        │ partcode    varchar(50)        │
    │ wingspan    double         │        │ description varchar(50)        │
    │ firstflight date           │        │ duration    double             │
    │ category    varchar(50)    │        └────────────────────────────────┘
    └────────────────────────────┘

The foreign key is ``DEFERRABLE INITIALLY DEFERRED``: the repository deletes
the plane row before its part rows inside one transaction, and the
constraint is checked at commit.

Bootstrap is all-or-nothing and destructive.  When either table fails the
probe, both are dropped and recreated and any existing rows are lost.  There
are no migrations.

Examples:
    >>> from hangar.core.adapters import SQLiteAdapter
    >>> adapter = SQLiteAdapter()
    >>> ensure_schema(adapter)      # fresh database → bootstrapped
    True
    >>> ensure_schema(adapter)      # tables present → untouched
    False
"""

from __future__ import annotations

from hangar.core.dialect import Dialect
from hangar.core.errors import DatabaseError, SchemaBootstrapError
from hangar.core.logging import get_logger
from hangar.core.protocols import ConnectionProvider

logger = get_logger(__name__)

PLANES_TABLE = "planes"
PARTS_TABLE = "parts"

PLANE_COLUMNS = ["name", "length", "wingspan", "firstflight", "category"]
PART_COLUMNS = ["planeid", "partcode", "description", "duration"]


def schema_script(dialect: Dialect) -> list[str]:
    """Bootstrap statements: drop both tables (children first), recreate both."""
    return [
        dialect.drop_table_if_exists(PARTS_TABLE),
        dialect.drop_table_if_exists(PLANES_TABLE),
        f"""
        CREATE TABLE {PLANES_TABLE} (
            id {dialect.auto_increment()},
            name VARCHAR(50) DEFAULT NULL,
            length DOUBLE PRECISION DEFAULT NULL,
            wingspan DOUBLE PRECISION DEFAULT NULL,
            firstflight DATE DEFAULT NULL,
            category VARCHAR(50) DEFAULT NULL
        )
        """,
        f"""
        CREATE TABLE {PARTS_TABLE} (
            id {dialect.auto_increment()},
            planeid BIGINT DEFAULT NULL,
            partcode VARCHAR(50) DEFAULT NULL,
            description VARCHAR(50) DEFAULT NULL,
            duration DOUBLE PRECISION DEFAULT NULL,
            FOREIGN KEY (planeid) REFERENCES {PLANES_TABLE}(id)
                DEFERRABLE INITIALLY DEFERRED
        )
        """,
    ]


def table_exists(provider: ConnectionProvider, table: str) -> bool:
    """Probe ``table`` with a one-row read.

    Any storage failure counts as "absent"; it is logged, never raised.
    """
    logger.info("checking_table", table=table)
    try:
        with provider.connection() as conn:
            conn.execute(f"SELECT * FROM {table} LIMIT 1").fetchall()
    except DatabaseError as e:
        logger.debug("table_probe_failed", table=table, error=e.message)
        return False
    return True


def bootstrap_schema(provider: ConnectionProvider) -> None:
    """Drop and recreate both tables in one transaction.

    Raises:
        SchemaBootstrapError: The script could not be executed.
    """
    logger.warning("bootstrapping_schema", tables=[PLANES_TABLE, PARTS_TABLE])
    try:
        with provider.transaction() as conn:
            for statement in schema_script(provider.dialect):
                conn.execute(statement)
    except DatabaseError as e:
        raise SchemaBootstrapError(
            f"Failed to bootstrap plane schema: {e.message}",
            cause=e,
        ).with_context(operation="bootstrap") from e


def ensure_schema(provider: ConnectionProvider) -> bool:
    """Bootstrap unless both tables answer the probe.

    Returns ``True`` when the bootstrap ran.
    """
    if table_exists(provider, PLANES_TABLE) and table_exists(provider, PARTS_TABLE):
        return False
    bootstrap_schema(provider)
    return True


__all__ = [
    "PLANES_TABLE",
    "PARTS_TABLE",
    "PLANE_COLUMNS",
    "PART_COLUMNS",
    "schema_script",
    "table_exists",
    "bootstrap_schema",
    "ensure_schema",
]
