"""Plane repository — persistence of the Plane/Part aggregate.

Every public operation checks out a single connection.  Operations that
issue more than one statement run inside one transaction, so other readers
see the aggregate either before or after the change, and a failure at any
step leaves both tables as they were.

``save`` decides between insert and update with a read inside that same
transaction (``BEGIN IMMEDIATE`` on SQLite, ``SELECT ... FOR UPDATE`` on
PostgreSQL).  On update, the children are fully replaced: every part row of
the plane is deleted and the in-memory part set is inserted again, so part
identifiers do not survive an update.

Tags:
    hangar, repository, aggregate, planes, parts
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from hangar.core.errors import ValidationError
from hangar.core.logging import LogContext, get_logger
from hangar.core.protocols import Connection, ConnectionProvider
from hangar.core.repository import BaseRepository

from .model import Part, Plane
from .schema import PART_COLUMNS, PARTS_TABLE, PLANE_COLUMNS, PLANES_TABLE, ensure_schema

logger = get_logger(__name__)


def _to_date(value: Any) -> date | None:
    """Driver value → ``date`` (SQLite returns ISO text, psycopg2 a ``date``)."""
    if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value)[:10])


def _to_float(value: Any) -> float | None:
    return float(value) if value is not None else None


class PlaneRepository(BaseRepository):
    """CRUD for the plane aggregate over the ``planes`` and ``parts`` tables.

    Construction probes both tables and runs the destructive bootstrap if
    either is missing; a bootstrap failure propagates as
    :class:`~hangar.core.errors.SchemaBootstrapError`.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        super().__init__(provider)
        self.bootstrapped = ensure_schema(provider)

    # -- public API ------------------------------------------------------------

    def find_by_id(self, plane_id: int) -> Plane | None:
        """Load one plane with its parts, or ``None`` if no row matches."""
        with self.provider.connection() as conn:
            plane = self._find_plane_by_id(conn, plane_id)
            if plane is not None:
                for part in self._find_parts_by_plane_id(conn, plane_id):
                    plane.add_part(part)
        return plane

    def find_all(self) -> list[Plane]:
        """Load every plane with its parts, ordered by id.

        One query for the planes, then one query per plane for its parts.
        """
        with self.provider.connection() as conn:
            planes = self._find_plane_all(conn)
            for plane in planes:
                for part in self._find_parts_by_plane_id(conn, plane.id):
                    plane.add_part(part)
        return planes

    def save(self, plane: Plane) -> Plane:
        """Insert or update ``plane`` and replace its parts.

        - no id → insert plane, insert parts;
        - id with no matching row → same; the store assigns a fresh id;
        - matching row → update plane, delete its parts, insert current parts.

        Returns the same object with ``id`` set.
        """
        if not isinstance(plane, Plane):
            raise ValidationError("save() expects a Plane").with_context(
                operation="save", received=type(plane).__name__
            )

        requested_id = plane.id
        with LogContext(operation="save", plane_id=requested_id):
            with self.provider.transaction() as conn:
                if requested_id is not None and self._plane_exists(conn, requested_id):
                    self._update_plane(conn, plane)
                    self._delete_parts_by_plane_id(conn, requested_id)
                    self._insert_parts(conn, requested_id, plane.parts)
                    plane_id = requested_id
                    action = "updated"
                else:
                    plane_id = self._insert_plane(conn, plane)
                    self._insert_parts(conn, plane_id, plane.parts)
                    action = "inserted"

            plane.id = plane_id
            logger.info(
                "plane_saved",
                action=action,
                plane_id=plane_id,
                requested_id=requested_id,
                parts=len(plane.parts),
            )
        return plane

    def delete(self, plane: Plane) -> None:
        """Delete ``plane`` and every part row referencing it."""
        self.delete_by_id(plane.id)

    def delete_by_id(self, plane_id: int) -> None:
        """Delete the plane row, then its part rows, in one transaction."""
        with LogContext(operation="delete", plane_id=plane_id):
            with self.provider.transaction() as conn:
                self._delete_plane_by_id(conn, plane_id)
                self._delete_parts_by_plane_id(conn, plane_id)
            logger.info("plane_deleted", plane_id=plane_id)

    def delete_all(self) -> None:
        """Delete every plane row, then every part row, in one transaction."""
        with LogContext(operation="delete_all"):
            with self.provider.transaction() as conn:
                self._delete_plane_all(conn)
                self._delete_parts_all(conn)
            logger.info("planes_purged")

    # -- planes ----------------------------------------------------------------

    def _plane_exists(self, conn: Connection, plane_id: int) -> bool:
        logger.debug("executing_statement", step="plane_exists")
        row = self.query_one(
            conn,
            f"SELECT id FROM {PLANES_TABLE} WHERE id = {self.ph(1)}{self.dialect.for_update()}",
            (plane_id,),
        )
        return row is not None

    def _find_plane_by_id(self, conn: Connection, plane_id: int) -> Plane | None:
        logger.debug("executing_statement", step="find_plane_by_id")
        row = self.query_one(
            conn,
            f"SELECT * FROM {PLANES_TABLE} WHERE id = {self.ph(1)}",
            (plane_id,),
        )
        return self._plane_from_row(row) if row is not None else None

    def _find_plane_all(self, conn: Connection) -> list[Plane]:
        logger.debug("executing_statement", step="find_plane_all")
        rows = self.query(conn, f"SELECT * FROM {PLANES_TABLE} ORDER BY id")
        return [self._plane_from_row(row) for row in rows]

    def _insert_plane(self, conn: Connection, plane: Plane) -> int:
        logger.debug("executing_statement", step="insert_plane")
        return self.insert_returning_id(conn, PLANES_TABLE, self._plane_to_row(plane))

    def _update_plane(self, conn: Connection, plane: Plane) -> None:
        logger.debug("executing_statement", step="update_plane")
        row = self._plane_to_row(plane)
        assignments = ", ".join(f"{col} = {self.dialect.placeholder(i)}" for i, col in enumerate(row))
        self.execute(
            conn,
            f"UPDATE {PLANES_TABLE} SET {assignments} "
            f"WHERE id = {self.dialect.placeholder(len(row))}",
            (*row.values(), plane.id),
        )

    def _delete_plane_by_id(self, conn: Connection, plane_id: int) -> None:
        logger.debug("executing_statement", step="delete_plane_by_id")
        self.execute(conn, f"DELETE FROM {PLANES_TABLE} WHERE id = {self.ph(1)}", (plane_id,))

    def _delete_plane_all(self, conn: Connection) -> None:
        logger.debug("executing_statement", step="delete_plane_all")
        self.execute(conn, f"DELETE FROM {PLANES_TABLE}")

    # -- parts -----------------------------------------------------------------

    def _find_parts_by_plane_id(self, conn: Connection, plane_id: int) -> list[Part]:
        logger.debug("executing_statement", step="find_parts_by_plane")
        rows = self.query(
            conn,
            f"SELECT * FROM {PARTS_TABLE} WHERE planeid = {self.ph(1)} ORDER BY id",
            (plane_id,),
        )
        return [
            Part(
                id=row["id"],
                part_code=row["partcode"],
                description=row["description"],
                duration=_to_float(row["duration"]),
            )
            for row in rows
        ]

    def _insert_parts(self, conn: Connection, plane_id: int, parts: set[Part]) -> None:
        logger.debug("executing_statement", step="insert_parts_by_plane", count=len(parts))
        self.insert_many(
            conn,
            PARTS_TABLE,
            [
                dict(zip(PART_COLUMNS, (plane_id, part.part_code, part.description, part.duration), strict=True))
                for part in parts
            ],
        )

    def _delete_parts_by_plane_id(self, conn: Connection, plane_id: int) -> None:
        logger.debug("executing_statement", step="delete_parts_by_plane_id")
        self.execute(conn, f"DELETE FROM {PARTS_TABLE} WHERE planeid = {self.ph(1)}", (plane_id,))

    def _delete_parts_all(self, conn: Connection) -> None:
        logger.debug("executing_statement", step="delete_parts_all")
        self.execute(conn, f"DELETE FROM {PARTS_TABLE}")

    # -- mapping ---------------------------------------------------------------

    def _plane_to_row(self, plane: Plane) -> dict[str, Any]:
        values = (
            plane.name,
            plane.length,
            plane.wingspan,
            self.dialect.bind_date(plane.first_flight),
            plane.category,
        )
        return dict(zip(PLANE_COLUMNS, values, strict=True))

    @staticmethod
    def _plane_from_row(row: dict[str, Any]) -> Plane:
        return Plane(
            id=row["id"],
            name=row["name"],
            length=_to_float(row["length"]),
            wingspan=_to_float(row["wingspan"]),
            first_flight=_to_date(row["firstflight"]),
            category=row["category"],
        )


__all__ = [
    "PlaneRepository",
]
