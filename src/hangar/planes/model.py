"""Plane aggregate: the root entity and its owned parts.

A :class:`Plane` owns a set of :class:`Part` objects.  Parts point back to
their plane through a weak reference, which is navigational only: it keeps
no plane alive and takes no part in equality, hashing or ``repr``, so
comparing two aggregates never recurses.

Both classes compare and hash structurally.  Parts live in a set, so do not
change a part's fields while it is attached; detach it, change it, attach it
again.

Examples:
    >>> from datetime import date
    >>> plane = Plane(name="737", length=39.5, wingspan=35.8,
    ...               first_flight=date(2020, 1, 1), category="narrowbody")
    >>> plane.add_part(Part(part_code="ENG1", duration=1000.0))
    >>> next(iter(plane.parts)).plane is plane
    True
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(unsafe_hash=True)
class Part:
    """A part owned by a plane (``parts`` table row)."""

    id: int | None = None
    part_code: str | None = None
    description: str | None = None
    duration: float | None = None
    _plane_ref: weakref.ReferenceType[Plane] | None = field(
        default=None, init=False, repr=False, compare=False, hash=False
    )

    @property
    def plane(self) -> Plane | None:
        """Owning plane, or ``None`` when detached or already collected."""
        return self._plane_ref() if self._plane_ref is not None else None

    @plane.setter
    def plane(self, plane: Plane | None) -> None:
        self._plane_ref = weakref.ref(plane) if plane is not None else None

    @property
    def plane_id(self) -> int | None:
        plane = self.plane
        return plane.id if plane is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "part_code": self.part_code,
            "description": self.description,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Part:
        duration = data.get("duration")
        return cls(
            id=data.get("id"),
            part_code=data.get("part_code"),
            description=data.get("description"),
            duration=float(duration) if duration is not None else None,
        )


@dataclass
class Plane:
    """Aggregate root (``planes`` table row plus its parts).

    ``id`` is ``None`` until the repository inserts the plane; the store
    assigns it once and it never changes afterwards.
    """

    id: int | None = None
    name: str | None = None
    length: float | None = None
    wingspan: float | None = None
    first_flight: date | None = None
    category: str | None = None
    parts: set[Part] = field(default_factory=set)

    def __post_init__(self) -> None:
        for part in self.parts:
            part.plane = self

    def __hash__(self) -> int:
        return hash(
            (
                self.id,
                self.name,
                self.length,
                self.wingspan,
                self.first_flight,
                self.category,
                frozenset(self.parts),
            )
        )

    def add_part(self, part: Part) -> None:
        """Attach ``part`` and point its back-reference at this plane."""
        self.parts.add(part)
        part.plane = self

    def remove_part(self, part: Part) -> None:
        """Detach ``part``; its back-reference is cleared if it pointed here."""
        self.parts.discard(part)
        if part.plane is self:
            part.plane = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form: ISO date, parts as a list sorted by part code."""
        return {
            "id": self.id,
            "name": self.name,
            "length": self.length,
            "wingspan": self.wingspan,
            "first_flight": self.first_flight.isoformat() if self.first_flight else None,
            "category": self.category,
            "parts": [
                p.to_dict()
                for p in sorted(self.parts, key=lambda p: (p.part_code or "", p.id or 0))
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plane:
        first_flight = data.get("first_flight")
        if isinstance(first_flight, str):
            first_flight = date.fromisoformat(first_flight)
        length = data.get("length")
        wingspan = data.get("wingspan")
        plane = cls(
            id=data.get("id"),
            name=data.get("name"),
            length=float(length) if length is not None else None,
            wingspan=float(wingspan) if wingspan is not None else None,
            first_flight=first_flight,
            category=data.get("category"),
        )
        for item in data.get("parts") or []:
            plane.add_part(Part.from_dict(item))
        return plane


__all__ = [
    "Part",
    "Plane",
]
