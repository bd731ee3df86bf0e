"""The Plane aggregate: model, schema bootstrap and repository."""

from .model import Part, Plane
from .repository import PlaneRepository
from .schema import bootstrap_schema, ensure_schema, table_exists

__all__ = [
    "Part",
    "Plane",
    "PlaneRepository",
    "bootstrap_schema",
    "ensure_schema",
    "table_exists",
]
