"""hangar — hand-written SQL persistence for the Plane/Part aggregate.

Usage::

    from hangar import Part, Plane, PlaneRepository, create_adapter

    repo = PlaneRepository(create_adapter("sqlite:///planes.db"))
    plane = Plane(name="737", category="narrowbody")
    plane.add_part(Part(part_code="ENG1", duration=1000.0))
    repo.save(plane)
"""

from hangar.core.connection import create_adapter
from hangar.planes import Part, Plane, PlaneRepository

__version__ = "0.1.0"

__all__ = [
    "Part",
    "Plane",
    "PlaneRepository",
    "create_adapter",
    "__version__",
]
