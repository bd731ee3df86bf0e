"""Tests for ``hangar.planes.model`` — the Plane/Part aggregate."""

from __future__ import annotations

import gc
from datetime import date

from hangar.planes import Part, Plane


class TestBackReference:
    def test_constructor_parts_point_to_plane(self, boeing_737):
        for part in boeing_737.parts:
            assert part.plane is boeing_737

    def test_add_part(self):
        plane = Plane(id=4, name="A320")
        part = Part(part_code="GEAR")
        plane.add_part(part)
        assert part in plane.parts
        assert part.plane is plane
        assert part.plane_id == 4

    def test_remove_part_clears_reference(self):
        part = Part(part_code="GEAR")
        plane = Plane(parts={part})
        plane.remove_part(part)
        assert part not in plane.parts
        assert part.plane is None
        assert part.plane_id is None

    def test_detached_part(self):
        assert Part(part_code="X").plane is None

    def test_reference_does_not_keep_plane_alive(self):
        part = Part(part_code="X")
        plane = Plane(parts={part})
        del plane
        gc.collect()
        assert part.plane is None


class TestEquality:
    def test_structural_equality(self):
        a = Plane(name="737", length=39.5, parts={Part(part_code="ENG1", duration=1.0)})
        b = Plane(name="737", length=39.5, parts={Part(part_code="ENG1", duration=1.0)})
        assert a == b
        assert hash(a) == hash(b)

    def test_parts_affect_equality(self):
        a = Plane(name="737", parts={Part(part_code="ENG1")})
        b = Plane(name="737", parts={Part(part_code="ENG2")})
        assert a != b

    def test_part_equality_ignores_plane(self):
        left = Part(part_code="ENG1", duration=2.0)
        right = Part(part_code="ENG1", duration=2.0)
        Plane(id=1, parts={left})
        Plane(id=2, parts={right})
        assert left == right
        assert hash(left) == hash(right)

    def test_part_equality_includes_id(self):
        assert Part(id=1, part_code="A") != Part(id=2, part_code="A")

    def test_equal_parts_collapse_in_set(self):
        plane = Plane()
        plane.add_part(Part(part_code="A"))
        plane.add_part(Part(part_code="A"))
        assert len(plane.parts) == 1

    def test_repr_does_not_recurse(self, boeing_737):
        text = repr(boeing_737)
        assert "ENG1" in text
        assert "_plane_ref" not in text


class TestSerialization:
    def test_to_dict(self, boeing_737):
        data = boeing_737.to_dict()
        assert data["first_flight"] == "2020-01-01"
        assert [p["part_code"] for p in data["parts"]] == ["ENG1", "ENG2"]
        assert data["id"] is None

    def test_from_dict(self):
        plane = Plane.from_dict(
            {
                "name": "A380",
                "length": "72.7",
                "first_flight": "2005-04-27",
                "parts": [{"part_code": "APU", "duration": 250}],
            }
        )
        assert plane.first_flight == date(2005, 4, 27)
        assert plane.length == 72.7
        assert plane.wingspan is None
        (part,) = plane.parts
        assert part.duration == 250.0
        assert part.plane is plane

    def test_dict_roundtrip(self, boeing_737):
        assert Plane.from_dict(boeing_737.to_dict()) == boeing_737
