"""Tests for ``hangar.planes.repository`` — PlaneRepository against SQLite."""

from __future__ import annotations

import threading
from datetime import date

import pytest
from structlog.testing import capture_logs

from hangar.core.adapters import SQLiteAdapter
from hangar.core.errors import IntegrityError, QueryError, ValidationError
from hangar.planes import Part, Plane, PlaneRepository
from hangar.planes.schema import PART_COLUMNS, PLANE_COLUMNS


def signature(plane: Plane) -> set[tuple]:
    """Parts of ``plane`` without their identifiers."""
    return {(p.part_code, p.description, p.duration) for p in plane.parts}


def count_rows(repo: PlaneRepository, table: str) -> int:
    with repo.provider.connection() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestConstruction:
    def test_fresh_database_is_bootstrapped(self, repo):
        assert repo.bootstrapped is True
        assert repo.find_all() == []

    def test_existing_schema_is_reused(self, file_repo, db_path, boeing_737):
        file_repo.save(boeing_737)
        other = SQLiteAdapter(str(db_path))
        reopened = PlaneRepository(other)
        assert reopened.bootstrapped is False
        assert [p.name for p in reopened.find_all()] == ["737"]
        other.disconnect()


class TestSaveInsert:
    def test_assigns_id_and_returns_same_object(self, repo, boeing_737):
        saved = repo.save(boeing_737)
        assert saved is boeing_737
        assert saved.id is not None

    def test_roundtrip(self, repo, boeing_737):
        repo.save(boeing_737)
        loaded = repo.find_by_id(boeing_737.id)

        assert loaded is not None
        assert loaded.id == boeing_737.id
        assert loaded.name == "737"
        assert loaded.length == 39.5
        assert loaded.wingspan == 35.8
        assert loaded.first_flight == date(2020, 1, 1)
        assert loaded.category == "narrowbody"
        assert signature(loaded) == signature(boeing_737)

    def test_loaded_parts_have_ids_and_back_references(self, repo, boeing_737):
        repo.save(boeing_737)
        loaded = repo.find_by_id(boeing_737.id)
        for part in loaded.parts:
            assert part.id is not None
            assert part.plane is loaded
            assert part.plane_id == loaded.id

    def test_in_memory_part_ids_are_not_rewritten(self, repo, boeing_737):
        repo.save(boeing_737)
        assert all(p.id is None for p in boeing_737.parts)

    def test_plane_without_parts(self, repo):
        plane = repo.save(Plane(name="Glider"))
        loaded = repo.find_by_id(plane.id)
        assert loaded.parts == set()
        assert loaded.first_flight is None
        assert loaded.length is None

    def test_unmatched_id_is_inserted_with_fresh_id(self, repo, boeing_737):
        boeing_737.id = 999
        repo.save(boeing_737)
        assert boeing_737.id != 999
        assert repo.find_by_id(999) is None
        assert repo.find_by_id(boeing_737.id).name == "737"

    def test_ids_are_unique(self, repo, boeing_737, airbus_a380):
        repo.save(boeing_737)
        repo.save(airbus_a380)
        assert boeing_737.id != airbus_a380.id

    def test_rejects_non_plane(self, repo):
        with pytest.raises(ValidationError) as exc_info:
            repo.save({"name": "737"})
        assert exc_info.value.context.operation == "save"
        assert exc_info.value.context.metadata == {"received": "dict"}

    def test_logs_each_step(self, repo, boeing_737):
        with capture_logs() as logs:
            repo.save(boeing_737)
        steps = [e["step"] for e in logs if e["event"] == "executing_statement"]
        assert steps == ["insert_plane", "insert_parts_by_plane"]
        saved = next(e for e in logs if e["event"] == "plane_saved")
        assert saved["action"] == "inserted"
        assert saved["plane_id"] == boeing_737.id


class TestSaveUpdate:
    def test_updates_fields(self, repo, boeing_737):
        repo.save(boeing_737)
        boeing_737.name = "737 MAX"
        boeing_737.category = None
        repo.save(boeing_737)

        loaded = repo.find_by_id(boeing_737.id)
        assert loaded.name == "737 MAX"
        assert loaded.category is None
        assert len(repo.find_all()) == 1

    def test_parts_are_fully_replaced(self, repo, boeing_737):
        repo.save(boeing_737)
        old_ids = {p.id for p in repo.find_by_id(boeing_737.id).parts}

        eng2 = next(p for p in boeing_737.parts if p.part_code == "ENG2")
        boeing_737.remove_part(eng2)
        boeing_737.add_part(Part(part_code="APU", description="Aux power", duration=10.0))
        repo.save(boeing_737)

        loaded = repo.find_by_id(boeing_737.id)
        assert {p.part_code for p in loaded.parts} == {"ENG1", "APU"}
        assert {p.id for p in loaded.parts}.isdisjoint(old_ids)
        assert count_rows(repo, "parts") == 2

    def test_saving_loaded_aggregate_keeps_content(self, repo, boeing_737):
        repo.save(boeing_737)
        loaded = repo.find_by_id(boeing_737.id)
        repo.save(loaded)
        again = repo.find_by_id(boeing_737.id)
        assert signature(again) == signature(boeing_737)
        assert again.name == loaded.name

    def test_update_does_not_touch_other_planes(self, repo, boeing_737, airbus_a380):
        repo.save(boeing_737)
        repo.save(airbus_a380)
        boeing_737.parts.clear()
        repo.save(boeing_737)

        assert repo.find_by_id(boeing_737.id).parts == set()
        assert signature(repo.find_by_id(airbus_a380.id)) == signature(airbus_a380)

    def test_logs_update_steps(self, repo, boeing_737):
        repo.save(boeing_737)
        with capture_logs() as logs:
            repo.save(boeing_737)
        steps = [e["step"] for e in logs if e["event"] == "executing_statement"]
        assert steps == ["plane_exists", "update_plane", "delete_parts_by_plane_id", "insert_parts_by_plane"]


class TestSaveAtomicity:
    def test_failed_insert_leaves_no_plane_row(self, repo, boeing_737, monkeypatch):
        def fail(*args, **kwargs):
            raise QueryError("disk I/O error")

        monkeypatch.setattr(repo, "_insert_parts", fail)
        with pytest.raises(QueryError):
            repo.save(boeing_737)

        assert boeing_737.id is None
        assert count_rows(repo, "planes") == 0

    def test_failed_update_keeps_previous_state(self, repo, boeing_737, monkeypatch):
        repo.save(boeing_737)
        before = repo.find_by_id(boeing_737.id)

        def fail(*args, **kwargs):
            raise QueryError("disk I/O error")

        boeing_737.name = "renamed"
        monkeypatch.setattr(repo, "_insert_parts", fail)
        with pytest.raises(QueryError):
            repo.save(boeing_737)

        after = repo.find_by_id(boeing_737.id)
        assert after == before

    def test_dangling_part_is_rejected_at_commit(self, repo):
        with pytest.raises(IntegrityError):
            with repo.provider.transaction() as conn:
                conn.execute("INSERT INTO parts (planeid, partcode) VALUES (?, ?)", (12345, "X"))
        assert count_rows(repo, "parts") == 0


class TestFind:
    def test_find_by_id_missing(self, repo):
        assert repo.find_by_id(1) is None

    def test_find_all_ordered_by_id(self, repo, boeing_737, airbus_a380):
        repo.save(airbus_a380)
        repo.save(boeing_737)
        planes = repo.find_all()
        assert [p.id for p in planes] == sorted(p.id for p in planes)
        assert [p.name for p in planes] == ["A380", "737"]

    def test_find_all_loads_parts(self, repo, boeing_737, airbus_a380):
        repo.save(boeing_737)
        repo.save(airbus_a380)
        by_name = {p.name: p for p in repo.find_all()}
        assert signature(by_name["737"]) == signature(boeing_737)
        assert signature(by_name["A380"]) == signature(airbus_a380)

    def test_found_aggregates_compare_equal(self, repo, boeing_737):
        repo.save(boeing_737)
        assert repo.find_by_id(boeing_737.id) == repo.find_by_id(boeing_737.id)
        assert repo.find_all() == [repo.find_by_id(boeing_737.id)]


class TestDelete:
    def test_delete_removes_plane_and_parts(self, repo, boeing_737, airbus_a380):
        repo.save(boeing_737)
        repo.save(airbus_a380)
        repo.delete(boeing_737)

        assert repo.find_by_id(boeing_737.id) is None
        assert [p.name for p in repo.find_all()] == ["A380"]
        assert count_rows(repo, "parts") == 1

    def test_delete_by_id(self, repo, boeing_737):
        repo.save(boeing_737)
        repo.delete_by_id(boeing_737.id)
        assert repo.find_all() == []
        assert count_rows(repo, "parts") == 0

    def test_delete_unknown_id_is_noop(self, repo, boeing_737):
        repo.save(boeing_737)
        repo.delete_by_id(boeing_737.id + 100)
        assert len(repo.find_all()) == 1

    def test_delete_unsaved_plane_is_noop(self, repo, boeing_737, airbus_a380):
        repo.save(airbus_a380)
        repo.delete(boeing_737)
        assert len(repo.find_all()) == 1

    def test_delete_runs_plane_before_parts(self, repo, boeing_737):
        repo.save(boeing_737)
        with capture_logs() as logs:
            repo.delete(boeing_737)
        steps = [e["step"] for e in logs if e["event"] == "executing_statement"]
        assert steps == ["delete_plane_by_id", "delete_parts_by_plane_id"]

    def test_delete_all(self, repo, boeing_737, airbus_a380):
        repo.save(boeing_737)
        repo.save(airbus_a380)
        repo.delete_all()
        assert repo.find_all() == []
        assert count_rows(repo, "planes") == 0
        assert count_rows(repo, "parts") == 0

    def test_delete_all_on_empty_store(self, repo):
        repo.delete_all()
        assert repo.find_all() == []


class TestFileBackedConcurrency:
    def test_parallel_saves(self, file_repo):
        errors: list[BaseException] = []

        def worker(n: int) -> None:
            try:
                for i in range(5):
                    plane = Plane(name=f"P{n}-{i}", parts={Part(part_code=f"C{n}{i}")})
                    file_repo.save(plane)
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        planes = file_repo.find_all()
        assert len(planes) == 20
        assert len({p.id for p in planes}) == 20
        assert all(len(p.parts) == 1 for p in planes)


class TestScenarios:
    def test_first_plane_gets_id_one(self, repo):
        plane = Plane(
            name="737",
            length=39.5,
            wingspan=35.8,
            first_flight=date(2020, 1, 1),
            category="narrowbody",
            parts={Part(part_code="ENG1", duration=1000.0)},
        )
        repo.save(plane)
        assert plane.id == 1

        loaded = repo.find_by_id(1)
        assert loaded.name == "737"
        assert [(p.part_code, p.duration) for p in loaded.parts] == [("ENG1", 1000.0)]

    def test_detached_copy_with_taken_id_is_updated_not_duplicated(self, repo, boeing_737):
        repo.save(boeing_737)
        copy = Plane(id=boeing_737.id, name="renamed")
        repo.save(copy)
        assert copy.id == boeing_737.id
        assert [p.name for p in repo.find_all()] == ["renamed"]

    def test_unmatched_id_does_not_force_the_id(self, repo, boeing_737):
        repo.save(boeing_737)
        assert boeing_737.id == 1
        repo.delete(boeing_737)

        stranger = Plane(id=1, name="A320")
        repo.save(stranger)
        assert stranger.id == 2
        assert repo.find_by_id(1) is None
        assert [p.name for p in repo.find_all()] == ["A320"]


class TestRowMapping:
    def test_plane_row_follows_column_list(self, repo, boeing_737):
        row = repo._plane_to_row(boeing_737)
        assert list(row) == PLANE_COLUMNS
        assert row["firstflight"] == "2020-01-01"

    def test_part_rows_follow_column_list(self, repo, boeing_737, monkeypatch):
        captured = []
        monkeypatch.setattr(repo, "insert_many", lambda conn, table, rows: captured.extend(rows))
        with repo.provider.connection() as conn:
            repo._insert_parts(conn, 7, boeing_737.parts)
        assert all(list(row) == PART_COLUMNS for row in captured)
        assert {row["planeid"] for row in captured} == {7}
