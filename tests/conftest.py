"""
Shared pytest fixtures for hangar tests.

This module provides:
- SQLite adapters (shared in-memory, and file-backed under ``tmp_path``)
- A bootstrapped ``PlaneRepository`` over the in-memory adapter
- Sample planes with parts
- Isolation for settings and structlog configuration

Usage:
    def test_roundtrip(repo, boeing_737):
        saved = repo.save(boeing_737)
        assert repo.find_by_id(saved.id).name == "737"
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import date
from pathlib import Path

import pytest
import structlog

from hangar.core.adapters import SQLiteAdapter
from hangar.core.settings import clear_settings_cache
from hangar.planes import Part, Plane, PlaneRepository


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings_and_logging(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings and any structlog configuration a test installed."""
    for key in ("HANGAR_DATABASE_URL", "HANGAR_LOG_LEVEL", "HANGAR_DEBUG", "HANGAR_JSON_LOGS"):
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Adapters
# =============================================================================


@pytest.fixture
def memory_adapter() -> Generator[SQLiteAdapter, None, None]:
    adapter = SQLiteAdapter()
    adapter.connect()
    yield adapter
    adapter.disconnect()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "hangar.db"


@pytest.fixture
def file_adapter(db_path: Path) -> Generator[SQLiteAdapter, None, None]:
    adapter = SQLiteAdapter(str(db_path))
    adapter.connect()
    yield adapter
    adapter.disconnect()


@pytest.fixture
def repo(memory_adapter: SQLiteAdapter) -> PlaneRepository:
    return PlaneRepository(memory_adapter)


@pytest.fixture
def file_repo(file_adapter: SQLiteAdapter) -> PlaneRepository:
    return PlaneRepository(file_adapter)


# =============================================================================
# Sample aggregates
# =============================================================================


@pytest.fixture
def boeing_737() -> Plane:
    return Plane(
        name="737",
        length=39.5,
        wingspan=35.8,
        first_flight=date(2020, 1, 1),
        category="narrowbody",
        parts={
            Part(part_code="ENG1", description="Left engine", duration=1000.0),
            Part(part_code="ENG2", description="Right engine", duration=1000.0),
        },
    )


@pytest.fixture
def airbus_a380() -> Plane:
    return Plane(
        name="A380",
        length=72.7,
        wingspan=79.8,
        first_flight=date(2005, 4, 27),
        category="widebody",
        parts={Part(part_code="APU", description="Auxiliary power unit", duration=250.5)},
    )

