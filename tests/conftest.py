"""
Shared pytest fixtures and configuration for unitwork tests.

This module provides:
- Location-based markers (adapter tests talk to a real database)
- Mock and real ``AsyncConnection`` fixtures
- structlog reset between tests

Usage:
    @pytest.mark.asyncio
    async def test_commit(memory_connection):
        await create_tables(memory_connection, City, Person)
        ...
"""

import sys
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock

import pytest
import structlog

# Ensure unitwork package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from unitwork.adapters.engine import EngineConnection, create_unitwork_engine
from unitwork.adapters.sqlite import SqliteConnection


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if test_path.parts[0] == "adapters":
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Drop any structlog configuration a test installed."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Connections
# =============================================================================


@pytest.fixture
def mock_connection() -> AsyncMock:
    """
    AsyncConnection double.

    ``execute_reader`` returns no rows and ``execute_non_query`` reports one
    affected row unless a test overrides ``return_value``.
    """
    conn = AsyncMock()
    conn.execute_reader.return_value = []
    conn.execute_non_query.return_value = 1
    return conn


@pytest.fixture
def memory_connection() -> EngineConnection:
    """SQLAlchemy-backed connection to a private in-memory SQLite database."""
    return EngineConnection(create_unitwork_engine("sqlite://"))


@pytest.fixture
def sqlite_path(tmp_path: Path) -> str:
    return str(tmp_path / "unitwork.db")


@pytest.fixture
def sqlite_connection(sqlite_path: str) -> SqliteConnection:
    """Standard library sqlite3 connection to a temporary database file."""
    return SqliteConnection(sqlite_path)
