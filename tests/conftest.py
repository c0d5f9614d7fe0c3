"""
Shared test fixtures and configuration.
"""

import datetime as dt
from pathlib import Path

import pytest

from timeledger.core.persistence.store import FileStore, MemoryStore
from timeledger.core.session import TimesheetSession


class FixedClock:
    """Callable clock that tests can move."""

    def __init__(self, now: dt.datetime):
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    """Wall clock pinned to 2024-05-20 10:00."""
    return FixedClock(dt.datetime(2024, 5, 20, 10, 0))


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session(memory_store: MemoryStore, clock: FixedClock) -> TimesheetSession:
    """Empty in-memory session with a fixed clock."""
    return TimesheetSession(memory_store, clock=clock)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Return a temporary data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def file_store(data_dir: Path) -> FileStore:
    return FileStore(data_dir)
