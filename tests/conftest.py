"""Shared pytest fixtures for portfolio dashboard tests."""

import pytest

import portfolio_dashboard.data.database as database
from portfolio_dashboard.core.interfaces import HistoryStore


@pytest.fixture(autouse=True)
def isolated_db(tmp_path):
    """Point the shared database at a fresh file for every test."""
    db = database.set_db_path(tmp_path / "test.db")
    yield db
    db.close()
    database._db = None


class MemoryHistoryStore(HistoryStore):
    """Keeps saved series in memory and counts save calls."""

    def __init__(self, history=None, fail_load=None, fail_save=None):
        self.history = history
        self.saves = []
        self.fail_load = fail_load
        self.fail_save = fail_save

    async def load(self):
        if self.fail_load:
            raise self.fail_load
        return self.history

    async def save(self, history):
        if self.fail_save:
            raise self.fail_save
        self.saves.append(list(history.entries))
        self.history = history


@pytest.fixture
def memory_store():
    return MemoryHistoryStore()
