"""Shared fixtures."""

import pytest

from habitpal import subscriptions


@pytest.fixture
def fresh_db(tmp_path, monkeypatch):
    """A fresh database per test, with no leftover subscribers."""
    db_path = tmp_path / "test.db"
    import habitpal.db as db_module
    monkeypatch.setattr(db_module, "DB_PATH", db_path)
    db_module.init_db()
    subscriptions.clear()
    yield db_path
    subscriptions.clear()
