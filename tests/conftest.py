from typing import List

import pytest

from core.local_store import DEFAULT_SCHEMA, LocalStore


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    """Replaces the executor's sleep with a recorder (seconds)."""
    recorded = []

    async def fake_sleep(delay):
        recorded.append(delay)

    monkeypatch.setattr("core.executor.asyncio.sleep", fake_sleep)
    return recorded


@pytest.fixture
def store_path(tmp_path) -> str:
    return str(tmp_path / "agriwise.db")


@pytest.fixture
def store(store_path) -> LocalStore:
    return LocalStore(store_path, DEFAULT_SCHEMA)
