"""Shared test fixtures for pytest.

Provides post stores (in-memory and SQL-backed on SQLite) and an API client.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.main import create_app
from core.storage.memory_stores import InMemoryPostStore
from core.storage.postgres.config import PostgresConfig
from core.storage.postgres.stores import PostgresPostStore


@pytest.fixture
def memory_store() -> InMemoryPostStore:
    return InMemoryPostStore()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path):
    """PostgresPostStore running on a throwaway SQLite file.

    A file (not :memory:) so that concurrent sessions get their own connections
    and see each other's commits.
    """
    config = PostgresConfig(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'posts.db'}",
        operation_timeout=None,
    )
    store = PostgresPostStore(config=config)
    await store.create_schema()
    try:
        yield store
    finally:
        await store.dispose()


@pytest.fixture
def client(memory_store: InMemoryPostStore):
    """Test client wired to an in-memory store."""
    app = create_app(store=memory_store)
    with TestClient(app) as test_client:
        yield test_client
