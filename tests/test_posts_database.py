"""Integration tests for the post store on PostgreSQL.

Applies db/migrations against the database and runs the store contract,
including the concurrent-like property, through asyncpg.

Requires DATABASE_URL to be set and PostgreSQL running.
"""

from __future__ import annotations

import asyncio
import os
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from core.persistence.errors import NotFound, ValidationError
from core.storage.postgres.config import PostgresConfig, normalize_database_url
from core.storage.postgres.stores import PostgresPostStore
from db.init_db import apply_migrations


def _get_test_database_url() -> str:
    """Get DATABASE_URL normalized to asyncpg."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set")

    database_url = normalize_database_url(database_url)
    if not database_url.startswith("postgresql+asyncpg://"):
        pytest.skip(f"Not a PostgreSQL DATABASE_URL: {database_url.split('://', 1)[0]}")

    try:
        import asyncpg  # noqa: F401
    except ImportError:
        pytest.skip("asyncpg not installed, skipping async DB tests")

    return database_url


@pytest_asyncio.fixture
async def pg_store():
    """Store against a freshly migrated, emptied posts table.

    A fresh engine per test avoids event-loop cross-contamination under
    pytest-asyncio's function-scoped loops.
    """
    database_url = _get_test_database_url()
    await apply_migrations(database_url)

    engine = create_async_engine(database_url, echo=False)
    try:
        async with engine.begin() as conn:
            await conn.execute(text("TRUNCATE posts"))
    finally:
        await engine.dispose()

    store = PostgresPostStore(config=PostgresConfig(database_url=database_url, operation_timeout=30.0))
    try:
        yield store
    finally:
        await store.dispose()


@pytest.mark.asyncio
async def test_post_crud_cycle(pg_store):
    post = await pg_store.create_post(title="Hello", subtitle="World", body="Body text")
    assert post.likes == 0

    fetched = await pg_store.get_post(post.id)
    assert fetched == post

    updated = await pg_store.update_post(post.id, title="X")
    assert updated.title == "X"
    assert updated.subtitle == "World"
    assert updated.created_at == post.created_at

    liked = await pg_store.increment_likes(post.id)
    liked = await pg_store.increment_likes(post.id)
    assert liked.likes == 2

    await pg_store.delete_post(post.id)
    with pytest.raises(NotFound):
        await pg_store.get_post(post.id)
    with pytest.raises(NotFound):
        await pg_store.delete_post(post.id)


@pytest.mark.asyncio
async def test_concurrent_likes_on_postgres(pg_store):
    post = await pg_store.create_post(title="Hello", subtitle="World", body="Body text")

    await asyncio.gather(*(pg_store.increment_likes(post.id) for _ in range(60)))

    assert (await pg_store.get_post(post.id)).likes == 60


@pytest.mark.asyncio
async def test_too_long_title_rejected_before_insert(pg_store):
    with pytest.raises(ValidationError):
        await pg_store.create_post(title="x" * 128, subtitle="s", body="b")
    assert await pg_store.list_posts() == []


@pytest.mark.asyncio
async def test_missing_post_is_not_found(pg_store):
    with pytest.raises(NotFound):
        await pg_store.increment_likes(uuid.uuid4())
