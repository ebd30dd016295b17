from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.persistence.errors import NotFound, PostStoreError, StorageError
from core.persistence.interfaces import PostStore
from core.persistence.validation import validate_new_post, validate_post_changes
from core.storage.postgres.config import PostgresConfig
from core.types import Post
from db.crud import posts as posts_crud
from db.models.post import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _to_post(row: Any) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        subtitle=row.subtitle,
        body=row.body,
        created_at=row.created_at,
        likes=row.likes,
    )


class PostgresPostStore(PostStore):
    """PostgreSQL-backed post store using SQLAlchemy's async engine.

    Each operation runs in its own session and transaction. Any SQLAlchemy async
    URL works; the tests run it against sqlite+aiosqlite.
    """

    def __init__(self, *, config: PostgresConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _get_engine(self) -> AsyncEngine:
        if self._engine is None:
            # Do not log the URL (it may contain secrets).
            self._engine = create_async_engine(self._config.database_url, **self._config.engine_kwargs())
        return self._engine

    def _get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(self._get_engine(), class_=AsyncSession, expire_on_commit=False)
        return self._session_factory

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        timeout: float | None,
    ) -> T:
        """Run `work` in a fresh transaction, mapping backend failures to StorageError.

        NotFound and ValidationError pass through untouched. Anything else raised
        while talking to the backend (SQLAlchemy errors, refused connections,
        driver errors raised before SQLAlchemy can wrap them) becomes StorageError.

        On timeout or cancellation before COMMIT is sent, the transaction is rolled
        back by the session context, so no partial write survives. If the timeout
        fires while COMMIT is in flight the server may already have applied it;
        the caller still gets StorageError and cannot tell the two cases apart.
        """
        if timeout is None:
            timeout = self._config.operation_timeout
        factory = self._get_session_factory()

        async def _in_transaction() -> T:
            async with factory() as session:
                async with session.begin():
                    return await work(session)

        try:
            if timeout is None:
                return await _in_transaction()
            return await asyncio.wait_for(_in_transaction(), timeout=timeout)
        except PostStoreError:
            raise
        except asyncio.TimeoutError as exc:
            # Checked before OSError: TimeoutError is an OSError subclass.
            logger.warning("Post store %s timed out after %.2fs", operation, timeout)
            raise StorageError(f"{operation} timed out after {timeout}s", operation=operation) from exc
        except SQLAlchemyError as exc:
            logger.error("Post store %s failed: %s", operation, type(exc).__name__)
            raise StorageError(f"{operation} failed: {type(exc).__name__}", operation=operation) from exc
        except Exception as exc:
            # asyncpg raises OSError / its own errors on connect without SQLAlchemy wrapping.
            logger.error("Post store %s failed: %s", operation, type(exc).__name__)
            raise StorageError(f"{operation} failed: {type(exc).__name__}", operation=operation) from exc

    async def create_schema(self) -> None:
        """Create the posts table from the model metadata (tests, local development)."""
        async with self._get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    # ---- PostStore

    async def create_post(
        self,
        *,
        title: str,
        subtitle: str,
        body: str,
        timeout: float | None = None,
    ) -> Post:
        fields = validate_new_post(title=title, subtitle=subtitle, body=body)
        post_id = uuid.uuid4()
        created_at = datetime.now(timezone.utc)

        async def work(session: AsyncSession) -> Post:
            row = await posts_crud.insert_post(session, post_id=post_id, created_at=created_at, **fields)
            return _to_post(row)

        post = await self._run("create_post", work, timeout)
        logger.debug("Created post %s", post.id)
        return post

    async def get_post(self, post_id: UUID, *, timeout: float | None = None) -> Post:
        async def work(session: AsyncSession) -> Post:
            row = await posts_crud.select_post(session, post_id)
            if row is None:
                raise NotFound(post_id)
            return _to_post(row)

        return await self._run("get_post", work, timeout)

    async def list_posts(self, *, timeout: float | None = None) -> Sequence[Post]:
        async def work(session: AsyncSession) -> list[Post]:
            rows = await posts_crud.select_posts(session)
            return [_to_post(row) for row in rows]

        return await self._run("list_posts", work, timeout)

    async def update_post(
        self,
        post_id: UUID,
        *,
        title: str | None = None,
        subtitle: str | None = None,
        body: str | None = None,
        timeout: float | None = None,
    ) -> Post:
        changes = validate_post_changes(title=title, subtitle=subtitle, body=body)
        if not changes:
            return await self.get_post(post_id, timeout=timeout)

        async def work(session: AsyncSession) -> Post:
            row = await posts_crud.update_post_fields(session, post_id, **changes)
            if row is None:
                raise NotFound(post_id)
            return _to_post(row)

        post = await self._run("update_post", work, timeout)
        logger.debug("Updated post %s (%s)", post_id, ", ".join(sorted(changes)))
        return post

    async def increment_likes(self, post_id: UUID, *, timeout: float | None = None) -> Post:
        async def work(session: AsyncSession) -> Post:
            row = await posts_crud.increment_post_likes(session, post_id)
            if row is None:
                raise NotFound(post_id)
            return _to_post(row)

        return await self._run("increment_likes", work, timeout)

    async def delete_post(self, post_id: UUID, *, timeout: float | None = None) -> None:
        async def work(session: AsyncSession) -> None:
            if not await posts_crud.delete_post_row(session, post_id):
                raise NotFound(post_id)

        await self._run("delete_post", work, timeout)
        logger.debug("Deleted post %s", post_id)

    async def ping(self, *, timeout: float | None = None) -> None:
        await self._run("ping", posts_crud.ping, timeout)
