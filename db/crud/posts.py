"""Async statements for the posts table.

Every function takes an AsyncSession and runs inside the caller's transaction:
none of them commit. Lookups return None (or False) when the row is missing and
leave the not-found policy to the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Row, delete, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models.post import PostRow

# Column set returned by every read and by UPDATE ... RETURNING.
POST_COLUMNS = (
    PostRow.id,
    PostRow.title,
    PostRow.subtitle,
    PostRow.body,
    PostRow.created_at,
    PostRow.likes,
)


async def insert_post(
    db: AsyncSession,
    *,
    post_id: UUID,
    title: str,
    subtitle: str,
    body: str,
    created_at: datetime,
) -> PostRow:
    """Insert a post row with explicit id and timestamp."""
    row = PostRow(
        id=post_id,
        title=title,
        subtitle=subtitle,
        body=body,
        created_at=created_at,
        likes=0,
    )
    db.add(row)
    await db.flush()
    return row


async def select_post(db: AsyncSession, post_id: UUID) -> Row[Any] | None:
    """Get a single post by id."""
    result = await db.execute(select(*POST_COLUMNS).where(PostRow.id == post_id))
    return result.first()


async def select_posts(db: AsyncSession) -> Sequence[Row[Any]]:
    """Get all posts, newest first with id as tie-breaker."""
    result = await db.execute(select(*POST_COLUMNS).order_by(PostRow.created_at.desc(), PostRow.id.asc()))
    return result.all()


async def update_post_fields(db: AsyncSession, post_id: UUID, **values: str) -> Row[Any] | None:
    """Overwrite the given text columns and return the updated row."""
    stmt = (
        update(PostRow)
        .where(PostRow.id == post_id)
        .values(**values)
        .returning(*POST_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.first()


async def increment_post_likes(db: AsyncSession, post_id: UUID) -> Row[Any] | None:
    """Add one like in a single statement.

    The read-modify-write happens in the database, so concurrent increments
    serialize on the row lock instead of overwriting each other.
    """
    stmt = (
        update(PostRow)
        .where(PostRow.id == post_id)
        .values(likes=PostRow.likes + 1)
        .returning(*POST_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.first()


async def delete_post_row(db: AsyncSession, post_id: UUID) -> bool:
    """Delete a post. Returns False when no row matched."""
    stmt = delete(PostRow).where(PostRow.id == post_id).execution_options(synchronize_session=False)
    result = await db.execute(stmt)
    return result.rowcount > 0


async def ping(db: AsyncSession) -> None:
    await db.execute(text("SELECT 1"))
