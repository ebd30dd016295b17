"""SQLAlchemy model for the posts table.

Maps to the table created by db/migrations/001_posts.sql.
"""

from __future__ import annotations

from datetime import timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from core.types import SUBTITLE_MAX_LENGTH, TITLE_MAX_LENGTH


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that always comes back in UTC.

    PostgreSQL TIMESTAMPTZ already returns aware values; SQLite stores naive
    strings, so values are normalized to UTC on the way in and tagged on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class PostRow(Base):
    """One blog post.

    Table: posts
    """

    __tablename__ = "posts"

    id = Column(Uuid(as_uuid=True), primary_key=True)  # assigned by the store, never by clients
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    subtitle = Column(String(SUBTITLE_MAX_LENGTH), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
    likes = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_posts_likes_non_negative"),
        Index("idx_posts_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PostRow(id={self.id}, title={self.title!r}, likes={self.likes})>"
