from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from core.persistence.errors import NotFound
from core.persistence.interfaces import PostStore
from core.persistence.validation import validate_new_post, validate_post_changes
from core.types import Post

logger = logging.getLogger(__name__)


class InMemoryPostStore(PostStore):
    """Process-local post store.

    Mutations happen under an asyncio.Lock and never await while holding it, so
    a cancelled caller cannot leave a half-applied change. The ``timeout``
    arguments are accepted for interface compatibility; nothing here blocks on I/O.
    """

    def __init__(self) -> None:
        self._posts: dict[UUID, Post] = {}
        self._lock = asyncio.Lock()

    def _require(self, post_id: UUID) -> Post:
        post = self._posts.get(post_id)
        if post is None:
            raise NotFound(post_id)
        return post

    async def create_post(
        self,
        *,
        title: str,
        subtitle: str,
        body: str,
        timeout: float | None = None,
    ) -> Post:
        fields = validate_new_post(title=title, subtitle=subtitle, body=body)
        async with self._lock:
            post_id = uuid.uuid4()
            while post_id in self._posts:
                post_id = uuid.uuid4()
            post = Post(id=post_id, created_at=datetime.now(timezone.utc), likes=0, **fields)
            self._posts[post_id] = post
        logger.debug("Created post %s", post_id)
        return post

    async def get_post(self, post_id: UUID, *, timeout: float | None = None) -> Post:
        return self._require(post_id)

    async def list_posts(self, *, timeout: float | None = None) -> Sequence[Post]:
        # Newest first; ascending id breaks ties, as in the SQL store.
        posts = sorted(self._posts.values(), key=lambda p: p.id)
        return sorted(posts, key=lambda p: p.created_at, reverse=True)

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
        async with self._lock:
            post = replace(self._require(post_id), **changes)
            self._posts[post_id] = post
        return post

    async def increment_likes(self, post_id: UUID, *, timeout: float | None = None) -> Post:
        async with self._lock:
            post = self._require(post_id)
            post = replace(post, likes=post.likes + 1)
            self._posts[post_id] = post
        return post

    async def delete_post(self, post_id: UUID, *, timeout: float | None = None) -> None:
        async with self._lock:
            self._require(post_id)
            del self._posts[post_id]
        logger.debug("Deleted post %s", post_id)

    async def ping(self, *, timeout: float | None = None) -> None:
        return None
