from __future__ import annotations

from typing import Protocol, Sequence
from uuid import UUID

from core.types import Post


class PostStore(Protocol):
    """Durable storage for posts; the single source of truth.

    Every operation accepts an optional ``timeout`` in seconds. Failures are raised
    as ``ValidationError``, ``NotFound`` or ``StorageError``.
    """

    async def create_post(
        self,
        *,
        title: str,
        subtitle: str,
        body: str,
        timeout: float | None = None,
    ) -> Post:
        """Insert a new post with a server-assigned id, created_at and likes=0."""

    async def get_post(self, post_id: UUID, *, timeout: float | None = None) -> Post:
        """Fetch a single post by id."""

    async def list_posts(self, *, timeout: float | None = None) -> Sequence[Post]:
        """Fetch all posts, newest first (ties broken by id)."""

    async def update_post(
        self,
        post_id: UUID,
        *,
        title: str | None = None,
        subtitle: str | None = None,
        body: str | None = None,
        timeout: float | None = None,
    ) -> Post:
        """Overwrite the supplied text fields. Returns the updated post."""

    async def increment_likes(self, post_id: UUID, *, timeout: float | None = None) -> Post:
        """Atomically add one like. Returns the updated post."""

    async def delete_post(self, post_id: UUID, *, timeout: float | None = None) -> None:
        """Remove a post. A second delete of the same id raises NotFound."""

    async def ping(self, *, timeout: float | None = None) -> None:
        """Check that the backend is reachable."""
