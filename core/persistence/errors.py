"""Error taxonomy shared by every post store implementation."""

from __future__ import annotations

from uuid import UUID


class PostStoreError(Exception):
    """Base exception for post store failures."""


class ValidationError(PostStoreError):
    """A required field is missing, has the wrong type, or is too long.

    Not retry-able: the caller must correct the input.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFound(PostStoreError):
    """No post exists for the given id."""

    def __init__(self, post_id: UUID):
        super().__init__(f"post {post_id} not found")
        self.post_id = post_id


class StorageError(PostStoreError):
    """The backend failed (connectivity, timeout, unexpected constraint violation).

    The store does not retry; the caller decides whether to retry the request.
    """

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation
