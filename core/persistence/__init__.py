"""Persistence boundary.

The protocol defines what a post store must offer. Implementations can be
backed by PostgreSQL (recommended) or kept in memory for tests.
"""

from .errors import NotFound, PostStoreError, StorageError, ValidationError
from .interfaces import PostStore
from .validation import validate_new_post, validate_post_changes

__all__ = [
    "NotFound",
    "PostStore",
    "PostStoreError",
    "StorageError",
    "ValidationError",
    "validate_new_post",
    "validate_post_changes",
]
