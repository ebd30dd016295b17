"""Blog post API routes.

Each endpoint maps onto one PostStore operation. Errors raised by the store
are translated to HTTP responses by the handlers registered in api.main.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field

from core.persistence.errors import ValidationError
from core.persistence.interfaces import PostStore
from core.types import Post

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_store(request: Request) -> PostStore:
    """Dependency returning the store attached to the application."""
    return request.app.state.post_store


# =============================================================================
# Request/Response Models
# =============================================================================


class PostCreateRequest(BaseModel):
    """New post. Server-owned fields (id, created_at, likes) are ignored if sent."""

    title: str
    subtitle: str
    body: str


class PostUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    title: str | None = None
    subtitle: str | None = None
    body: str | None = None


class PostResponse(BaseModel):
    """Post as returned to clients."""

    id: UUID
    title: str
    subtitle: str
    body: str
    created_at: datetime
    likes: int = Field(ge=0)

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            subtitle=post.subtitle,
            body=post.body,
            created_at=post.created_at,
            likes=post.likes,
        )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreateRequest, store: PostStore = Depends(get_post_store)) -> PostResponse:
    """Create a post. The server assigns id, created_at and likes=0."""
    post = await store.create_post(title=payload.title, subtitle=payload.subtitle, body=payload.body)
    logger.info("Post %s created", post.id)
    return PostResponse.from_post(post)


@router.get("", response_model=list[PostResponse])
async def list_posts(store: PostStore = Depends(get_post_store)) -> list[PostResponse]:
    """List all posts, newest first."""
    posts = await store.list_posts()
    return [PostResponse.from_post(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: UUID, store: PostStore = Depends(get_post_store)) -> PostResponse:
    post = await store.get_post(post_id)
    return PostResponse.from_post(post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: UUID,
    payload: PostUpdateRequest,
    store: PostStore = Depends(get_post_store),
) -> PostResponse:
    """Overwrite title, subtitle and/or body.

    Sending an explicit null is rejected: the columns are NOT NULL.
    """
    changes = payload.model_dump(exclude_unset=True)
    for name, value in changes.items():
        if value is None:
            raise ValidationError(f"{name} must not be null", field=name)

    post = await store.update_post(post_id, **changes)
    logger.info("Post %s updated", post_id)
    return PostResponse.from_post(post)


@router.post("/{post_id}/likes", response_model=PostResponse)
async def like_post(post_id: UUID, store: PostStore = Depends(get_post_store)) -> PostResponse:
    """Add one like to a post."""
    post = await store.increment_likes(post_id)
    return PostResponse.from_post(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: UUID, store: PostStore = Depends(get_post_store)) -> Response:
    """Delete a post. Deleting it again yields 404."""
    await store.delete_post(post_id)
    logger.info("Post %s deleted", post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
