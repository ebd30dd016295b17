from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

TITLE_MAX_LENGTH = 127
SUBTITLE_MAX_LENGTH = 255


@dataclass(frozen=True)
class Post:
    id: UUID
    title: str
    subtitle: str
    body: str
    created_at: datetime  # UTC, set once by the store
    likes: int = 0
