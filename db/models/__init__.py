"""SQLAlchemy models for the blog database."""

from db.models.post import Base, PostRow, UTCDateTime

__all__ = ["Base", "PostRow", "UTCDateTime"]
