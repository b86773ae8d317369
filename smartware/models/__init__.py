"""SQLAlchemy ORM models."""

from smartware.models.author import Author
from smartware.models.base import Base
from smartware.models.post import Post, PostTag, PostView
from smartware.models.tag import Tag
from smartware.models.user import User

__all__ = ["Author", "Base", "Post", "PostTag", "PostView", "Tag", "User"]
