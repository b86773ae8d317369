"""ORM models for blog posts, their tag links and recorded views."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import relationship

from smartware.models.base import Base, EntityMixin


class Post(Base, EntityMixin):
    """
    Blog post. Slug is unique and used for SEO-friendly lookups.

    view_count is a denormalized counter; each counted view also gets a
    PostView row.
    """

    __tablename__ = "posts"

    title = Column(String(200), nullable=False)
    slug = Column(String(250), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    summary = Column(String(500), nullable=True)
    featured_image_url = Column(String(500), nullable=True)
    is_published = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    author_id = Column(Integer, ForeignKey("authors.id", ondelete="RESTRICT"), nullable=False, index=True)

    author = relationship("Author", back_populates="posts")
    post_tags = relationship("PostTag", back_populates="post", cascade="all, delete-orphan")
    post_views = relationship("PostView", back_populates="post", cascade="all, delete-orphan")


class PostTag(Base, EntityMixin):
    """Many-to-many link between posts and tags."""

    __tablename__ = "post_tags"
    __table_args__ = (UniqueConstraint("post_id", "tag_id", name="uq_post_tags_post_id_tag_id"),)

    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)

    post = relationship("Post", back_populates="post_tags")
    tag = relationship("Tag", back_populates="post_tags")


class PostView(Base, EntityMixin):
    """One counted read of a post."""

    __tablename__ = "post_views"

    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    viewed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    # 45 chars fits an IPv6 address
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)

    post = relationship("Post", back_populates="post_views")
