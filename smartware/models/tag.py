"""ORM model for post tags."""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from smartware.models.base import Base, EntityMixin


class Tag(Base, EntityMixin):
    __tablename__ = "tags"

    name = Column(String(50), nullable=False, unique=True)
    slug = Column(String(60), nullable=False, unique=True, index=True)

    post_tags = relationship("PostTag", back_populates="tag", cascade="all, delete-orphan")
