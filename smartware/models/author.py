"""ORM model for blog authors."""

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from smartware.models.base import Base, EntityMixin


class Author(Base, EntityMixin):
    """Byline for posts; email is unique."""

    __tablename__ = "authors"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(200), nullable=False, unique=True, index=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)

    posts = relationship("Post", back_populates="author")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
