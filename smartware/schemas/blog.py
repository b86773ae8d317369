"""Request/response schemas for authors, posts and tags."""

from datetime import datetime

from pydantic import Field, field_validator

from smartware.schemas.base import (
    EMAIL_MAX_LEN,
    CamelModel,
    validate_email_address,
    validate_http_url,
)


class AuthorSummary(CamelModel):
    """Author as embedded in a post."""

    id: int
    full_name: str
    email: str
    bio: str | None = None
    avatar_url: str | None = None


class TagSummary(CamelModel):
    """Tag as embedded in a post."""

    id: int
    name: str
    slug: str


class PostListItem(CamelModel):
    """Post in list views (no content body)."""

    id: int
    title: str
    slug: str
    summary: str | None = None
    featured_image_url: str | None = None
    published_at: datetime | None = None
    view_count: int
    author: AuthorSummary
    tags: list[TagSummary] = Field(default_factory=list)


class PostDetail(PostListItem):
    """Full post, returned for single-post lookups."""

    content: str
    is_published: bool
    created_at: datetime
    updated_at: datetime | None = None


class AuthorListItem(CamelModel):
    id: int
    full_name: str
    email: str
    avatar_url: str | None = None
    post_count: int = Field(..., description="Number of published posts")


class AuthorDetail(CamelModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    bio: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    posts: list[PostListItem] = Field(default_factory=list)


class AuthorWrite(CamelModel):
    """Body of POST /authors and PUT /authors/{id}."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    bio: str | None = Field(default=None, max_length=1000)
    avatar_url: str | None = Field(default=None, max_length=500)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return validate_email_address(v)

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar_url(cls, v: str | None) -> str | None:
        return validate_http_url(v, "avatarUrl")


class TagListItem(CamelModel):
    id: int
    name: str
    slug: str
    post_count: int = Field(..., description="Number of published posts using the tag")


class TagDetail(CamelModel):
    id: int
    name: str
    slug: str
    created_at: datetime
    posts: list[PostListItem] = Field(default_factory=list)


class TagWrite(CamelModel):
    """Body of POST /tags and PUT /tags/{id}. Slug is generated from name when omitted."""

    name: str = Field(..., min_length=1, max_length=50)
    slug: str | None = Field(default=None, max_length=60)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must be non-empty")
        return v.strip()


class PostWrite(CamelModel):
    """Body of POST /posts and PUT /posts/{id}. Slug is generated from title when omitted."""

    title: str = Field(..., min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=250)
    content: str = Field(..., min_length=1)
    summary: str | None = Field(default=None, max_length=500)
    featured_image_url: str | None = Field(default=None, max_length=500)
    is_published: bool = False
    published_at: datetime | None = None
    author_id: int = Field(..., ge=1)
    tag_ids: list[int] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title is required")
        return v.strip()

    @field_validator("featured_image_url")
    @classmethod
    def validate_featured_image_url(cls, v: str | None) -> str | None:
        return validate_http_url(v, "featuredImageUrl")

    @field_validator("tag_ids")
    @classmethod
    def dedupe_tag_ids(cls, v: list[int]) -> list[int]:
        return list(dict.fromkeys(v))
