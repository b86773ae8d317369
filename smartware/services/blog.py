"""Blog reads and writes shared by the authors, posts and tags routes."""

import logging
from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, joinedload, selectinload

from smartware.models import Author, Post, PostTag, PostView, Tag
from smartware.models.base import as_utc
from smartware.schemas.blog import (
    AuthorDetail,
    AuthorListItem,
    AuthorSummary,
    PostDetail,
    PostListItem,
    PostWrite,
    TagDetail,
    TagListItem,
    TagSummary,
)
from smartware.services.slug import generate_slug

logger = logging.getLogger(__name__)


class BlogValidationError(Exception):
    """Raised when a blog write conflicts with existing data (duplicate slug, unknown author...)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def post_query(db: Session) -> Query:
    """Non-deleted posts with author and tags eagerly loaded."""
    return (
        db.query(Post)
        .options(
            joinedload(Post.author),
            selectinload(Post.post_tags).joinedload(PostTag.tag),
        )
        .filter(Post.is_deleted.is_(False))
    )


def published_posts(db: Session) -> Query:
    """Published posts, newest first."""
    return (
        post_query(db)
        .filter(Post.is_published.is_(True))
        .order_by(Post.published_at.desc(), Post.id.desc())
    )


def _live_tags(post: Post) -> list[Tag]:
    return [pt.tag for pt in post.post_tags if not pt.is_deleted and not pt.tag.is_deleted]


_EPOCH = datetime.min.replace(tzinfo=UTC)


def _published(posts) -> list[Post]:
    """Published, non-deleted posts ordered like published_posts()."""
    visible = [p for p in posts if p.is_published and not p.is_deleted]
    return sorted(
        visible,
        key=lambda p: (as_utc(p.published_at) if p.published_at else _EPOCH, p.id),
        reverse=True,
    )


def author_summary(author: Author) -> AuthorSummary:
    return AuthorSummary(
        id=author.id,
        full_name=author.full_name,
        email=author.email,
        bio=author.bio,
        avatar_url=author.avatar_url,
    )


def tag_summary(tag: Tag) -> TagSummary:
    return TagSummary(id=tag.id, name=tag.name, slug=tag.slug)


def post_list_item(post: Post) -> PostListItem:
    return PostListItem(
        id=post.id,
        title=post.title,
        slug=post.slug,
        summary=post.summary,
        featured_image_url=post.featured_image_url,
        published_at=post.published_at,
        view_count=post.view_count,
        author=author_summary(post.author),
        tags=[tag_summary(t) for t in _live_tags(post)],
    )


def post_detail(post: Post) -> PostDetail:
    return PostDetail(
        **post_list_item(post).model_dump(),
        content=post.content,
        is_published=post.is_published,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def author_list_item(author: Author) -> AuthorListItem:
    return AuthorListItem(
        id=author.id,
        full_name=author.full_name,
        email=author.email,
        avatar_url=author.avatar_url,
        post_count=len(_published(author.posts)),
    )


def author_detail(author: Author) -> AuthorDetail:
    return AuthorDetail(
        id=author.id,
        first_name=author.first_name,
        last_name=author.last_name,
        full_name=author.full_name,
        email=author.email,
        bio=author.bio,
        avatar_url=author.avatar_url,
        created_at=author.created_at,
        posts=[post_list_item(p) for p in _published(author.posts)],
    )


def _tag_posts(tag: Tag) -> list[Post]:
    return _published(pt.post for pt in tag.post_tags if not pt.is_deleted)


def tag_list_item(tag: Tag) -> TagListItem:
    return TagListItem(id=tag.id, name=tag.name, slug=tag.slug, post_count=len(_tag_posts(tag)))


def tag_detail(tag: Tag) -> TagDetail:
    return TagDetail(
        id=tag.id,
        name=tag.name,
        slug=tag.slug,
        created_at=tag.created_at,
        posts=[post_list_item(p) for p in _tag_posts(tag)],
    )


def record_view(
    db: Session,
    post: Post,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Count one read of `post`: bump view_count and store a PostView row."""
    post.view_count = (post.view_count or 0) + 1
    db.add(
        PostView(
            post_id=post.id,
            viewed_at=datetime.now(UTC),
            ip_address=ip_address[:45] if ip_address else None,
            user_agent=user_agent[:500] if user_agent else None,
            is_deleted=False,
        )
    )
    db.commit()


def _resolve_slug(requested: str | None, source: str) -> str:
    slug = generate_slug(requested) if requested and requested.strip() else generate_slug(source)
    if not slug:
        raise BlogValidationError("Could not derive a slug; provide one explicitly")
    return slug


def apply_post_write(db: Session, post: Post, body: PostWrite) -> Post:
    """
    Copy a PostWrite onto `post` (new or existing) and replace its tag links.

    Raises BlogValidationError for a duplicate slug, unknown author or unknown tag.
    Does not commit.
    """
    slug = _resolve_slug(body.slug, body.title)
    clash = db.query(Post).filter(Post.slug == slug)
    if post.id is not None:
        clash = clash.filter(Post.id != post.id)
    if clash.first() is not None:
        raise BlogValidationError("A post with this slug already exists")

    author = (
        db.query(Author)
        .filter(Author.id == body.author_id, Author.is_deleted.is_(False))
        .first()
    )
    if author is None:
        raise BlogValidationError(f"Author with ID {body.author_id} not found")

    tags: list[Tag] = []
    if body.tag_ids:
        tags = (
            db.query(Tag)
            .filter(Tag.id.in_(body.tag_ids), Tag.is_deleted.is_(False))
            .all()
        )
        missing = sorted(set(body.tag_ids) - {t.id for t in tags})
        if missing:
            raise BlogValidationError(f"Unknown tag IDs: {missing}")

    post.title = body.title
    post.slug = slug
    post.content = body.content
    post.summary = body.summary
    post.featured_image_url = body.featured_image_url
    post.is_published = body.is_published
    post.published_at = body.published_at
    if body.is_published and post.published_at is None:
        post.published_at = datetime.now(UTC)
    post.author = author

    # Keep surviving links so the (post_id, tag_id) unique constraint is not hit on flush.
    by_id = {t.id: t for t in tags}
    existing = {pt.tag_id: pt for pt in post.post_tags}
    post.post_tags = [
        existing.get(tag_id) or PostTag(tag=by_id[tag_id], is_deleted=False)
        for tag_id in body.tag_ids
    ]
    return post


def apply_tag_write(db: Session, tag: Tag, name: str, requested_slug: str | None) -> Tag:
    """Set name/slug on `tag`, rejecting a name or slug used by another tag. Does not commit."""
    slug = _resolve_slug(requested_slug, name)
    clash = db.query(Tag).filter(or_(Tag.slug == slug, Tag.name == name))
    if tag.id is not None:
        clash = clash.filter(Tag.id != tag.id)
    if clash.first() is not None:
        raise BlogValidationError("A tag with this name or slug already exists")
    tag.name = name
    tag.slug = slug
    return tag
