"""Post endpoints: published listings, lookups that count views, search and CRUD."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from smartware.api.v1.auth import get_current_user
from smartware.core.database import get_db
from smartware.models import Post, PostTag, Tag, User
from smartware.schemas.blog import PostDetail, PostListItem, PostWrite
from smartware.services.blog import (
    BlogValidationError,
    apply_post_write,
    post_detail,
    post_list_item,
    post_query,
    published_posts,
    record_view,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = post_query(db).filter(Post.id == post_id).first()
    if post is None:
        logger.warning("Post with ID %s not found", post_id)
        raise HTTPException(status_code=404, detail=f"Post with ID {post_id} not found")
    return post


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.get("", response_model=list[PostListItem])
def list_posts(db: Annotated[Session, Depends(get_db)]) -> list[PostListItem]:
    """All published posts, newest first."""
    posts = published_posts(db).all()
    logger.info("Retrieved %s published posts", len(posts))
    return [post_list_item(p) for p in posts]


@router.get("/search", response_model=list[PostListItem])
def search_posts(
    db: Annotated[Session, Depends(get_db)],
    query: Annotated[str, Query(max_length=200)] = "",
) -> list[PostListItem]:
    """Published posts whose title, content or summary contains `query` (case-insensitive)."""
    term = query.strip()
    if not term:
        raise HTTPException(status_code=400, detail="Search query cannot be empty")
    pattern = f"%{term}%"
    posts = (
        published_posts(db)
        .filter(
            or_(
                Post.title.ilike(pattern),
                Post.content.ilike(pattern),
                Post.summary.ilike(pattern),
            )
        )
        .all()
    )
    logger.info("Search for %r returned %s results", term, len(posts))
    return [post_list_item(p) for p in posts]


@router.get("/author/{author_id}", response_model=list[PostListItem])
def list_posts_by_author(
    author_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> list[PostListItem]:
    """Published posts of one author."""
    posts = published_posts(db).filter(Post.author_id == author_id).all()
    logger.info("Retrieved %s posts for author %s", len(posts), author_id)
    return [post_list_item(p) for p in posts]


@router.get("/tag/{tag_slug}", response_model=list[PostListItem])
def list_posts_by_tag(
    tag_slug: str,
    db: Annotated[Session, Depends(get_db)],
) -> list[PostListItem]:
    """Published posts carrying the tag with slug `tag_slug`."""
    posts = (
        published_posts(db)
        .filter(
            Post.post_tags.any(
                PostTag.tag.has((Tag.slug == tag_slug) & Tag.is_deleted.is_(False))
            )
        )
        .all()
    )
    logger.info("Retrieved %s posts for tag %r", len(posts), tag_slug)
    return [post_list_item(p) for p in posts]


@router.get("/slug/{slug}", response_model=PostDetail)
def get_post_by_slug(
    slug: str,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> PostDetail:
    """Published post by slug; counts as a view."""
    post = (
        post_query(db)
        .filter(Post.slug == slug, Post.is_published.is_(True))
        .first()
    )
    if post is None:
        logger.warning("Post with slug %r not found", slug)
        raise HTTPException(status_code=404, detail=f"Post with slug '{slug}' not found")
    record_view(db, post, _client_ip(request), request.headers.get("user-agent"))
    logger.info("Retrieved post by slug %r: %s", slug, post.title)
    return post_detail(post)


@router.get("/{post_id}", response_model=PostDetail)
def get_post(
    post_id: int,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> PostDetail:
    """Post by id (drafts included); counts as a view."""
    post = _get_post_or_404(db, post_id)
    record_view(db, post, _client_ip(request), request.headers.get("user-agent"))
    logger.info("Retrieved post %s: %s", post_id, post.title)
    return post_detail(post)


@router.post("", response_model=PostDetail, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostWrite,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> PostDetail:
    """Create a post. Slug is derived from the title when omitted and must be unique."""
    post = Post(view_count=0, is_deleted=False)
    try:
        apply_post_write(db, post, body)
    except BlogValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    db.add(post)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail="A post with this slug already exists") from e
    logger.info("Created new post %s: %s", post.id, post.title)
    return post_detail(_get_post_or_404(db, post.id))


@router.put("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_post(
    post_id: int,
    body: PostWrite,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Replace a post's fields and tag set."""
    post = _get_post_or_404(db, post_id)
    try:
        apply_post_write(db, post, body)
    except BlogValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail="A post with this slug already exists") from e
    logger.info("Updated post %s: %s", post_id, body.title)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Soft delete a post."""
    post = _get_post_or_404(db, post_id)
    post.is_deleted = True
    db.commit()
    logger.info("Soft deleted post %s: %s", post_id, post.title)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
