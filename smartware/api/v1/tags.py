"""Tag endpoints: list, detail, create, update, soft delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session, selectinload

from smartware.api.v1.auth import get_current_user
from smartware.core.database import get_db
from smartware.models import Post, PostTag, Tag, User
from smartware.schemas.blog import TagDetail, TagListItem, TagWrite
from smartware.services.blog import (
    BlogValidationError,
    apply_tag_write,
    tag_detail,
    tag_list_item,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _tag_query(db: Session):
    return (
        db.query(Tag)
        .options(selectinload(Tag.post_tags).joinedload(PostTag.post))
        .filter(Tag.is_deleted.is_(False))
    )


def _get_tag_or_404(db: Session, tag_id: int) -> Tag:
    tag = _tag_query(db).filter(Tag.id == tag_id).first()
    if tag is None:
        logger.warning("Tag with ID %s not found", tag_id)
        raise HTTPException(status_code=404, detail=f"Tag with ID {tag_id} not found")
    return tag


@router.get("", response_model=list[TagListItem])
def list_tags(db: Annotated[Session, Depends(get_db)]) -> list[TagListItem]:
    """All tags with the number of published posts using each."""
    tags = _tag_query(db).order_by(Tag.name).all()
    logger.info("Retrieved %s tags", len(tags))
    return [tag_list_item(t) for t in tags]


@router.get("/{tag_id}", response_model=TagDetail)
def get_tag(tag_id: int, db: Annotated[Session, Depends(get_db)]) -> TagDetail:
    """Tag with its published posts."""
    tag = _get_tag_or_404(db, tag_id)
    logger.info("Retrieved tag %s: %s", tag_id, tag.name)
    return tag_detail(tag)


@router.post("", response_model=TagDetail, status_code=status.HTTP_201_CREATED)
def create_tag(
    body: TagWrite,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> TagDetail:
    """Create a tag; the slug is derived from the name when omitted."""
    tag = Tag(is_deleted=False)
    try:
        apply_tag_write(db, tag, body.name, body.slug)
    except BlogValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    db.add(tag)
    db.commit()
    db.refresh(tag)
    logger.info("Created new tag %s: %s", tag.id, tag.name)
    return tag_detail(tag)


@router.put("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_tag(
    tag_id: int,
    body: TagWrite,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Rename a tag. Name and slug must not belong to another tag."""
    tag = _get_tag_or_404(db, tag_id)
    try:
        apply_tag_write(db, tag, body.name, body.slug)
    except BlogValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    db.commit()
    logger.info("Updated tag %s", tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(
    tag_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Soft delete a tag. Refused while any non-deleted post uses it."""
    tag = _get_tag_or_404(db, tag_id)
    in_use = (
        db.query(PostTag)
        .join(Post, PostTag.post_id == Post.id)
        .filter(
            PostTag.tag_id == tag_id,
            PostTag.is_deleted.is_(False),
            Post.is_deleted.is_(False),
        )
        .first()
    )
    if in_use is not None:
        raise HTTPException(status_code=400, detail="Cannot delete tag that is in use")
    tag.is_deleted = True
    db.commit()
    logger.info("Soft deleted tag %s", tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
