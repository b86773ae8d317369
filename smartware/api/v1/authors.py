"""Author endpoints: list, detail, create, update, soft delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session, selectinload

from smartware.api.v1.auth import get_current_user
from smartware.core.database import get_db
from smartware.models import Author, User
from smartware.schemas.blog import AuthorDetail, AuthorListItem, AuthorWrite
from smartware.services.blog import author_detail, author_list_item

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_author_or_404(db: Session, author_id: int) -> Author:
    author = (
        db.query(Author)
        .options(selectinload(Author.posts))
        .filter(Author.id == author_id, Author.is_deleted.is_(False))
        .first()
    )
    if author is None:
        logger.warning("Author with ID %s not found", author_id)
        raise HTTPException(status_code=404, detail=f"Author with ID {author_id} not found")
    return author


def _email_in_use(db: Session, email: str, exclude_id: int | None = None) -> bool:
    query = db.query(Author).filter(Author.email == email)
    if exclude_id is not None:
        query = query.filter(Author.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=list[AuthorListItem])
def list_authors(db: Annotated[Session, Depends(get_db)]) -> list[AuthorListItem]:
    """All authors with their number of published posts."""
    authors = (
        db.query(Author)
        .options(selectinload(Author.posts))
        .filter(Author.is_deleted.is_(False))
        .order_by(Author.id)
        .all()
    )
    logger.info("Retrieved %s authors", len(authors))
    return [author_list_item(a) for a in authors]


@router.get("/{author_id}", response_model=AuthorDetail)
def get_author(author_id: int, db: Annotated[Session, Depends(get_db)]) -> AuthorDetail:
    """Author with their published posts (tags included)."""
    author = _get_author_or_404(db, author_id)
    logger.info("Retrieved author %s: %s", author_id, author.full_name)
    return author_detail(author)


@router.post("", response_model=AuthorDetail, status_code=status.HTTP_201_CREATED)
def create_author(
    body: AuthorWrite,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> AuthorDetail:
    """Create an author. Email must be unique."""
    if _email_in_use(db, body.email):
        raise HTTPException(status_code=400, detail="An author with this email already exists")
    author = Author(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        bio=body.bio,
        avatar_url=body.avatar_url,
        is_deleted=False,
    )
    db.add(author)
    db.commit()
    db.refresh(author)
    logger.info("Created new author %s: %s", author.id, author.full_name)
    return author_detail(author)


@router.put("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_author(
    author_id: int,
    body: AuthorWrite,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Replace an author's fields. Email must not belong to another author."""
    author = _get_author_or_404(db, author_id)
    if _email_in_use(db, body.email, exclude_id=author_id):
        raise HTTPException(status_code=400, detail="Another author with this email already exists")
    author.first_name = body.first_name
    author.last_name = body.last_name
    author.email = body.email
    author.bio = body.bio
    author.avatar_url = body.avatar_url
    db.commit()
    logger.info("Updated author %s", author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_author(
    author_id: int,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Soft delete an author. Refused while the author has published posts."""
    author = _get_author_or_404(db, author_id)
    if any(p.is_published and not p.is_deleted for p in author.posts):
        raise HTTPException(status_code=400, detail="Cannot delete author with published posts")
    author.is_deleted = True
    db.commit()
    logger.info("Soft deleted author %s", author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
