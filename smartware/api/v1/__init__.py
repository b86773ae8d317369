"""API v1 routes."""

from fastapi import APIRouter

from smartware.api.v1 import auth, authors, health, posts, tags

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(authors.router, prefix="/authors", tags=["authors"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(tags.router, prefix="/tags", tags=["tags"])
