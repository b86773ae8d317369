"""Pydantic request/response schemas."""

from smartware.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    RefreshResult,
    RegisterRequest,
    RegisterResult,
    UsersListResponse,
    UserView,
)
from smartware.schemas.blog import (
    AuthorDetail,
    AuthorListItem,
    AuthorSummary,
    AuthorWrite,
    PostDetail,
    PostListItem,
    PostWrite,
    TagDetail,
    TagListItem,
    TagSummary,
    TagWrite,
)
from smartware.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "AuthorDetail",
    "AuthorListItem",
    "AuthorSummary",
    "AuthorWrite",
    "HealthResponse",
    "LoginRequest",
    "LoginResult",
    "PostDetail",
    "PostListItem",
    "PostWrite",
    "RefreshRequest",
    "RefreshResult",
    "RegisterRequest",
    "RegisterResult",
    "TagDetail",
    "TagListItem",
    "TagSummary",
    "TagWrite",
    "UsersListResponse",
    "UserView",
]
