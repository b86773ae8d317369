"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import Field, field_validator

from smartware.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from smartware.schemas.base import EMAIL_MAX_LEN, CamelModel, validate_email_address


class RegisterRequest(CamelModel):
    """Self-service sign-up."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        s = v.strip()
        if len(s) < USERNAME_MIN_LEN:
            raise ValueError(f"username must be at least {USERNAME_MIN_LEN} characters")
        if any(ch.isspace() for ch in s):
            raise ValueError("username must not contain whitespace")
        return s

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return validate_email_address(v)


class LoginRequest(CamelModel):
    """Credentials for login; the identifier may be a username or an email."""

    username_or_email: str = Field(..., min_length=1, max_length=200, description="Username or email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RefreshRequest(CamelModel):
    """Refresh token previously returned by register, login or refresh."""

    refresh_token: str = Field(..., min_length=1, max_length=255)


class UserView(CamelModel):
    """Outward view of a user. No password hash, no refresh token."""

    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    is_active: bool
    email_confirmed: bool


class AuthResponse(CamelModel):
    """Tokens plus the authenticated user; shared shape of every auth result."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    token_expiration: datetime = Field(..., description="Access token expiry (UTC)")
    user: UserView


class RegisterResult(AuthResponse):
    """Returned by POST /auth/register."""


class LoginResult(AuthResponse):
    """Returned by POST /auth/login."""


class RefreshResult(AuthResponse):
    """Returned by POST /auth/refresh."""


class UsersListResponse(CamelModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserView]
