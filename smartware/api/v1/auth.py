"""Register/login/refresh routes and auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated, NoReturn

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from smartware.core.database import get_db
from smartware.core.security import TokenService, get_token_service
from smartware.models.user import ROLE_ADMIN, User
from smartware.schemas.auth import (
    LoginRequest,
    LoginResult,
    RefreshRequest,
    RefreshResult,
    RegisterRequest,
    RegisterResult,
    UsersListResponse,
    UserView,
)
from smartware.services.auth import (
    AuthenticationError,
    AuthService,
    AuthServiceError,
    AuthValidationError,
)

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

INTERNAL_ERROR_DETAIL = "Internal server error"


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(db, tokens)


def _raise_auth_error(e: AuthServiceError) -> NoReturn:
    if isinstance(e, AuthValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    if isinstance(e, AuthenticationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e


def _raise_internal(e: Exception, action: str) -> NoReturn:
    logger.exception("Error during %s", action)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR_DETAIL,
    ) from e


@router.post("/register", response_model=RegisterResult)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> RegisterResult:
    """
    Create a new account (role Reader) and return an access/refresh token pair.
    Fails with 400 when the username or email is already taken.
    """
    try:
        return service.register(body)
    except AuthServiceError as e:
        _raise_auth_error(e)
    except Exception as e:
        _raise_internal(e, "registration")


@router.post("/login", response_model=LoginResult)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResult:
    """
    Authenticate with username or email and password.
    Include the returned token in the Authorization header as: Bearer <accessToken>
    """
    try:
        return service.login(body.username_or_email, body.password)
    except AuthServiceError as e:
        _raise_auth_error(e)
    except Exception as e:
        _raise_internal(e, "login")


@router.post("/refresh", response_model=RefreshResult)
def refresh(
    body: RefreshRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> RefreshResult:
    """Exchange a refresh token for a new token pair. The presented refresh token stops working."""
    try:
        return service.refresh(body.refresh_token)
    except AuthServiceError as e:
        _raise_auth_error(e)
    except Exception as e:
        _raise_internal(e, "token refresh")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> User:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = tokens.decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")
    user = (
        db.query(User)
        .filter(User.id == user_id, User.is_deleted.is_(False))
        .first()
    )
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Account is deactivated")
    return user


def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency: require authenticated user with role 'Admin'. Raises 403 for others."""
    if current_user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.get("/me", response_model=UserView)
def me(current_user: Annotated[User, Depends(get_current_user)]) -> UserView:
    """Return the user the bearer token belongs to."""
    return UserView.model_validate(current_user)


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all non-deleted users (admin only)."""
    users = (
        db.query(User)
        .filter(User.is_deleted.is_(False))
        .order_by(User.id)
        .all()
    )
    return UsersListResponse(users=[UserView.model_validate(u) for u in users])
