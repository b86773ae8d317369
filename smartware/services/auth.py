"""Auth flow: register, login and refresh-token exchange against the users table."""

import logging
from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from smartware.core.security import (
    TokenService,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from smartware.models.base import as_utc
from smartware.models.user import DEFAULT_ROLE, User
from smartware.schemas.auth import (
    AuthResponse,
    LoginResult,
    RefreshResult,
    RegisterRequest,
    RegisterResult,
    UserView,
)

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Base for expected auth failures; `code` is stable, `message` is safe to show clients."""

    code = "AuthError"
    default_message = "Authentication error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthValidationError(AuthServiceError):
    """Input rejected before any mutation."""


class AuthenticationError(AuthServiceError):
    """Caller could not be authenticated."""


class DuplicateUsernameError(AuthValidationError):
    code = "DuplicateUsername"
    default_message = "Username already exists"


class DuplicateEmailError(AuthValidationError):
    code = "DuplicateEmail"
    default_message = "Email already exists"


class InvalidCredentialsError(AuthenticationError):
    code = "InvalidCredentials"
    default_message = "Invalid credentials"


class AccountDeactivatedError(AuthenticationError):
    code = "AccountDeactivated"
    default_message = "Account is deactivated"


class InvalidRefreshTokenError(AuthenticationError):
    code = "InvalidRefreshToken"
    default_message = "Invalid refresh token"


class RefreshTokenExpiredError(AuthenticationError):
    code = "RefreshTokenExpired"
    default_message = "Refresh token expired"


class AuthService:
    """
    Combines the credential store, password verifier and token issuers.

    Each call is one linear unit of work on a single user row and commits
    before returning. No retries; a failed commit propagates.
    """

    def __init__(self, db: Session, tokens: TokenService) -> None:
        self.db = db
        self.tokens = tokens

    def _active_users(self):
        return self.db.query(User).filter(User.is_deleted.is_(False))

    def _username_taken(self, username: str, include_deleted: bool = False) -> bool:
        query = self.db.query(User) if include_deleted else self._active_users()
        return query.filter(User.username == username).first() is not None

    def _email_taken(self, email: str, include_deleted: bool = False) -> bool:
        query = self.db.query(User) if include_deleted else self._active_users()
        return query.filter(User.email == email).first() is not None

    def _start_session(self, user: User, now: datetime, result_cls: type[AuthResponse]) -> AuthResponse:
        """Issue a fresh token pair and overwrite the user's stored refresh token."""
        access = self.tokens.issue_access_token(user, now=now)
        user.refresh_token = self.tokens.issue_refresh_token()
        user.refresh_token_expiry = self.tokens.refresh_token_expiry(now)
        return result_cls(
            access_token=access.token,
            refresh_token=user.refresh_token,
            token_expiration=access.expires_at,
            user=UserView.model_validate(user),
        )

    def register(self, body: RegisterRequest) -> RegisterResult:
        """
        Create a Reader account and sign it in.

        Raises DuplicateUsernameError or DuplicateEmailError; the username
        check runs first.
        """
        if self._username_taken(body.username):
            logger.warning("Registration rejected: duplicate username")
            raise DuplicateUsernameError()
        if self._email_taken(body.email):
            logger.warning("Registration rejected: duplicate email")
            raise DuplicateEmailError()

        now = datetime.now(UTC)
        user = User(
            username=body.username,
            email=body.email,
            password_hash=hash_password(body.password),
            first_name=body.first_name,
            last_name=body.last_name,
            role=DEFAULT_ROLE,
            is_active=True,
            email_confirmed=False,
            is_deleted=False,
        )
        self.db.add(user)
        try:
            self.db.flush()
            result = self._start_session(user, now, RegisterResult)
            self.db.commit()
        except IntegrityError as e:
            # Lost a race, or the name belongs to a soft-deleted row.
            self.db.rollback()
            if self._username_taken(body.username, include_deleted=True):
                raise DuplicateUsernameError() from e
            if self._email_taken(body.email, include_deleted=True):
                raise DuplicateEmailError() from e
            raise
        logger.info("User registered: %s (id=%s)", user.username, user.id)
        return result

    def login(self, username_or_email: str, password: str) -> LoginResult:
        """
        Authenticate by username or email.

        Unknown user and wrong password raise the same InvalidCredentialsError.
        """
        identifier = username_or_email.strip()
        user = (
            self._active_users()
            .filter(or_(User.username == identifier, User.email == identifier))
            .order_by(User.id)
            .first()
        )
        if user is None:
            verify_password(password, dummy_password_hash())
            logger.warning("Login rejected: invalid credentials")
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.warning("Login rejected: invalid credentials")
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.warning("Login rejected: account deactivated (id=%s)", user.id)
            raise AccountDeactivatedError()

        now = datetime.now(UTC)
        result = self._start_session(user, now, LoginResult)
        user.last_login_at = now
        self.db.commit()
        logger.info("User logged in: %s (id=%s)", user.username, user.id)
        return result

    def refresh(self, refresh_token: str) -> RefreshResult:
        """Exchange a live refresh token for a new token pair; the presented token is retired."""
        user = (
            self._active_users()
            .filter(User.refresh_token == refresh_token)
            .first()
        )
        if user is None:
            logger.warning("Refresh rejected: unknown refresh token")
            raise InvalidRefreshTokenError()

        now = datetime.now(UTC)
        expiry = user.refresh_token_expiry
        if expiry is None or as_utc(expiry) <= now:
            logger.warning("Refresh rejected: refresh token expired (id=%s)", user.id)
            raise RefreshTokenExpiredError()

        result = self._start_session(user, now, RefreshResult)
        self.db.commit()
        logger.info("Token refreshed for user: %s (id=%s)", user.username, user.id)
        return result
