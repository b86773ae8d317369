"""Password hashing, JWT access tokens and opaque refresh tokens."""

import base64
import secrets
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any, NamedTuple

import bcrypt
import jwt

from smartware.core.config import JwtSettings, get_settings

if TYPE_CHECKING:
    from smartware.models.user import User

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Access tokens are always HMAC-SHA256; nothing else is accepted on decode.
JWT_ALGORITHM = "HS256"

# Entropy of a refresh token before base64 encoding.
REFRESH_TOKEN_BYTES = 32

# Min/max lengths for registration input validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def _dummy_hash(rounds: int) -> str:
    return bcrypt.hashpw(b"smartware-no-such-user", bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def dummy_password_hash() -> str:
    """Hash at the current cost, checked against when no user matched so both paths run bcrypt."""
    return _dummy_hash(BCRYPT_ROUNDS)


class AccessToken(NamedTuple):
    """Signed access token and the instant it stops being valid."""

    token: str
    expires_at: datetime


class TokenService:
    """
    Issues and validates access tokens and mints refresh tokens.

    Access tokens are stateless. Refresh tokens carry no claims; the caller
    stores them on the user row and overwrites the previous one.
    """

    def __init__(self, jwt_settings: JwtSettings) -> None:
        self._settings = jwt_settings

    @property
    def settings(self) -> JwtSettings:
        return self._settings

    def _key(self) -> str:
        return self._settings.secret.get_secret_value()

    def issue_access_token(self, user: "User", now: datetime | None = None) -> AccessToken:
        """Create a signed JWT carrying the user's identity claims."""
        issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
        expires_at = issued_at + timedelta(minutes=self._settings.expire_minutes)
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "unique_name": user.username,
            "email": user.email,
            "role": user.role,
            "firstName": user.first_name or "",
            "lastName": user.last_name or "",
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._key(), algorithm=JWT_ALGORITHM)
        return AccessToken(token=token, expires_at=expires_at)

    def decode_access_token(self, token: str) -> dict[str, Any]:
        """
        Decode and fully validate a JWT (signature, issuer, audience, expiry).
        Raises jwt.PyJWTError on invalid or expired token.
        """
        return jwt.decode(
            token,
            self._key(),
            algorithms=[JWT_ALGORITHM],
            audience=self._settings.audience,
            issuer=self._settings.issuer,
            options={"require": ["sub", "exp", "iss", "aud"]},
        )

    def validate_expired_token(self, token: str) -> dict[str, Any] | None:
        """
        Return the claims of a token whose lifetime may have elapsed.

        Signature, issuer and audience are still checked. Returns None when the
        token is invalid or was not signed with HS256.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError:
            return None
        if str(header.get("alg", "")).upper() != JWT_ALGORITHM:
            return None
        try:
            return jwt.decode(
                token,
                self._key(),
                algorithms=[JWT_ALGORITHM],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options={"verify_exp": False, "require": ["sub", "iss", "aud"]},
            )
        except jwt.PyJWTError:
            return None

    @staticmethod
    def issue_refresh_token() -> str:
        """Opaque bearer string: base64 of 32 bytes from a CSPRNG."""
        return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")

    def refresh_token_expiry(self, now: datetime | None = None) -> datetime:
        """Absolute expiry for a refresh token issued at `now`."""
        return (now or datetime.now(UTC)) + timedelta(days=self._settings.refresh_expire_days)


@lru_cache
def get_token_service() -> TokenService:
    """Return the process-wide TokenService built from cached settings."""
    return TokenService(get_settings().jwt_settings())
