"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, String, false, true

from smartware.models.base import Base, EntityMixin

ROLE_ADMIN = "Admin"
ROLE_AUTHOR = "Author"
ROLE_READER = "Reader"

ROLES = (ROLE_ADMIN, ROLE_AUTHOR, ROLE_READER)

# Role assigned by self-service registration.
DEFAULT_ROLE = ROLE_READER


class User(Base, EntityMixin):
    """
    User account for JWT authentication and role-based access control.

    role: 'Admin', 'Author' or 'Reader'. At most one refresh token is live;
    issuing a new one overwrites refresh_token and refresh_token_expiry.
    """

    __tablename__ = "users"

    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(200), nullable=False, unique=True, index=True)
    password_hash = Column(String(500), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    role = Column(String(20), nullable=False, default=DEFAULT_ROLE, server_default=DEFAULT_ROLE)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    email_confirmed = Column(Boolean, nullable=False, default=False, server_default=false())
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    refresh_token = Column(String(255), nullable=True, index=True)
    refresh_token_expiry = Column(DateTime(timezone=True), nullable=True)
