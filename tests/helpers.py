"""Shared fixtures: in-memory SQLite session factory, test token settings, API test case."""

import unittest
from collections.abc import Generator
from unittest.mock import patch

from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from smartware.core.config import JwtSettings, settings
from smartware.core.database import get_db
from smartware.core.security import TokenService, get_token_service, hash_password
from smartware.models import Base, User

TEST_JWT_SETTINGS = JwtSettings(
    secret=SecretStr("unit-test-secret-0123456789abcdef0123456789"),
    issuer="SmartWare.Test",
    audience="SmartWare.TestClient",
    expire_minutes=15,
    refresh_expire_days=7,
)

TEST_PASSWORD = "Secret123!"


def make_session_factory():
    """Fresh in-memory database; StaticPool keeps one connection so every session sees it."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def fast_bcrypt():
    """Patch bcrypt cost down so tests don't spend seconds hashing."""
    return patch("smartware.core.security.BCRYPT_ROUNDS", 4)


def add_user(
    db: Session,
    username: str,
    email: str,
    password: str = TEST_PASSWORD,
    role: str = "Reader",
    is_active: bool = True,
) -> User:
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
        email_confirmed=False,
        is_deleted=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class DatabaseTestCase(unittest.TestCase):
    """Gives each test its own empty database and a TokenService using test settings."""

    def setUp(self) -> None:
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()
        self.tokens = TokenService(TEST_JWT_SETTINGS)
        bcrypt_patch = fast_bcrypt()
        bcrypt_patch.start()
        self.addCleanup(bcrypt_patch.stop)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient whose get_db/get_token_service use the test doubles."""

    def setUp(self) -> None:
        super().setUp()
        from smartware.main import app

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        self.app = app
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_token_service] = lambda: self.tokens
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)
        self.prefix = settings.API_V1_PREFIX

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def register(self, username: str = "alice", email: str = "alice@x.com", **extra: str) -> dict:
        body = {
            "username": username,
            "email": email,
            "password": TEST_PASSWORD,
            "firstName": "Alice",
            "lastName": "A",
        }
        body.update(extra)
        response = self.client.post(self.url("/auth/register"), json=body)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def auth_headers(self, username: str = "writer", email: str = "writer@x.com") -> dict[str, str]:
        token = self.register(username=username, email=email)["accessToken"]
        return {"Authorization": f"Bearer {token}"}
