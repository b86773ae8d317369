"""AuthService against an in-memory database: register, login, refresh."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from smartware.core.security import dummy_password_hash, verify_password
from smartware.models.user import User
from smartware.schemas.auth import RegisterRequest
from smartware.services.auth import (
    AccountDeactivatedError,
    AuthService,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    RefreshTokenExpiredError,
)
from tests.helpers import TEST_PASSWORD, DatabaseTestCase, add_user


def _register_body(username: str = "alice", email: str = "alice@x.com") -> RegisterRequest:
    return RegisterRequest(
        username=username,
        email=email,
        password=TEST_PASSWORD,
        first_name="Alice",
        last_name="A",
    )


class TestRegister(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = AuthService(self.db, self.tokens)

    def test_register_creates_reader_and_returns_tokens(self) -> None:
        result = self.service.register(_register_body())
        self.assertTrue(result.access_token)
        self.assertTrue(result.refresh_token)
        self.assertEqual(result.user.username, "alice")
        self.assertEqual(result.user.role, "Reader")
        self.assertTrue(result.user.is_active)
        self.assertFalse(result.user.email_confirmed)

        stored = self.db.query(User).filter(User.username == "alice").one()
        self.assertNotEqual(stored.password_hash, TEST_PASSWORD)
        self.assertEqual(stored.refresh_token, result.refresh_token)
        self.assertIsNotNone(stored.refresh_token_expiry)

    def test_access_token_carries_identity_claims(self) -> None:
        result = self.service.register(_register_body())
        claims = self.tokens.decode_access_token(result.access_token)
        self.assertEqual(claims["sub"], str(result.user.id))
        self.assertEqual(claims["unique_name"], "alice")
        self.assertEqual(claims["email"], "alice@x.com")
        self.assertEqual(claims["role"], "Reader")
        self.assertEqual(claims["firstName"], "Alice")

    def test_duplicate_username(self) -> None:
        self.service.register(_register_body())
        with self.assertRaises(DuplicateUsernameError) as ctx:
            self.service.register(_register_body(email="other@x.com"))
        self.assertEqual(ctx.exception.message, "Username already exists")
        self.assertEqual(self.db.query(User).count(), 1)

    def test_duplicate_email(self) -> None:
        self.service.register(_register_body())
        with self.assertRaises(DuplicateEmailError) as ctx:
            self.service.register(_register_body(username="alice2"))
        self.assertEqual(ctx.exception.message, "Email already exists")

    def test_username_checked_before_email(self) -> None:
        self.service.register(_register_body())
        with self.assertRaises(DuplicateUsernameError):
            self.service.register(_register_body())

    def test_soft_deleted_username_still_conflicts(self) -> None:
        user = add_user(self.db, "ghost", "ghost@x.com")
        user.is_deleted = True
        self.db.commit()
        with self.assertRaises(DuplicateUsernameError):
            self.service.register(_register_body(username="ghost", email="new@x.com"))


class TestLogin(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = AuthService(self.db, self.tokens)
        self.service.register(_register_body())

    def test_login_by_username_and_email(self) -> None:
        by_name = self.service.login("alice", TEST_PASSWORD)
        by_email = self.service.login("alice@x.com", TEST_PASSWORD)
        self.assertEqual(by_name.user.id, by_email.user.id)

    def test_login_token_carries_default_role(self) -> None:
        result = self.service.login("alice", TEST_PASSWORD)
        claims = self.tokens.decode_access_token(result.access_token)
        self.assertEqual(claims["role"], "Reader")
        self.assertEqual(claims["sub"], str(result.user.id))

    def test_mixed_case_email_stored_and_matched_as_sent(self) -> None:
        registered = self.service.register(_register_body(username="carol", email="carol@Example.COM"))
        self.assertEqual(registered.user.email, "carol@Example.COM")
        stored = self.db.query(User).filter(User.username == "carol").one()
        self.assertEqual(stored.email, "carol@Example.COM")

        result = self.service.login("carol@Example.COM", TEST_PASSWORD)
        self.assertEqual(result.user.username, "carol")

    def test_unknown_user_still_runs_password_check(self) -> None:
        with patch("smartware.services.auth.verify_password", wraps=verify_password) as check:
            with self.assertRaises(InvalidCredentialsError):
                self.service.login("nobody", TEST_PASSWORD)
        check.assert_called_once()
        self.assertEqual(check.call_args.args[1], dummy_password_hash())

    def test_login_rotates_refresh_token_and_sets_last_login(self) -> None:
        first = self.service.login("alice", TEST_PASSWORD)
        second = self.service.login("alice", TEST_PASSWORD)
        self.assertNotEqual(first.refresh_token, second.refresh_token)
        stored = self.db.query(User).filter(User.username == "alice").one()
        self.assertEqual(stored.refresh_token, second.refresh_token)
        self.assertIsNotNone(stored.last_login_at)

    def test_unknown_user_and_wrong_password_are_indistinguishable(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.service.login("nobody", TEST_PASSWORD)
        with self.assertRaises(InvalidCredentialsError) as wrong:
            self.service.login("alice", "wrong-password")
        self.assertEqual(unknown.exception.message, wrong.exception.message)
        self.assertEqual(wrong.exception.message, "Invalid credentials")

    def test_deactivated_account(self) -> None:
        add_user(self.db, "bob", "bob@x.com", is_active=False)
        with self.assertRaises(AccountDeactivatedError) as ctx:
            self.service.login("bob", TEST_PASSWORD)
        self.assertEqual(ctx.exception.message, "Account is deactivated")

    def test_deactivated_account_with_wrong_password_is_invalid_credentials(self) -> None:
        add_user(self.db, "bob", "bob@x.com", is_active=False)
        with self.assertRaises(InvalidCredentialsError):
            self.service.login("bob", "wrong-password")

    def test_soft_deleted_user_cannot_login(self) -> None:
        user = self.db.query(User).filter(User.username == "alice").one()
        user.is_deleted = True
        self.db.commit()
        with self.assertRaises(InvalidCredentialsError):
            self.service.login("alice", TEST_PASSWORD)


class TestRefresh(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = AuthService(self.db, self.tokens)
        self.registered = self.service.register(_register_body())

    def test_refresh_issues_new_pair(self) -> None:
        result = self.service.refresh(self.registered.refresh_token)
        self.assertNotEqual(result.refresh_token, self.registered.refresh_token)
        self.assertEqual(result.user.username, "alice")
        claims = self.tokens.decode_access_token(result.access_token)
        self.assertEqual(claims["unique_name"], "alice")

    def test_presented_token_is_retired(self) -> None:
        self.service.refresh(self.registered.refresh_token)
        with self.assertRaises(InvalidRefreshTokenError):
            self.service.refresh(self.registered.refresh_token)

    def test_login_supersedes_earlier_refresh_token(self) -> None:
        self.service.login("alice", TEST_PASSWORD)
        with self.assertRaises(InvalidRefreshTokenError):
            self.service.refresh(self.registered.refresh_token)

    def test_unknown_token(self) -> None:
        with self.assertRaises(InvalidRefreshTokenError) as ctx:
            self.service.refresh("bm90LWEtcmVhbC10b2tlbg==")
        self.assertEqual(ctx.exception.message, "Invalid refresh token")

    def test_expired_token(self) -> None:
        user = self.db.query(User).filter(User.username == "alice").one()
        user.refresh_token_expiry = datetime.now(UTC) - timedelta(seconds=1)
        self.db.commit()
        with self.assertRaises(RefreshTokenExpiredError) as ctx:
            self.service.refresh(self.registered.refresh_token)
        self.assertEqual(ctx.exception.message, "Refresh token expired")

    def test_missing_expiry_counts_as_expired(self) -> None:
        user = self.db.query(User).filter(User.username == "alice").one()
        user.refresh_token_expiry = None
        self.db.commit()
        with self.assertRaises(RefreshTokenExpiredError):
            self.service.refresh(self.registered.refresh_token)


if __name__ == "__main__":
    unittest.main()
