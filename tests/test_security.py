"""Unit tests for smartware.core.security: bcrypt hashing, access tokens, refresh tokens."""

import base64
import unittest
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import SecretStr

from smartware.core.security import (
    AccessToken,
    TokenService,
    hash_password,
    verify_password,
)
from smartware.models.user import User
from tests.helpers import TEST_JWT_SETTINGS, fast_bcrypt


def _user(**overrides: object) -> User:
    fields = {
        "id": 7,
        "username": "alice",
        "email": "alice@x.com",
        "role": "Reader",
        "first_name": "Alice",
        "last_name": "A",
    }
    fields.update(overrides)
    return User(**fields)


class TestPasswordHashing(unittest.TestCase):
    """hash_password/verify_password wrap bcrypt."""

    def setUp(self) -> None:
        patcher = fast_bcrypt()
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("Secret123!")
        self.assertNotEqual(hashed, "Secret123!")
        self.assertTrue(hashed.startswith("$2"))
        self.assertTrue(verify_password("Secret123!", hashed))

    def test_wrong_password_is_false(self) -> None:
        hashed = hash_password("Secret123!")
        self.assertFalse(verify_password("secret123!", hashed))

    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(hash_password("Secret123!"), hash_password("Secret123!"))

    def test_malformed_hash_is_false_not_error(self) -> None:
        self.assertFalse(verify_password("Secret123!", "not-a-bcrypt-hash"))


class TestAccessToken(unittest.TestCase):
    """TokenService.issue_access_token / decode_access_token."""

    def setUp(self) -> None:
        self.tokens = TokenService(TEST_JWT_SETTINGS)

    def test_claims_header_and_expiry(self) -> None:
        now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
        issued = self.tokens.issue_access_token(_user(), now=now)
        self.assertIsInstance(issued, AccessToken)
        self.assertEqual(issued.expires_at, now + timedelta(minutes=15))

        self.assertEqual(jwt.get_unverified_header(issued.token)["alg"], "HS256")
        claims = jwt.decode(
            issued.token,
            TEST_JWT_SETTINGS.secret.get_secret_value(),
            algorithms=["HS256"],
            audience="SmartWare.TestClient",
            options={"verify_exp": False},
        )
        self.assertEqual(claims["sub"], "7")
        self.assertEqual(claims["unique_name"], "alice")
        self.assertEqual(claims["email"], "alice@x.com")
        self.assertEqual(claims["role"], "Reader")
        self.assertEqual(claims["firstName"], "Alice")
        self.assertEqual(claims["lastName"], "A")
        self.assertEqual(claims["iss"], "SmartWare.Test")
        self.assertEqual(claims["aud"], "SmartWare.TestClient")
        self.assertEqual(claims["exp"], int(issued.expires_at.timestamp()))

    def test_missing_names_become_empty_strings(self) -> None:
        issued = self.tokens.issue_access_token(_user(first_name=None, last_name=None))
        claims = self.tokens.decode_access_token(issued.token)
        self.assertEqual(claims["firstName"], "")
        self.assertEqual(claims["lastName"], "")

    def test_decode_fresh_token(self) -> None:
        issued = self.tokens.issue_access_token(_user())
        self.assertEqual(self.tokens.decode_access_token(issued.token)["sub"], "7")

    def test_decode_rejects_expired_token(self) -> None:
        issued = self.tokens.issue_access_token(_user(), now=datetime.now(UTC) - timedelta(hours=2))
        with self.assertRaises(jwt.ExpiredSignatureError):
            self.tokens.decode_access_token(issued.token)

    def test_decode_rejects_other_audience(self) -> None:
        other = TokenService(TEST_JWT_SETTINGS.model_copy(update={"audience": "someone-else"}))
        issued = other.issue_access_token(_user())
        with self.assertRaises(jwt.InvalidAudienceError):
            self.tokens.decode_access_token(issued.token)


class TestValidateExpiredToken(unittest.TestCase):
    """validate_expired_token skips lifetime but keeps signature/issuer/audience/alg checks."""

    def setUp(self) -> None:
        self.tokens = TokenService(TEST_JWT_SETTINGS)

    def test_expired_token_round_trips_claims(self) -> None:
        issued = self.tokens.issue_access_token(_user(), now=datetime.now(UTC) - timedelta(days=1))
        claims = self.tokens.validate_expired_token(issued.token)
        self.assertIsNotNone(claims)
        self.assertEqual(claims["sub"], "7")
        self.assertEqual(claims["unique_name"], "alice")
        self.assertEqual(claims["email"], "alice@x.com")
        self.assertEqual(claims["role"], "Reader")

    def test_wrong_signature_is_none(self) -> None:
        other = TokenService(
            TEST_JWT_SETTINGS.model_copy(
                update={"secret": SecretStr("another-secret-0123456789abcdef0123")}
            )
        )
        issued = other.issue_access_token(_user())
        self.assertIsNone(self.tokens.validate_expired_token(issued.token))

    def test_wrong_issuer_is_none(self) -> None:
        other = TokenService(TEST_JWT_SETTINGS.model_copy(update={"issuer": "evil"}))
        issued = other.issue_access_token(_user())
        self.assertIsNone(self.tokens.validate_expired_token(issued.token))

    def test_other_algorithm_is_none(self) -> None:
        payload = {
            "sub": "7",
            "role": "Admin",
            "iss": TEST_JWT_SETTINGS.issuer,
            "aud": TEST_JWT_SETTINGS.audience,
        }
        token = jwt.encode(payload, TEST_JWT_SETTINGS.secret.get_secret_value() * 2, algorithm="HS512")
        self.assertIsNone(self.tokens.validate_expired_token(token))

    def test_garbage_is_none(self) -> None:
        self.assertIsNone(self.tokens.validate_expired_token("not-a-jwt"))


class TestRefreshToken(unittest.TestCase):
    def test_is_base64_of_32_bytes(self) -> None:
        token = TokenService.issue_refresh_token()
        self.assertEqual(len(base64.b64decode(token)), 32)

    def test_tokens_are_unique(self) -> None:
        self.assertEqual(len({TokenService.issue_refresh_token() for _ in range(50)}), 50)

    def test_expiry_uses_configured_days(self) -> None:
        tokens = TokenService(TEST_JWT_SETTINGS)
        now = datetime(2026, 1, 1, tzinfo=UTC)
        self.assertEqual(tokens.refresh_token_expiry(now), now + timedelta(days=7))


if __name__ == "__main__":
    unittest.main()
