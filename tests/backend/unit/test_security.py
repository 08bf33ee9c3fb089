"""
Unit tests for core.security module.
Tests password hashing, password policy, JWT token creation/validation
and one-time token helpers.
"""
import datetime as dt

import jwt
import pytest

from synqit.config import settings
from synqit.core.security import (
    JWT_ALG,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    generate_secure_token,
    hash_password,
    hash_token,
    session_expiry,
    validate_password_strength,
    verify_password,
)


def _token(**overrides) -> str:
    claims = dict(
        user_id="user-123",
        email="dev@example.com",
        user_type="STARTUP",
        subscription_tier="FREE",
        session_id="session-abc",
    )
    claims.update(overrides)
    return create_access_token(**claims)


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_different_hash_each_time(self):
        """Password hashing should produce different hashes (salt included)."""
        assert hash_password("TestPassword123!") != hash_password("TestPassword123!")

    def test_hash_is_argon2(self):
        hashed = hash_password("TestPassword123!")
        assert hashed.startswith("$argon2")
        assert "TestPassword123!" not in hashed

    def test_verify_password_correct_and_incorrect(self):
        hashed = hash_password("TestPassword123!")
        assert verify_password("TestPassword123!", hashed) is True
        assert verify_password("WrongPassword456!", hashed) is False

    def test_verify_password_with_garbage_hash(self):
        """A malformed stored hash is a failed check, not an exception."""
        assert verify_password("anything", "not-a-hash") is False


class TestPasswordStrength:
    """Tests for the password policy."""

    def test_strong_password_has_no_problems(self):
        assert validate_password_strength("StrongPass1!") == []

    @pytest.mark.parametrize(
        "password, fragment",
        [
            ("Sh0rt!", "at least 8 characters"),
            ("NOLOWER123!", "lowercase"),
            ("noupper123!", "uppercase"),
            ("NoDigitsHere!", "number"),
            ("NoSpecial123", "special character"),
        ],
    )
    def test_each_rule_reported(self, password, fragment):
        problems = validate_password_strength(password)
        assert len(problems) == 1
        assert fragment in problems[0]

    def test_all_problems_reported_at_once(self):
        assert len(validate_password_strength("")) == 5


class TestJWTTokens:
    """Tests for JWT token creation and validation."""

    def test_token_carries_identity_and_session(self):
        payload = decode_access_token(_token())
        assert payload["userId"] == "user-123"
        assert payload["email"] == "dev@example.com"
        assert payload["userType"] == "STARTUP"
        assert payload["subscriptionTier"] == "FREE"
        assert payload["sessionId"] == "session-abc"
        assert payload["iss"] == settings.jwt_issuer
        assert payload["aud"] == settings.jwt_audience

    def test_default_expiry_matches_session_ttl(self):
        payload = decode_access_token(_token())
        diff_days = (payload["exp"] - payload["iat"]) / 86400
        assert abs(diff_days - settings.session_ttl_days) < 0.01

    def test_explicit_expiry_is_used(self):
        expires_at = dt.datetime.now(dt.timezone.utc) + dt.timedelta(hours=1)
        payload = decode_access_token(_token(expires_at=expires_at))
        assert payload["exp"] == int(expires_at.timestamp())

    def test_expired_token_rejected(self):
        past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=5)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(_token(expires_at=past))

    def test_invalid_token_rejected(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token("invalid.token.here")

    def test_wrong_secret_rejected(self):
        forged = jwt.encode(
            {"userId": "x", "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
            "wrong-secret",
            algorithm=JWT_ALG,
        )
        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(forged)

    def test_wrong_audience_rejected(self):
        token = jwt.encode(
            {"userId": "x", "iss": settings.jwt_issuer, "aud": "someone-else"},
            settings.jwt_secret,
            algorithm=JWT_ALG,
        )
        with pytest.raises(jwt.InvalidAudienceError):
            decode_access_token(token)

    def test_session_expiry_offset(self):
        now = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)
        assert session_expiry(now) - now == dt.timedelta(days=settings.session_ttl_days)


class TestTokenHelpers:
    """Bearer parsing and one-time tokens."""

    def test_extract_bearer_token(self):
        assert extract_bearer_token("Bearer abc.def") == "abc.def"
        assert extract_bearer_token("bearer   abc ") == "abc"
        assert extract_bearer_token("Basic abc") is None
        assert extract_bearer_token("Bearer ") is None
        assert extract_bearer_token(None) is None

    def test_secure_tokens_are_unique_hex(self):
        a, b = generate_secure_token(), generate_secure_token()
        assert a != b
        assert len(a) == 64
        int(a, 16)

    def test_hash_token_is_stable_sha256(self):
        assert hash_token("abc") == hash_token("abc")
        assert hash_token("abc") != hash_token("abd")
        assert len(hash_token("abc")) == 64
