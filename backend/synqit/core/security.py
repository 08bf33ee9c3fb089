# synqit/core/security.py
"""
Security module for authentication.
Handles password hashing, password strength checks, JWT creation/validation
and one-time tokens for email verification and password reset.
"""
import datetime as dt
import hashlib
import re
import secrets

import jwt  # PyJWT
from passlib.context import CryptContext

from synqit.config import settings

# Password hashing context
# Argon2 only; passlib handles verification of the stored format
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

_SPECIAL_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>_\-+=\[\]\\/;'`~]")


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Never store plain text passwords. Always use this function before saving.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain text password against a stored hash."""
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def validate_password_strength(password: str) -> list[str]:
    """
    Check a candidate password against the platform policy.

    Returns a list of human readable problems; an empty list means the
    password is acceptable.
    """
    problems = []
    if len(password) < 8:
        problems.append("Password must be at least 8 characters long")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        problems.append("Password must contain at least one number")
    if not _SPECIAL_CHARS.search(password):
        problems.append("Password must contain at least one special character")
    return problems


def session_expiry(now: dt.datetime | None = None) -> dt.datetime:
    now = now or dt.datetime.now(dt.timezone.utc)
    return now + dt.timedelta(days=settings.session_ttl_days)


def create_access_token(
    user_id: str,
    email: str,
    user_type: str,
    subscription_tier: str,
    session_id: str,
    expires_at: dt.datetime | None = None,
) -> str:
    """
    Create a JWT access token bound to a session row.

    The token carries enough identity for logging and quick checks, but it
    is only honoured while the referenced session is active and unexpired.

    Token payload includes:
        - userId, email, userType, subscriptionTier, sessionId
        - iss / aud: issuer and audience
        - iat / exp: issued at and expiration timestamps
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "userType": user_type,
        "subscriptionTier": subscription_tier,
        "sessionId": session_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": expires_at or session_expiry(now),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, malformed or issued for
            another audience
    """
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[JWT_ALG],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )


def extract_bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        return token or None
    return None


def generate_secure_token() -> str:
    return secrets.token_hex(32)


def hash_token(raw: str) -> str:
    """sha256 hex digest; one-time tokens are stored only in this form."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
