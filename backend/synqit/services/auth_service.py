# synqit/services/auth_service.py
"""
Authentication Service

Registration, login with lockout, session issuance/validation, email
verification and password reset. Sessions are rows in `user_sessions`;
a JWT is only honoured while the session it names is active and
unexpired, which makes tokens revocable.
"""
import datetime as dt
import logging
import uuid
from typing import Optional

from fastapi import status

from synqit.config import settings
from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.notifications import NotificationSink, OutboundNotification, deliver_quietly
from synqit.core.responses import as_utc, iso, utc_now
from synqit.core.security import (
    create_access_token,
    generate_secure_token,
    hash_password,
    hash_token,
    session_expiry,
    validate_password_strength,
    verify_password,
)
from synqit.models import User, UserSession
from synqit.services.serializers import user_to_dict

logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Invalid email or password"
ACCOUNT_LOCKED = "Account is temporarily locked due to too many failed login attempts. Please try again later."
RESET_REQUESTED = "If an account exists for this email, a password reset link has been sent."


def _check_strength(password: str) -> None:
    problems = validate_password_strength(password)
    if problems:
        raise AppError(f"Password validation failed: {', '.join(problems)}", status.HTTP_400_BAD_REQUEST)


def _parse_uuid(value) -> Optional[uuid.UUID]:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except (ValueError, TypeError):
        return None


class AuthService:
    def __init__(self, db: Database, sink: Optional[NotificationSink] = None):
        self.db = db
        self.sink = sink

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    async def _issue_session(self, user: User) -> dict:
        session_id = uuid.uuid4()
        expires_at = session_expiry()
        token = create_access_token(
            user_id=str(user.id),
            email=user.email,
            user_type=user.user_type.value,
            subscription_tier=user.subscription_tier.value,
            session_id=str(session_id),
            expires_at=expires_at,
        )
        await UserSession.create(id=session_id, user=user, token=token, expires_at=expires_at)
        return {"user": user_to_dict(user), "token": token, "expiresAt": iso(expires_at)}

    async def validate_session(self, session_id) -> Optional[User]:
        """
        Resolve a session id from a token to its user.

        Returns None unless the session row exists, is active, and has not
        expired.
        """
        sid = _parse_uuid(session_id)
        if sid is None:
            return None
        session = await UserSession.filter(
            id=sid, is_active=True, expires_at__gt=utc_now()
        ).prefetch_related("user").first()
        return session.user if session else None

    async def logout(self, session_id) -> None:
        sid = _parse_uuid(session_id)
        if sid is not None:
            await UserSession.filter(id=sid).update(is_active=False)

    async def refresh(self, user: User, session_id) -> dict:
        """Replace the current session with a fresh one."""
        result = await self._issue_session(user)
        await self.logout(session_id)
        return result

    async def invalidate_all_sessions(self, user_id) -> int:
        return await UserSession.filter(user_id=user_id, is_active=True).update(is_active=False)

    async def cleanup_expired_sessions(self) -> int:
        count = await UserSession.filter(is_active=True, expires_at__lt=utc_now()).update(is_active=False)
        if count:
            logger.info("[auth] deactivated %s expired sessions", count)
        return count

    # ------------------------------------------------------------------
    # Registration / login
    # ------------------------------------------------------------------
    async def register(self, data) -> dict:
        email = data.email.strip().lower()
        _check_strength(data.password)

        if await User.filter(email=email).exists():
            raise AppError("User with this email already exists", status.HTTP_409_CONFLICT)
        if data.walletAddress and await User.filter(wallet_address=data.walletAddress).exists():
            raise AppError("User with this wallet address already exists", status.HTTP_409_CONFLICT)

        raw_token = generate_secure_token()
        user = await User.create(
            email=email,
            password_hash=hash_password(data.password),
            first_name=data.firstName.strip(),
            last_name=data.lastName.strip(),
            user_type=data.userType,
            bio=data.bio,
            wallet_address=data.walletAddress,
            email_verification_token_hash=hash_token(raw_token),
            email_verification_expires_at=utc_now() + dt.timedelta(hours=settings.email_verification_hours),
        )
        await self._send_verification(user, raw_token)
        return await self._issue_session(user)

    async def login(self, email: str, password: str) -> dict:
        """
        Check credentials and open a new session.

        Unknown email and wrong password produce the same 401. Each wrong
        password bumps `failed_login_attempts`; reaching the limit locks
        the account for a fixed window, during which every attempt (even
        with the right password) gets 423.
        """
        user = await User.get_or_none(email=email.strip().lower())
        if not user:
            raise AppError(INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)

        now = utc_now()
        locked_until = as_utc(user.locked_until)
        if locked_until and locked_until > now:
            raise AppError(ACCOUNT_LOCKED, status.HTTP_423_LOCKED)
        if locked_until:
            # Lockout window elapsed; start counting afresh
            user.failed_login_attempts = 0
            user.locked_until = None

        if not verify_password(password, user.password_hash):
            user.failed_login_attempts += 1
            if user.failed_login_attempts >= settings.max_login_attempts:
                user.locked_until = now + dt.timedelta(minutes=settings.lockout_minutes)
                logger.warning(
                    "[auth] account %s locked after %s failed attempts",
                    user.email, user.failed_login_attempts,
                )
            await user.save(update_fields=["failed_login_attempts", "locked_until"])
            raise AppError(INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)

        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login_at = now
        await user.save(update_fields=["failed_login_attempts", "locked_until", "last_login_at"])
        return await self._issue_session(user)

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------
    async def _send_verification(self, user: User, raw_token: str) -> None:
        link = f"{settings.frontend_url}/auth/verify-email?token={raw_token}"
        await deliver_quietly(
            self.sink,
            OutboundNotification(
                recipient_email=user.email,
                subject="Verify your Synqit email address",
                body=f"Hi {user.first_name}, confirm your email address: {link}",
                event="email_verification",
                context={"token": raw_token},
            ),
        )

    async def verify_email(self, token: str) -> None:
        user = await User.get_or_none(email_verification_token_hash=hash_token(token))
        expires_at = as_utc(user.email_verification_expires_at) if user else None
        if not user or not expires_at or expires_at < utc_now():
            raise AppError("Invalid or expired verification token", status.HTTP_400_BAD_REQUEST)
        user.is_email_verified = True
        user.email_verification_token_hash = None
        user.email_verification_expires_at = None
        await user.save(update_fields=[
            "is_email_verified", "email_verification_token_hash", "email_verification_expires_at",
        ])

    async def resend_verification(self, email: str) -> None:
        user = await User.get_or_none(email=email.strip().lower())
        if not user:
            return  # same answer as success; don't reveal which emails exist
        if user.is_email_verified:
            raise AppError("Email is already verified", status.HTTP_400_BAD_REQUEST)
        raw_token = generate_secure_token()
        user.email_verification_token_hash = hash_token(raw_token)
        user.email_verification_expires_at = utc_now() + dt.timedelta(hours=settings.email_verification_hours)
        await user.save(update_fields=["email_verification_token_hash", "email_verification_expires_at"])
        await self._send_verification(user, raw_token)

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------
    async def forgot_password(self, email: str) -> str:
        user = await User.get_or_none(email=email.strip().lower())
        if user:
            raw_token = generate_secure_token()
            user.password_reset_token_hash = hash_token(raw_token)
            user.password_reset_expires_at = utc_now() + dt.timedelta(hours=settings.password_reset_hours)
            await user.save(update_fields=["password_reset_token_hash", "password_reset_expires_at"])
            link = f"{settings.frontend_url}/auth/reset-password?token={raw_token}"
            await deliver_quietly(
                self.sink,
                OutboundNotification(
                    recipient_email=user.email,
                    subject="Reset your Synqit password",
                    body=f"Use this link within {settings.password_reset_hours} hour(s): {link}",
                    event="password_reset",
                    context={"token": raw_token},
                ),
            )
        return RESET_REQUESTED

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password from a reset token and log the user out everywhere."""
        user = await User.get_or_none(password_reset_token_hash=hash_token(token))
        expires_at = as_utc(user.password_reset_expires_at) if user else None
        if not user or not expires_at or expires_at < utc_now():
            raise AppError("Invalid or expired password reset token", status.HTTP_400_BAD_REQUEST)
        _check_strength(new_password)

        async with self.db.transaction():
            user.password_hash = hash_password(new_password)
            user.password_reset_token_hash = None
            user.password_reset_expires_at = None
            user.failed_login_attempts = 0
            user.locked_until = None
            await user.save(update_fields=[
                "password_hash", "password_reset_token_hash", "password_reset_expires_at",
                "failed_login_attempts", "locked_until",
            ])
            await self.invalidate_all_sessions(user.id)

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise AppError("Current password is incorrect", status.HTTP_400_BAD_REQUEST)
        _check_strength(new_password)
        async with self.db.transaction():
            user.password_hash = hash_password(new_password)
            await user.save(update_fields=["password_hash"])
            await self.invalidate_all_sessions(user.id)
