# synqit/models/user.py
"""
Database models for user accounts and their login sessions.
"""
import uuid
from tortoise import fields, models

from synqit.models.enums import SubscriptionTier, UserType


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has at most one Project (via `project` on Project.owner)
    - Has many UserSessions, Partnerships (sent/received), Messages and
      Notifications; all cascade on account deletion

    Security:
    - Password is stored as an argon2 hash
    - One-time tokens (email verification, password reset) are stored as
      sha256 digests only
    - failed_login_attempts / locked_until implement the login lockout
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    email = fields.CharField(max_length=256, unique=True, index=True)  # Always stored lower-cased
    password_hash = fields.CharField(max_length=255)
    first_name = fields.CharField(max_length=50)
    last_name = fields.CharField(max_length=50)
    bio = fields.TextField(null=True)
    profile_image = fields.CharField(max_length=1024, null=True)
    wallet_address = fields.CharField(max_length=64, unique=True, null=True)
    user_type = fields.CharEnumField(UserType, max_length=32)
    subscription_tier = fields.CharEnumField(SubscriptionTier, max_length=16, default=SubscriptionTier.FREE)

    is_email_verified = fields.BooleanField(default=False)
    email_verification_token_hash = fields.CharField(max_length=64, null=True, index=True)
    email_verification_expires_at = fields.DatetimeField(null=True)
    password_reset_token_hash = fields.CharField(max_length=64, null=True, index=True)
    password_reset_expires_at = fields.DatetimeField(null=True)
    two_factor_enabled = fields.BooleanField(default=False)

    failed_login_attempts = fields.IntField(default=0)
    locked_until = fields.DatetimeField(null=True)  # Login refused until this instant
    last_login_at = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserSession(models.Model):
    """
    A login session. The JWT handed to the client names this row; the token
    is only accepted while `is_active` is true and `expires_at` is ahead.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="sessions", on_delete=fields.CASCADE)
    token = fields.TextField()
    expires_at = fields.DatetimeField(index=True)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "user_sessions"
