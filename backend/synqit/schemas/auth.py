# synqit/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Field names are camelCase, matching the JSON the frontend sends.
"""
from typing import Optional

from pydantic import BaseModel, Field, constr

from synqit.models.enums import UserType

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
WALLET_PATTERN = r"^0x[a-fA-F0-9]{40}$"

Email = constr(strip_whitespace=True, max_length=256, pattern=EMAIL_PATTERN)


class RegisterRequest(BaseModel):
    """
    Request model for account registration.
    Password strength is checked by the service so the error lists every
    missing character class at once.
    """
    email: Email
    password: str = Field(min_length=1, max_length=128)
    firstName: constr(strip_whitespace=True, min_length=1, max_length=50)
    lastName: constr(strip_whitespace=True, min_length=1, max_length=50)
    userType: UserType
    bio: Optional[constr(max_length=1000)] = None
    walletAddress: Optional[constr(pattern=WALLET_PATTERN)] = None


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(min_length=1)


class EmailRequest(BaseModel):
    """Used by resend-verification and forgot-password."""
    email: Email


class TokenRequest(BaseModel):
    token: str = Field(min_length=1)


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    newPassword: str = Field(min_length=1, max_length=128)


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(min_length=1)
    newPassword: str = Field(min_length=1, max_length=128)
