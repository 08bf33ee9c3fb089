# synqit/schemas/profile.py
"""
Pydantic schemas for the profile endpoints.
Unknown keys are ignored, so a client can't reach fields outside the
allow-list (email, subscription tier, lockout counters...).
"""
from typing import Optional

from pydantic import BaseModel, Field, constr

from synqit.models.enums import Blockchain
from synqit.schemas.auth import WALLET_PATTERN


class UserUpdateRequest(BaseModel):
    firstName: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    lastName: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    bio: Optional[constr(max_length=1000)] = None
    walletAddress: Optional[constr(pattern=WALLET_PATTERN)] = None
    profileImage: Optional[constr(max_length=1024)] = None


class BlockchainPreferenceIn(BaseModel):
    blockchain: Blockchain
    isPrimary: bool = False


class BlockchainPreferencesRequest(BaseModel):
    """
    Either a plain list of chains (first one becomes primary) or explicit
    `{blockchain, isPrimary}` entries.
    """
    blockchainPreferences: list[Blockchain | BlockchainPreferenceIn] = Field(default_factory=list)


class TwoFactorRequest(BaseModel):
    enabled: Optional[bool] = None  # None flips the current value


class DeleteAccountRequest(BaseModel):
    password: str = Field(min_length=1)
