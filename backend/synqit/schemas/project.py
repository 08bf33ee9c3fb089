# synqit/schemas/project.py
"""
Pydantic schema for project create/update.

Every field is optional here; `create_project` checks that name and
description are present. Omitted fields are left untouched on update,
while a supplied `tags` or `blockchainPreferences` list (even empty)
replaces the stored set.
"""
from typing import Optional

from pydantic import BaseModel, Field, constr

from synqit.models.enums import (
    Blockchain,
    FundingStage,
    ProjectStage,
    ProjectType,
    TeamSize,
    TokenAvailability,
)
from synqit.schemas.profile import BlockchainPreferenceIn

Url = constr(strip_whitespace=True, max_length=512)


class ProjectIn(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    description: Optional[constr(strip_whitespace=True, min_length=1, max_length=5000)] = None
    website: Optional[Url] = None
    logoUrl: Optional[constr(max_length=1024)] = None
    bannerUrl: Optional[constr(max_length=1024)] = None
    foundedYear: Optional[int] = Field(default=None, ge=1990, le=2100)

    projectType: Optional[ProjectType] = None
    projectStage: Optional[ProjectStage] = None
    teamSize: Optional[TeamSize] = None
    fundingStage: Optional[FundingStage] = None
    tokenAvailability: Optional[TokenAvailability] = None
    totalFunding: Optional[float] = Field(default=None, ge=0)

    isLookingForFunding: Optional[bool] = None
    isLookingForPartners: Optional[bool] = None
    developmentFocus: Optional[constr(strip_whitespace=True, max_length=200)] = None

    contactEmail: Optional[constr(strip_whitespace=True, max_length=256)] = None
    twitterHandle: Optional[constr(strip_whitespace=True, max_length=32)] = None
    discordServer: Optional[Url] = None
    telegramGroup: Optional[Url] = None
    redditCommunity: Optional[Url] = None
    githubUrl: Optional[Url] = None
    whitepaperUrl: Optional[Url] = None

    country: Optional[constr(strip_whitespace=True, max_length=100)] = None
    city: Optional[constr(strip_whitespace=True, max_length=100)] = None
    timezone: Optional[constr(strip_whitespace=True, max_length=64)] = None

    tags: Optional[list[constr(max_length=50)]] = Field(default=None, max_length=20)
    blockchainPreferences: Optional[list[Blockchain | BlockchainPreferenceIn]] = None
