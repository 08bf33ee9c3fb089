# synqit/models/enums.py
"""
Fixed string sets shared by the models and the request schemas.
Values are validated at the HTTP boundary and stored as plain strings.
"""
from enum import Enum


class UserType(str, Enum):
    STARTUP = "STARTUP"
    INVESTOR = "INVESTOR"
    ECOSYSTEM_PLAYER = "ECOSYSTEM_PLAYER"
    INDIVIDUAL = "INDIVIDUAL"


class SubscriptionTier(str, Enum):
    FREE = "FREE"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


class ProjectType(str, Enum):
    AI = "AI"
    DEFI = "DEFI"
    GAMEFI = "GAMEFI"
    NFT = "NFT"
    DAO = "DAO"
    WEB3_TOOLS = "WEB3_TOOLS"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    METAVERSE = "METAVERSE"
    SOCIAL = "SOCIAL"
    OTHER = "OTHER"


class ProjectStage(str, Enum):
    IDEA_STAGE = "IDEA_STAGE"
    MVP = "MVP"
    BETA_TESTING = "BETA_TESTING"
    LIVE = "LIVE"
    SCALING = "SCALING"
    MATURE = "MATURE"


class TeamSize(str, Enum):
    SOLO = "SOLO"
    SMALL_2_10 = "SMALL_2_10"
    MEDIUM_11_50 = "MEDIUM_11_50"
    LARGE_51_200 = "LARGE_51_200"
    ENTERPRISE_200_PLUS = "ENTERPRISE_200_PLUS"


class FundingStage(str, Enum):
    PRE_SEED = "PRE_SEED"
    SEED = "SEED"
    SERIES_A = "SERIES_A"
    SERIES_B = "SERIES_B"
    SERIES_C = "SERIES_C"
    SERIES_D_PLUS = "SERIES_D_PLUS"
    IPO = "IPO"
    PROFITABLE = "PROFITABLE"


class TokenAvailability(str, Enum):
    NO_TOKEN_YET = "NO_TOKEN_YET"
    PRIVATE_SALE_ONGOING = "PRIVATE_SALE_ONGOING"
    PUBLIC_SALE_LIVE = "PUBLIC_SALE_LIVE"
    LISTED_ON_EXCHANGES = "LISTED_ON_EXCHANGES"
    FULLY_DISTRIBUTED = "FULLY_DISTRIBUTED"


class Blockchain(str, Enum):
    ETHEREUM = "ETHEREUM"
    BITCOIN = "BITCOIN"
    SOLANA = "SOLANA"
    POLYGON = "POLYGON"
    BINANCE_SMART_CHAIN = "BINANCE_SMART_CHAIN"
    AVALANCHE = "AVALANCHE"
    CARDANO = "CARDANO"
    POLKADOT = "POLKADOT"
    COSMOS = "COSMOS"
    ARBITRUM = "ARBITRUM"
    OPTIMISM = "OPTIMISM"
    BASE = "BASE"
    OTHER = "OTHER"


class PartnershipType(str, Enum):
    TECHNICAL = "TECHNICAL"
    BUSINESS = "BUSINESS"
    MARKETING = "MARKETING"
    ADVISORY = "ADVISORY"
    INVESTMENT = "INVESTMENT"
    COLLABORATION = "COLLABORATION"


class PartnershipStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# Statuses that block a second request between the same two projects
ACTIVE_PARTNERSHIP_STATUSES = (PartnershipStatus.PENDING, PartnershipStatus.ACCEPTED)


class MessageType(str, Enum):
    TEXT = "TEXT"
    FILE = "FILE"
    SYSTEM = "SYSTEM"


class NotificationType(str, Enum):
    PARTNERSHIP_REQUEST = "PARTNERSHIP_REQUEST"
    PARTNERSHIP_ACCEPTED = "PARTNERSHIP_ACCEPTED"
    PARTNERSHIP_REJECTED = "PARTNERSHIP_REJECTED"
    PARTNERSHIP_CANCELLED = "PARTNERSHIP_CANCELLED"
    NEW_MESSAGE = "NEW_MESSAGE"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"
