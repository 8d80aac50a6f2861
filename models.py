from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ─────────────────────────────────────────────────────────────────────


class ActivityType(str, Enum):
    TRANSFER = "Transfer"
    SWAP = "Swap"
    MINT = "Mint"
    STAKING = "Staking"
    TRADING = "Trading"
    LENDING = "Lending"
    ACCOUNT_CREATION = "Account Creation"
    OTHER = "Other"


class RiskProfile(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


RiskLevel = Literal["low", "medium", "high"]

PositionType = Literal[
    "Staking", "Trading", "Lending", "Liquidity", "Trading Statistics"
]


# ── Core Data Models ──────────────────────────────────────────────────────────


class WalletActivity(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    signature: str
    type: ActivityType
    program_id: Optional[str] = None
    token: Optional[str] = None
    value: float = 0.0
    timestamp: int  # epoch milliseconds
    success: bool = True
    description: Optional[str] = None


class TransactionPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern_type: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    description: str


class DeFiPosition(BaseModel):
    protocol: str
    type: PositionType
    token_a: Optional[str] = None
    value: Optional[float] = None
    apy: Optional[float] = None
    timestamp: int


class Strategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: str
    description: str
    risk_level: RiskLevel
    potential_return: str


class ProtocolUsage(BaseModel):
    name: str
    count: int


class WalletProfile(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    address: str
    risk_profile: RiskProfile = Field(RiskProfile.MODERATE, validate_default=True)
    portfolio_diversification: int = Field(0, ge=0, le=100)
    activity_count: int = 0
    first_activity_date: int = 0
    last_activity_date: int = 0
    transaction_volume: float = 0.0
    favorite_protocols: list[ProtocolUsage] = []


class ProgramInfo(BaseModel):
    id: str
    name: Optional[str] = None


class TransactionDetails(BaseModel):
    signature: str
    type: str
    status: Literal["Success", "Failed"]
    block_time: int  # epoch milliseconds
    fee: float  # SOL
    program_ids: list[ProgramInfo] = []
    accounts: list[str] = []


class WalletAnalysis(BaseModel):
    address: str
    profile: WalletProfile
    patterns: list[TransactionPattern] = []
    positions: list[DeFiPosition] = []
    recommendations: list[Strategy] = []
    recent_activities: list[WalletActivity] = []


# ── API Models ────────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class ActivityRequest(BaseModel):
    address: str = Field(..., description="Solana wallet address (base58)")
    limit: Optional[int] = Field(
        None, ge=1, le=100,
        description="Number of recent transactions to fetch.",
    )


class AnalyzeRequest(BaseModel):
    address: str = Field(..., description="Solana wallet address (base58)")
