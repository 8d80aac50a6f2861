from types import MappingProxyType
from typing import Optional, Sequence

from models import Strategy, WalletActivity, WalletProfile
from utils import UNKNOWN_PROTOCOL, identify_protocol


# ── Strategy catalog ──────────────────────────────────────────────────────────

BEGINNER = Strategy(
    strategy="Start DeFi",
    description="Begin with small positions in established protocols.",
    risk_level="low",
    potential_return="3-5% APY",
)
STAKING_SOL = Strategy(
    strategy="Staking SOL",
    description="Stake SOL with a validator for steady returns.",
    risk_level="low",
    potential_return="5-7% APY",
)
LIQUID_STAKING = Strategy(
    strategy="Liquid Staking",
    description=(
        "Use Marinade Finance for liquid staking to earn staking rewards "
        "while maintaining liquidity."
    ),
    risk_level="low",
    potential_return="6-8% APY",
)
SUPPLY_STABLECOINS = Strategy(
    strategy="Supply Stablecoins",
    description="Supply USDC or USDT to Solend to earn lending interest.",
    risk_level="medium",
    potential_return="8-12% APY",
)
DIVERSIFIED_LP = Strategy(
    strategy="Diversified LP",
    description="Provide liquidity to stable pairs on Raydium or Orca.",
    risk_level="medium",
    potential_return="10-20% APY",
)
LEVERAGED_FARMING = Strategy(
    strategy="Leveraged Farming",
    description="Use leverage on Solend or Mango Markets for amplified yields.",
    risk_level="high",
    potential_return="20-40% APY with risk",
)
PERPETUAL_TRADING = Strategy(
    strategy="Perpetual Trading",
    description="Trade perpetual futures on Mango Markets or Drift Protocol.",
    risk_level="high",
    potential_return="Variable",
)

RISK_PROFILE_STRATEGIES = MappingProxyType({
    "conservative": (STAKING_SOL, LIQUID_STAKING),
    "moderate": (SUPPLY_STABLECOINS, DIVERSIFIED_LP),
    "aggressive": (LEVERAGED_FARMING, PERPETUAL_TRADING),
})

# A wallet already on one of these protocols doesn't need the matching strategy.
PROTOCOL_STRATEGY_MAP = MappingProxyType({
    "MARINADE_STAKING": LIQUID_STAKING,
    "SOLEND": SUPPLY_STABLECOINS,
    "MANGO_MARKETS": PERPETUAL_TRADING,
})

DEFAULT_RISK_PROFILE = "moderate"


def strategies_for_profile(risk_profile: str) -> tuple[Strategy, ...]:
    return RISK_PROFILE_STRATEGIES.get(
        risk_profile, RISK_PROFILE_STRATEGIES[DEFAULT_RISK_PROFILE]
    )


def recommend_strategies(
    activities: Sequence[WalletActivity],
    profile: Optional[WalletProfile] = None,
) -> list[Strategy]:
    """Recommend strategies for the wallet's risk profile, skipping protocols it already uses."""
    if not activities:
        return [BEGINNER]

    risk_profile = (profile.risk_profile if profile else None) or DEFAULT_RISK_PROFILE
    used = used_protocols(activities)

    return [
        strategy
        for strategy in strategies_for_profile(risk_profile)
        if not any(
            protocol in used and mapped is strategy
            for protocol, mapped in PROTOCOL_STRATEGY_MAP.items()
        )
    ]


def used_protocols(activities: Sequence[WalletActivity]) -> set[str]:
    return {
        identify_protocol(a.program_id)
        for a in activities
        if a.program_id and a.program_id != UNKNOWN_PROTOCOL
    }
