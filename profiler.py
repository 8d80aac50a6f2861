from collections import Counter
from typing import Sequence

from models import ActivityType, ProtocolUsage, RiskProfile, WalletActivity, WalletProfile
from utils import UNKNOWN_PROTOCOL, identify_protocol


AGGRESSIVE_TRADING_SHARE = 0.5
CONSERVATIVE_YIELD_SHARE = 0.3
CONSERVATIVE_MAX_TRADING_SHARE = 0.2
DIVERSIFICATION_PER_PROTOCOL = 20

_TRADING_TYPES = {ActivityType.SWAP.value, ActivityType.TRADING.value}
_YIELD_TYPES = {ActivityType.STAKING.value, ActivityType.LENDING.value}


def build_wallet_profile(
    address: str, activities: Sequence[WalletActivity]
) -> WalletProfile:
    """Summarize a wallet's activity into the profile used for strategy selection."""
    if not activities:
        return WalletProfile(address=address)

    timestamps = [a.timestamp for a in activities]
    favorites = favorite_protocols(activities)

    return WalletProfile(
        address=address,
        risk_profile=infer_risk_profile(activities),
        portfolio_diversification=min(
            100, DIVERSIFICATION_PER_PROTOCOL * len(favorites)
        ),
        activity_count=len(activities),
        first_activity_date=min(timestamps),
        last_activity_date=max(timestamps),
        transaction_volume=round(sum(a.value or 0 for a in activities), 9),
        favorite_protocols=favorites,
    )


def favorite_protocols(activities: Sequence[WalletActivity]) -> list[ProtocolUsage]:
    # Counter keeps first-seen order, and sorted() is stable on ties.
    counts = Counter(
        protocol
        for protocol in (identify_protocol(a.program_id) for a in activities)
        if protocol != UNKNOWN_PROTOCOL
    )
    return [
        ProtocolUsage(name=name, count=count)
        for name, count in sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    ]


def infer_risk_profile(activities: Sequence[WalletActivity]) -> RiskProfile:
    if not activities:
        return RiskProfile.MODERATE

    total = len(activities)
    trading_share = sum(a.type in _TRADING_TYPES for a in activities) / total
    yield_share = sum(a.type in _YIELD_TYPES for a in activities) / total

    if trading_share >= AGGRESSIVE_TRADING_SHARE:
        return RiskProfile.AGGRESSIVE
    if yield_share >= CONSERVATIVE_YIELD_SHARE and trading_share < CONSERVATIVE_MAX_TRADING_SHARE:
        return RiskProfile.CONSERVATIVE
    return RiskProfile.MODERATE
