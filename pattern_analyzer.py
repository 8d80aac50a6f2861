import math
from collections import defaultdict
from types import MappingProxyType
from typing import Sequence

from models import ActivityType, TransactionPattern, WalletActivity


MINIMUM_TRANSACTIONS = 5
MINIMUM_SWAPS = 3
MINIMUM_STAKING_ACTIONS = 3
DCA_DEVIATION_THRESHOLD = 0.3

PATTERNS = MappingProxyType({
    "insufficient_data": TransactionPattern(
        pattern_type="insufficient_data",
        confidence=0.0,
        description="Not enough transaction history to establish patterns.",
    ),
    "general": TransactionPattern(
        pattern_type="general",
        confidence=0.5,
        description="No specific pattern detected in transaction history.",
    ),
    "dca": TransactionPattern(
        pattern_type="dca",
        confidence=0.7,
        description="Regular token purchases suggest a dollar-cost averaging strategy.",
    ),
    "lending_active": TransactionPattern(
        pattern_type="lending_active",
        confidence=0.9,
        description=(
            "Active lending positions detected. "
            "Monitor collateral ratios to avoid liquidation."
        ),
    ),
    "yield_farming": TransactionPattern(
        pattern_type="yield_farming",
        confidence=0.8,
        description="Multiple staking activities suggest active yield farming strategy.",
    ),
})


def get_pattern(pattern_type: str) -> TransactionPattern:
    return PATTERNS[pattern_type]


def analyze_transaction_patterns(
    activities: Sequence[WalletActivity],
) -> list[TransactionPattern]:
    """
    Classify a wallet's activity history into behavioral patterns.

    Fewer than MINIMUM_TRANSACTIONS activities yields only ``insufficient_data``.
    Otherwise the DCA, lending and yield-farming checks run independently, and
    ``general`` is returned when none of them fires.
    """
    if len(activities) < MINIMUM_TRANSACTIONS:
        return [PATTERNS["insufficient_data"]]

    groups = group_by_type(activities)
    patterns: list[TransactionPattern] = []

    if is_dca(groups.get(ActivityType.SWAP.value, [])):
        patterns.append(PATTERNS["dca"])

    if groups.get(ActivityType.LENDING.value):
        patterns.append(PATTERNS["lending_active"])

    if len(groups.get(ActivityType.STAKING.value, [])) >= MINIMUM_STAKING_ACTIONS:
        patterns.append(PATTERNS["yield_farming"])

    return patterns or [PATTERNS["general"]]


def group_by_type(
    activities: Sequence[WalletActivity],
) -> dict[str, list[WalletActivity]]:
    groups: dict[str, list[WalletActivity]] = defaultdict(list)
    for activity in activities:
        groups[activity.type].append(activity)
    return dict(groups)


def is_dca(swaps: Sequence[WalletActivity]) -> bool:
    """True when swap timing is regular enough to look like dollar-cost averaging."""
    if len(swaps) < MINIMUM_SWAPS:
        return False

    ordered = sorted(swaps, key=lambda a: a.timestamp, reverse=True)
    gaps = [
        newer.timestamp - older.timestamp
        for newer, older in zip(ordered, ordered[1:])
    ]

    mean, std_dev = calculate_stats(gaps)
    # All swaps in the same instant: no interval to measure.
    if mean <= 0:
        return False

    return std_dev / mean < DCA_DEVIATION_THRESHOLD


def calculate_stats(values: Sequence[float]) -> tuple[float, float]:
    """Mean and population standard deviation."""
    if not values:
        return 0.0, 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return mean, math.sqrt(variance)
