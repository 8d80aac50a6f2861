import random
from types import MappingProxyType
from typing import Optional, Sequence

from cache import WalletCache, wallet_cache
from constants import ONE_DAY_MS
from models import ActivityType, DeFiPosition, WalletActivity
from utils import identify_protocol, now_ms


# Estimated APY bands (percent). These are not market data.
APY_RANGES = MappingProxyType({
    "staking": (5.0, 8.0),
    "lending": (3.0, 7.0),
    "liquidity": (8.0, 12.0),
})

LIQUIDITY_PROTOCOLS = frozenset({"RAYDIUM_SWAP", "ORCA_SWAP"})

_default_rng = random.Random()


async def analyze_defi_positions(
    address: str,
    cache: WalletCache = wallet_cache,
    rng: Optional[random.Random] = None,
    now: Optional[int] = None,
) -> list[DeFiPosition]:
    """
    Infer a best-effort list of DeFi positions from a wallet's cached activities.

    Cached positions are returned as-is when present. The ``apy`` of staking,
    lending and liquidity positions is sampled from ``rng`` within APY_RANGES,
    so two uncached runs differ only in that field.
    """
    cached = cache.get(address) or {}
    if cached.get("defi_positions") is not None:
        return cached["defi_positions"]

    successful = [a for a in cached.get("activities") or [] if a.success]
    if not successful:
        return []

    positions = synthesize_positions(successful, rng=rng, now=now)
    cache.set(address, {"defi_positions": positions})
    return positions


def synthesize_positions(
    activities: Sequence[WalletActivity],
    rng: Optional[random.Random] = None,
    now: Optional[int] = None,
) -> list[DeFiPosition]:
    rng = rng or _default_rng
    now = now_ms() if now is None else now

    positions = [
        *staking_positions(activities, rng),
        *trading_positions(activities, now),
        *lending_positions(activities, rng),
        *liquidity_positions(activities, rng),
    ]

    swaps = [a for a in activities if a.type == ActivityType.SWAP]
    if swaps:
        positions.append(DeFiPosition(
            protocol="Aggregate",
            type="Trading Statistics",
            value=total_value(swaps),
            token_a="Multiple",
            timestamp=now,
        ))

    return positions


# ── Passes ────────────────────────────────────────────────────────────────────


def staking_positions(
    activities: Sequence[WalletActivity], rng: random.Random
) -> list[DeFiPosition]:
    return [
        DeFiPosition(
            protocol=identify_protocol(a.program_id),
            type="Staking",
            token_a=a.token,
            value=a.value,
            apy=random_apy("staking", rng),
            timestamp=a.timestamp,
        )
        for a in activities
        if a.type == ActivityType.STAKING
    ]


def trading_positions(
    activities: Sequence[WalletActivity], now: int
) -> list[DeFiPosition]:
    trades = [
        a for a in activities
        if a.type == ActivityType.SWAP or identify_protocol(a.program_id) == "FLUXBEAM"
    ]
    recent = [a for a in trades if now - a.timestamp < ONE_DAY_MS]
    if not recent:
        return []

    return [DeFiPosition(
        protocol="FLUXBEAM",
        type="Trading",
        value=total_value(recent),
        timestamp=max(a.timestamp for a in recent),
    )]


def lending_positions(
    activities: Sequence[WalletActivity], rng: random.Random
) -> list[DeFiPosition]:
    return [
        DeFiPosition(
            protocol=identify_protocol(a.program_id),
            type="Lending",
            token_a=a.token,
            value=a.value,
            apy=random_apy("lending", rng),
            timestamp=a.timestamp,
        )
        for a in activities
        if a.type == ActivityType.LENDING
    ]


def liquidity_positions(
    activities: Sequence[WalletActivity], rng: random.Random
) -> list[DeFiPosition]:
    positions = []
    for a in activities:
        protocol = identify_protocol(a.program_id)
        if a.type == ActivityType.ACCOUNT_CREATION and protocol in LIQUIDITY_PROTOCOLS:
            positions.append(DeFiPosition(
                protocol=protocol,
                type="Liquidity",
                value=a.value,
                apy=random_apy("liquidity", rng),
                timestamp=a.timestamp,
            ))
    return positions


# ── Helpers ───────────────────────────────────────────────────────────────────


def random_apy(kind: str, rng: random.Random) -> float:
    low, high = APY_RANGES[kind]
    return low + rng.random() * (high - low)


def total_value(activities: Sequence[WalletActivity]) -> float:
    return sum(a.value or 0 for a in activities)
