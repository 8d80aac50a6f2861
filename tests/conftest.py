"""
Pytest fixtures for the wallet insights tests.

Activities are built in memory; RPC traffic goes through httpx.MockTransport.
"""

from __future__ import annotations

import random

import pytest

from cache import WalletCache
from constants import KNOWN_PROGRAMS
from models import WalletActivity
from solana_client import NotFoundError

WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
OTHER_WALLET = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
SIGNATURE = (
    "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"
)

MARINADE = KNOWN_PROGRAMS["MARINADE_STAKING"]
SOLEND = KNOWN_PROGRAMS["SOLEND"]
MANGO = KNOWN_PROGRAMS["MANGO_MARKETS"]
RAYDIUM = KNOWN_PROGRAMS["RAYDIUM_SWAP"]
ORCA = KNOWN_PROGRAMS["ORCA_SWAP"]
JUPITER = KNOWN_PROGRAMS["JUPITER_AGGREGATOR"]
FLUXBEAM = KNOWN_PROGRAMS["FLUXBEAM"]

NOW = 1_750_000_000_000  # fixed "now" in epoch ms


def make_activity(
    type: str = "Transfer",
    timestamp: int = NOW,
    program_id: str | None = None,
    value: float = 0.0,
    success: bool = True,
    token: str | None = "SOL",
    signature: str | None = None,
    description: str | None = None,
) -> WalletActivity:
    return WalletActivity(
        signature=signature or f"sig-{type}-{timestamp}",
        type=type,
        program_id=program_id,
        token=token,
        value=value,
        timestamp=timestamp,
        success=success,
        description=description,
    )


@pytest.fixture
def activity():
    return make_activity


@pytest.fixture
def cache():
    return WalletCache()


@pytest.fixture
def rng():
    return random.Random(42)


class FakeClient:
    """Stands in for SolanaClient; returns canned data or raises ``error``."""

    rpc_url = "http://rpc.test"

    def __init__(self, activities=None, details=None, error=None):
        self.activities = activities or []
        self.details = details
        self.error = error
        self.activity_calls = []

    async def get_wallet_activity(self, address, limit):
        self.activity_calls.append((address, limit))
        if self.error:
            raise self.error
        return list(self.activities)

    async def get_transaction_details(self, signature):
        if self.error:
            raise self.error
        if self.details is None:
            raise NotFoundError(f"Transaction not found: {signature}")
        return self.details


def sample_activities():
    """Three evenly spaced swaps plus staking, lending and transfers: a moderate wallet."""
    return [
        make_activity("Swap", program_id=JUPITER, value=1.0, timestamp=NOW - i * 3_600_000)
        for i in range(3)
    ] + [
        make_activity("Staking", program_id=MARINADE, value=5.0, timestamp=NOW - 10),
        make_activity("Lending", program_id=SOLEND, value=2.0, timestamp=NOW - 20),
        make_activity("Transfer", value=0.5, timestamp=NOW - 30),
        make_activity("Transfer", value=0.5, timestamp=NOW - 40),
    ]


@pytest.fixture
def fake_client():
    return FakeClient(activities=sample_activities())


@pytest.fixture
def analyzer(fake_client, monkeypatch):
    """A WalletAnalyzer over the fake client, installed as the tools' shared analyzer."""
    import tools
    from wallet_analyzer import WalletAnalyzer

    instance = WalletAnalyzer(client=fake_client, cache=WalletCache(), rng=random.Random(0))
    monkeypatch.setattr(tools, "analyzer", instance)
    return instance
