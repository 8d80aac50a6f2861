"""Tests for strategy recommendation (strategy.recommend_strategies)."""

from __future__ import annotations

import pytest

from models import WalletProfile
from strategy import (
    BEGINNER,
    DIVERSIFIED_LP,
    LEVERAGED_FARMING,
    LIQUID_STAKING,
    PERPETUAL_TRADING,
    STAKING_SOL,
    SUPPLY_STABLECOINS,
    recommend_strategies,
    used_protocols,
)
from tests.conftest import JUPITER, MANGO, MARINADE, SOLEND, WALLET, make_activity


def _profile(risk: str) -> WalletProfile:
    return WalletProfile(address=WALLET, risk_profile=risk)


@pytest.mark.parametrize("profile", [None, "conservative", "moderate", "aggressive"])
def test_no_activity_returns_beginner(profile):
    result = recommend_strategies([], _profile(profile) if profile else None)
    assert result == [BEGINNER]
    assert result[0].strategy == "Start DeFi"


def test_defaults_to_moderate():
    result = recommend_strategies([make_activity("Transfer")])
    assert result == [SUPPLY_STABLECOINS, DIVERSIFIED_LP]


@pytest.mark.parametrize("risk, expected", [
    ("conservative", [STAKING_SOL, LIQUID_STAKING]),
    ("moderate", [SUPPLY_STABLECOINS, DIVERSIFIED_LP]),
    ("aggressive", [LEVERAGED_FARMING, PERPETUAL_TRADING]),
])
def test_strategies_per_risk_profile(risk, expected):
    assert recommend_strategies([make_activity("Swap", program_id=JUPITER)], _profile(risk)) == expected


def test_unrecognized_risk_profile_falls_back_to_moderate():
    profile = WalletProfile.model_construct(address=WALLET, risk_profile="yolo")
    assert recommend_strategies([make_activity("Transfer")], profile) == [
        SUPPLY_STABLECOINS, DIVERSIFIED_LP,
    ]


def test_marinade_user_is_not_offered_liquid_staking():
    activities = [make_activity("Staking", program_id=MARINADE)]
    names = [s.strategy for s in recommend_strategies(activities, _profile("conservative"))]
    assert "Liquid Staking" not in names
    assert "Staking SOL" in names


def test_solend_and_mango_exclusions():
    assert recommend_strategies(
        [make_activity("Lending", program_id=SOLEND)], _profile("moderate")
    ) == [DIVERSIFIED_LP]
    assert recommend_strategies(
        [make_activity("Trading", program_id=MANGO)], _profile("aggressive")
    ) == [LEVERAGED_FARMING]


def test_exclusion_only_applies_to_mapped_strategy():
    # Solend maps to Supply Stablecoins, which is not in the conservative pair.
    activities = [make_activity("Lending", program_id=SOLEND)]
    assert recommend_strategies(activities, _profile("conservative")) == [
        STAKING_SOL, LIQUID_STAKING,
    ]


def test_recommendations_are_deterministic():
    activities = [make_activity("Staking", program_id=MARINADE), make_activity("Swap")]
    profile = _profile("conservative")
    assert recommend_strategies(activities, profile) == recommend_strategies(activities, profile)


def test_used_protocols_skips_missing_and_unknown():
    activities = [
        make_activity("Transfer", program_id=None),
        make_activity("Transfer", program_id="Unknown"),
        make_activity("Staking", program_id=MARINADE),
        make_activity("Transfer", program_id=WALLET),
    ]
    assert used_protocols(activities) == {"MARINADE_STAKING", "Unknown"}
