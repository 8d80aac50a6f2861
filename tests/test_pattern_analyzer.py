"""Tests for behavioral pattern detection (pattern_analyzer)."""

from __future__ import annotations

import pytest

from pattern_analyzer import (
    analyze_transaction_patterns,
    calculate_stats,
    get_pattern,
    is_dca,
)
from tests.conftest import make_activity


def _types(patterns):
    return [p.pattern_type for p in patterns]


def _padding(n, start=10_000_000):
    return [make_activity("Transfer", timestamp=start + i) for i in range(n)]


@pytest.mark.parametrize("count", [0, 1, 4])
def test_fewer_than_five_activities_is_insufficient(count):
    activities = [make_activity("Swap", timestamp=i * 1000) for i in range(count)]
    patterns = analyze_transaction_patterns(activities)
    assert _types(patterns) == ["insufficient_data"]
    assert patterns[0].confidence == 0


def test_no_thresholds_met_is_general():
    activities = _padding(4) + [
        make_activity("Swap", timestamp=1), make_activity("Staking", timestamp=2),
    ]
    patterns = analyze_transaction_patterns(activities)
    assert _types(patterns) == ["general"]
    assert patterns[0].confidence == 0.5


def test_regular_swaps_are_dca():
    swaps = [make_activity("Swap", timestamp=t) for t in (0, 1000, 2000, 3000)]
    patterns = analyze_transaction_patterns(swaps + _padding(1))
    assert "dca" in _types(patterns)
    assert get_pattern("dca").confidence == 0.7
    assert next(p for p in patterns if p.pattern_type == "dca").confidence == 0.7


def test_irregular_swaps_are_not_dca():
    # gaps of 1000, 50 and 9000
    swaps = [make_activity("Swap", timestamp=t) for t in (0, 1000, 1050, 10050)]
    patterns = analyze_transaction_patterns(swaps + _padding(1))
    assert "dca" not in _types(patterns)
    assert _types(patterns) == ["general"]


def test_swaps_at_same_instant_are_not_dca():
    swaps = [make_activity("Swap", timestamp=5000, signature=f"s{i}") for i in range(4)]
    assert is_dca(swaps) is False
    assert _types(analyze_transaction_patterns(swaps + _padding(1))) == ["general"]


def test_dca_needs_three_swaps():
    swaps = [make_activity("Swap", timestamp=t) for t in (0, 1000)]
    assert is_dca(swaps) is False


def test_dca_ignores_input_order():
    swaps = [make_activity("Swap", timestamp=t) for t in (3000, 0, 2000, 1000)]
    assert is_dca(swaps) is True


def test_single_lending_activity_is_lending_active():
    activities = _padding(4) + [make_activity("Lending")]
    patterns = analyze_transaction_patterns(activities)
    assert _types(patterns) == ["lending_active"]
    assert patterns[0].confidence == 0.9


def test_three_staking_actions_is_yield_farming():
    activities = _padding(2) + [make_activity("Staking", timestamp=i) for i in range(3)]
    patterns = analyze_transaction_patterns(activities)
    assert _types(patterns) == ["yield_farming"]
    assert patterns[0].confidence == 0.8


def test_patterns_coexist_in_detection_order():
    activities = (
        [make_activity("Swap", timestamp=t) for t in (0, 1000, 2000)]
        + [make_activity("Lending", timestamp=5)]
        + [make_activity("Staking", timestamp=10 + i) for i in range(3)]
    )
    assert _types(analyze_transaction_patterns(activities)) == [
        "dca", "lending_active", "yield_farming",
    ]


def test_analysis_is_deterministic():
    activities = [make_activity("Swap", timestamp=t) for t in (0, 1000, 2000, 3000)] + _padding(2)
    assert analyze_transaction_patterns(activities) == analyze_transaction_patterns(activities)


def test_calculate_stats_uses_population_variance():
    mean, std = calculate_stats([2, 4, 4, 4, 5, 5, 7, 9])
    assert mean == 5
    assert std == 2
    assert calculate_stats([]) == (0.0, 0.0)
