"""Tests for the in-memory wallet cache."""

from __future__ import annotations

import asyncio

import pytest

from cache import WalletCache
from tests.conftest import OTHER_WALLET, WALLET


def test_miss_returns_none(cache):
    assert cache.get(WALLET) is None
    assert WALLET not in cache


def test_set_merges_into_existing_entry(cache):
    cache.set(WALLET, {"activities": [1, 2]})
    cache.set(WALLET, {"defi_positions": ["p"]})
    assert cache.get(WALLET) == {"activities": [1, 2], "defi_positions": ["p"]}

    cache.set(WALLET, {"activities": [3]})
    assert cache.get(WALLET)["activities"] == [3]
    assert len(cache) == 1


def test_get_returns_a_copy_of_the_entry(cache):
    cache.set(WALLET, {"activities": []})
    entry = cache.get(WALLET)
    entry["profile"] = "mutated"
    assert "profile" not in cache.get(WALLET)


def test_delete_and_clear(cache):
    cache.set(WALLET, {"a": 1})
    cache.set(OTHER_WALLET, {"a": 2})
    cache.delete(WALLET)
    assert cache.get(WALLET) is None
    cache.clear()
    assert len(cache) == 0


def test_lock_is_per_key():
    cache = WalletCache()
    assert cache.lock(WALLET) is cache.lock(WALLET)
    assert cache.lock(WALLET) is not cache.lock(OTHER_WALLET)


@pytest.mark.asyncio
async def test_lock_serializes_same_wallet():
    cache = WalletCache()
    order = []

    async def work(tag):
        async with cache.lock(WALLET):
            order.append(f"{tag}-start")
            await asyncio.sleep(0.01)
            order.append(f"{tag}-end")

    await asyncio.gather(work("a"), work("b"))
    assert order == ["a-start", "a-end", "b-start", "b-end"]
