import random
from typing import Optional

from cache import WalletCache, wallet_cache
from constants import DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT
from defi_analyzer import analyze_defi_positions
from models import TransactionDetails, WalletActivity, WalletAnalysis
from pattern_analyzer import analyze_transaction_patterns
from profiler import build_wallet_profile
from solana_client import SolanaClient
from strategy import recommend_strategies
from utils import InvalidInputError, validate_address, validate_signature


RECENT_ACTIVITY_COUNT = 10


class WalletAnalyzer:
    """Orchestrates fetching, caching and analysis of a Solana wallet."""

    def __init__(
        self,
        client: Optional[SolanaClient] = None,
        cache: WalletCache = wallet_cache,
        rng: Optional[random.Random] = None,
    ):
        self.client = client or SolanaClient()
        self.cache = cache
        self.rng = rng

    async def fetch_activity(
        self, address: str, limit: Optional[int] = None
    ) -> list[WalletActivity]:
        """Fetch fresh activity from RPC and replace the cached copy."""
        address = validate_address(address)
        limit = min(limit or DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT)
        if limit < 1:
            raise InvalidInputError(f"limit must be at least 1, got {limit}")

        activities = await self.client.get_wallet_activity(address, limit)
        # Derived data belongs to the previous activity set
        self.cache.set(address, {
            "activities": activities,
            "profile": None,
            "defi_positions": None,
        })
        return activities

    async def analyze(self, address: str) -> WalletAnalysis:
        address = validate_address(address)

        async with self.cache.lock(address):
            cached = self.cache.get(address) or {}
            activities = cached.get("activities")
            if activities is None:
                activities = await self.fetch_activity(address)

            profile = cached.get("profile") or build_wallet_profile(address, activities)
            self.cache.set(address, {"profile": profile})

            patterns = analyze_transaction_patterns(activities)
            positions = await analyze_defi_positions(address, self.cache, rng=self.rng)
            recommendations = recommend_strategies(activities, profile)

        recent = sorted(activities, key=lambda a: a.timestamp, reverse=True)
        return WalletAnalysis(
            address=address,
            profile=profile,
            patterns=patterns,
            positions=positions,
            recommendations=recommendations,
            recent_activities=recent[:RECENT_ACTIVITY_COUNT],
        )

    async def transaction_details(self, signature: str) -> TransactionDetails:
        signature = validate_signature(signature)
        return await self.client.get_transaction_details(signature)
