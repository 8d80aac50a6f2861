import os
from types import MappingProxyType


# ── Environment ───────────────────────────────────────────────────────────────

RPC_URL = os.getenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")
RPC_TIMEOUT = float(os.getenv("SOLANA_RPC_TIMEOUT", "30"))
RPC_CONCURRENCY = int(os.getenv("SOLANA_RPC_CONCURRENCY", "5"))
DEFAULT_ACTIVITY_LIMIT = int(os.getenv("DEFAULT_ACTIVITY_LIMIT", "50"))
MAX_ACTIVITY_LIMIT = 100

LAMPORTS_PER_SOL = 1_000_000_000


# ── Known Solana programs ─────────────────────────────────────────────────────

KNOWN_PROGRAMS = MappingProxyType({
    # DEXs and swap programs
    "RAYDIUM_SWAP": "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8",
    "ORCA_SWAP": "9W959DqEETiGZocYWCQPaJ6sBmUzgfxXfqGeTEdp3aQP",
    "JUPITER_AGGREGATOR": "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4",
    "SERUM_DEX_V3": "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin",
    "FLUXBEAM": "FLUXubRmkEi2q6K3Y9kBPg9248ggaZVsoSFhtJHSrm1X",
    # Staking and lending
    "MARINADE_STAKING": "MarBmsSgKXdrN1egZf5sqe1TMai9K1rChYNDJgjq7aD",
    "SOLEND": "So1endDq2YkqhipRh3WViPa8hdiSpxWy6z3Z6tMCpAo",
    "MANGO_MARKETS": "mv3ekLzLbnVPNxjSKvqBpU3ZeZXPQdEC3bp5MDEBG68",
    # Core programs
    "TOKEN_PROGRAM": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
    "ASSOCIATED_TOKEN_PROGRAM": "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL",
    "METAPLEX": "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s",
})

# Runtime programs that appear in nearly every transaction. They never decide
# the "primary" program of an activity.
SYSTEM_PROGRAM = "11111111111111111111111111111111"
COMPUTE_BUDGET_PROGRAM = "ComputeBudget111111111111111111111111111111"
STAKE_PROGRAM = "Stake11111111111111111111111111111111111111"
CORE_PROGRAM_IDS = frozenset({
    SYSTEM_PROGRAM,
    COMPUTE_BUDGET_PROGRAM,
    KNOWN_PROGRAMS["TOKEN_PROGRAM"],
    KNOWN_PROGRAMS["ASSOCIATED_TOKEN_PROGRAM"],
    "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb",  # Token-2022
    "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr",
    "Memo1UhkJRfHyvLMcVucJwxXeuD728EqVDDwQDxFMNo",
})

DEX_PROTOCOLS = frozenset({
    "RAYDIUM_SWAP", "ORCA_SWAP", "JUPITER_AGGREGATOR", "SERUM_DEX_V3", "FLUXBEAM",
})


# ── Display ───────────────────────────────────────────────────────────────────

TYPE_EMOJI = MappingProxyType({
    "Transfer": "↗️",
    "Swap": "🔄",
    "Mint": "✨",
    "Staking": "📌",
    "Trading": "📈",
    "Lending": "🏦",
    "Liquidity": "💧",
    "Other": "🔹",
})

RISK_EMOJI = MappingProxyType({
    "conservative": "🟢",
    "moderate": "🟠",
    "aggressive": "🔴",
})

PROTOCOL_EMOJI = MappingProxyType({
    "RAYDIUM_SWAP": "☀️",
    "ORCA_SWAP": "🐋",
    "JUPITER_AGGREGATOR": "🪐",
    "MARINADE_STAKING": "🧪",
    "SOLEND": "💵",
    "MANGO_MARKETS": "🥭",
    "FLUXBEAM": "⚡",
    "Aggregate": "📊",
})


# ── Time (milliseconds) ───────────────────────────────────────────────────────

ONE_MINUTE_MS = 60 * 1000
ONE_HOUR_MS = 60 * ONE_MINUTE_MS
ONE_DAY_MS = 24 * ONE_HOUR_MS
