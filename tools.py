"""
MCP tool handlers.

Each handler returns a markdown report. Expected failures (bad input,
RPC trouble, nothing found) are raised as ``ToolError`` so the host shows
the message to the client instead of failing the request.
"""

from typing import Annotated, Optional

from fastmcp.exceptions import ToolError
from pydantic import Field

from constants import MAX_ACTIVITY_LIMIT
from formatters import (
    format_activity_history,
    format_transaction_details,
    format_wallet_analysis,
)
from solana_client import NotFoundError, SolanaRPCError
from utils import InvalidInputError
from wallet_analyzer import WalletAnalyzer


analyzer = WalletAnalyzer()


def set_analyzer(instance: WalletAnalyzer) -> None:
    global analyzer
    analyzer = instance


def _tool_error(action: str, target: str, e: Exception) -> ToolError:
    if isinstance(e, InvalidInputError):
        return ToolError(str(e))
    if isinstance(e, SolanaRPCError):
        return ToolError(f"Could not retrieve data for {target}: {e}")
    if isinstance(e, NotFoundError):
        return ToolError(f"No data found for {target}.")
    print(f"  [!] {action} failed for {target}: {e!r}")
    return ToolError(f"Internal error while {action}: {e}")


async def fetch_wallet_activity(
    address: Annotated[str, Field(description="Solana wallet address (base58)")],
    limit: Annotated[
        Optional[int],
        Field(ge=1, le=MAX_ACTIVITY_LIMIT, description="Number of recent transactions to fetch"),
    ] = None,
) -> str:
    """Fetch recent activity for a Solana wallet and return an activity history report."""
    try:
        activities = await analyzer.fetch_activity(address, limit)
    except Exception as e:
        raise _tool_error("fetching wallet activity", address, e) from e
    return format_activity_history(activities, address.strip())


async def analyze_wallet(
    address: Annotated[str, Field(description="Solana wallet address (base58)")],
) -> str:
    """Analyze a Solana wallet: profile, behavioral patterns, DeFi positions and strategy ideas."""
    try:
        result = await analyzer.analyze(address)
    except Exception as e:
        raise _tool_error("analyzing wallet", address, e) from e
    return format_wallet_analysis(
        result.profile,
        result.patterns,
        result.positions,
        result.recommendations,
        result.recent_activities,
    )


async def get_transaction_details(
    signature: Annotated[str, Field(description="Transaction signature (base58)")],
) -> str:
    """Fetch a single Solana transaction and return a detailed report."""
    try:
        details = await analyzer.transaction_details(signature)
    except Exception as e:
        raise _tool_error("fetching transaction details", signature, e) from e
    return format_transaction_details(details)
