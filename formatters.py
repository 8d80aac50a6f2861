"""
Markdown reports for the MCP tools.

Section headings, emoji and tier thresholds are part of the tool output
contract: clients parse these reports structurally.
"""

from collections import Counter
from typing import Optional, Sequence

from constants import (
    COMPUTE_BUDGET_PROGRAM,
    KNOWN_PROGRAMS,
    ONE_DAY_MS,
    PROTOCOL_EMOJI,
    RISK_EMOJI,
    SYSTEM_PROGRAM,
    TYPE_EMOJI,
)
from models import (
    DeFiPosition,
    Strategy,
    TransactionDetails,
    TransactionPattern,
    WalletActivity,
    WalletProfile,
)
from utils import format_date, format_sol, identify_protocol, now_ms


MAX_HISTORY_ENTRIES = 10

DIVERSIFICATION_LOW = 30
DIVERSIFICATION_MEDIUM = 60
ACTIVITY_LOW = 50
ACTIVITY_MEDIUM = 100
HIGH_FEE_SOL = 0.001

RISK_INDICATORS = {"HIGH": "⚠️ HIGH", "MEDIUM": "⚡ MEDIUM", "LOW": "✅ LOW"}
ACTIVITY_INDICATORS = {"HIGH": "🔄 HIGH", "MEDIUM": "⚡ MEDIUM", "LOW": "🐢 LOW"}

COMPLEXITY_SIMPLE = "Simple (Single Program)"
COMPLEXITY_MODERATE = "Moderate (2-3 Programs)"
COMPLEXITY_COMPLEX = "Complex (Multiple Programs)"

FOOTER = "*This analysis is based on on-chain {source} and is provided for informational purposes only.*"


def type_emoji(activity_type: str, default: str = "•") -> str:
    return TYPE_EMOJI.get(activity_type, default)


def protocol_emoji(protocol: str) -> str:
    return PROTOCOL_EMOJI.get(protocol, "🔹")


# ── Activity history ──────────────────────────────────────────────────────────


def format_activity_history(activities: Sequence[WalletActivity], address: str) -> str:
    if not activities:
        return (
            f"# Wallet Activity Report\n\n**Wallet Address:** `{address}`\n\n"
            "No transaction history found for this wallet."
        )

    by_type: dict[str, int] = Counter(a.type for a in activities)
    programs = Counter(identify_protocol(a.program_id) for a in activities)
    total_volume = sum(a.value or 0 for a in activities)
    oldest = min(a.timestamp for a in activities)
    newest = max(a.timestamp for a in activities)

    days = (newest - oldest) / ONE_DAY_MS
    per_day = f"{len(activities) / days:.2f}" if days > 0 else str(len(activities))
    # Counter.most_common keeps first-seen order on ties
    most_common = by_type.most_common(1)[0][0]

    header = (
        "# Wallet Activity Report\n\n"
        f"**Wallet Address:** `{address}`\n"
        f"**Time Period:** {format_date(oldest)} to {format_date(newest)}\n"
        f"**Total Transactions:** {len(activities)}\n"
        f"**Total Volume:** {format_sol(total_volume)}"
    )

    summary = "## Activity Summary\n" + "\n".join(
        f"- {type_emoji(t)} {t}: {count} transactions" for t, count in by_type.items()
    )

    recent = sorted(activities, key=lambda a: a.timestamp, reverse=True)[:MAX_HISTORY_ENTRIES]
    history = "## Detailed Transaction History\n" + "\n".join(
        _history_entry(a) for a in recent
    )

    patterns = (
        "## Transaction Patterns\n"
        f"- **Most Common Activity:** {type_emoji(most_common)} {most_common}\n"
        f"- **Average Transaction Value:** {format_sol(total_volume / len(activities))}\n"
        f"- **Activity Frequency:** {per_day} transactions per day"
    )

    if len(activities) > MAX_HISTORY_ENTRIES:
        coverage = f"shows the {MAX_HISTORY_ENTRIES} most recent of {len(activities)} transactions"
    else:
        coverage = f"includes all {len(activities)} transactions"
    program_summary = (
        "## Program Interaction Summary\n"
        + "\n".join(
            f"- {program}: {count} interactions"
            for program, count in sorted(programs.items(), key=lambda kv: kv[1], reverse=True)
        )
        + f"\n\n*This activity report {coverage}. "
        "For a full analysis, use the analyzeWallet tool.*"
    )

    return "\n\n".join([header, summary, history, patterns, program_summary])


def _history_entry(activity: WalletActivity) -> str:
    lines = [
        "",
        f"### {type_emoji(activity.type)} Transaction at {format_date(activity.timestamp)}",
        f"- **Type:** {activity.type}",
        f"- **Value:** {format_sol(activity.value) if activity.value else 'N/A'}",
        f"- **Program:** {identify_protocol(activity.program_id)}",
        f"- **Status:** {'✅ Success' if activity.success else '❌ Failed'}",
        f"- **Signature:** `{activity.signature}`",
    ]
    if activity.description:
        lines.append(f"- **Description:** {activity.description}")
    return "\n".join(lines)


# ── Wallet analysis ───────────────────────────────────────────────────────────


def format_wallet_analysis(
    profile: WalletProfile,
    patterns: Sequence[TransactionPattern],
    positions: Sequence[DeFiPosition],
    recommendations: Sequence[Strategy],
    recent_activities: Sequence[WalletActivity],
) -> str:
    return "\n\n".join([
        _analysis_header(profile),
        _activity_overview(profile, recent_activities),
        _behavioral_patterns(patterns),
        _defi_positions(positions),
        _recommendations(recommendations),
        _risk_assessment(profile),
        _safety_tips(profile),
    ])


def _analysis_header(profile: WalletProfile) -> str:
    risk = str(profile.risk_profile)
    return (
        f"# Wallet Analysis Report {RISK_EMOJI.get(risk, '⚪')}\n\n"
        f"**Wallet Address:** `{profile.address}`\n"
        f"**Risk Profile:** {risk.upper()}\n"
        f"**Portfolio Diversification Score:** {profile.portfolio_diversification}/100"
    )


def _activity_overview(profile: WalletProfile, recent: Sequence[WalletActivity]) -> str:
    if profile.activity_count:
        first = format_date(profile.first_activity_date)
        last = format_date(profile.last_activity_date)
    else:
        first = last = "N/A"

    overview = (
        "## Activity Overview\n"
        f"**Total Transactions:** {profile.activity_count}\n"
        f"**First Activity:** {first}\n"
        f"**Last Activity:** {last}\n"
        f"**Transaction Volume:** {profile.transaction_volume:.2f} SOL"
    )

    favorites = "### Favorite Protocols\n" + (
        "\n".join(
            f"- {protocol_emoji(p.name)} {p.name}: {p.count} interactions"
            for p in profile.favorite_protocols
        )
        or "No known protocols used."
    )

    counts = Counter(a.type for a in recent)
    distribution = "### Recent Activity Distribution\n" + (
        "\n".join(
            f"- {type_emoji(t)} {t}: {n} transactions"
            for t, n in sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
        )
        or "No recent activity."
    )

    return "\n\n".join([overview, favorites, distribution])


def confidence_emoji(confidence: float) -> str:
    if confidence > 0.8:
        return "🔍"
    if confidence > 0.5:
        return "🔎"
    return "❓"


def _behavioral_patterns(patterns: Sequence[TransactionPattern]) -> str:
    if not patterns:
        return "## Behavioral Patterns\nNo significant transaction patterns detected."

    body = "\n\n".join(
        f"### {p.pattern_type} {confidence_emoji(p.confidence)} "
        f"({p.confidence * 100:.1f}% confidence)\n{p.description}"
        for p in patterns
    )
    return f"## Behavioral Patterns\n{body}"


def _defi_positions(positions: Sequence[DeFiPosition]) -> str:
    if not positions:
        return "## Active DeFi Positions\nNo active DeFi positions detected."

    def value(v: Optional[float]) -> str:
        if not v:
            return "Unknown"
        return f"{v:.{4 if v < 0.01 else 2}f} SOL"

    def apy(v: Optional[float]) -> str:
        return f"{v:.2f}%" if v else "N/A"

    ordered = sorted(positions, key=lambda p: (p.protocol, p.type))
    body = "\n\n".join(
        f"### {protocol_emoji(p.protocol)} {p.protocol} - {p.type}\n"
        f"- Token: {p.token_a or 'Multiple'}\n"
        f"- Value: {value(p.value)}\n"
        f"- APY: {apy(p.apy)}\n"
        f"- Last Updated: {format_date(p.timestamp)}"
        for p in ordered
    )
    return f"## Active DeFi Positions\n{body}"


def risk_level_emoji(risk_level: str) -> str:
    return {"low": "🟢", "medium": "🟠", "high": "🔴"}.get(risk_level, "⚪")


def _recommendations(recommendations: Sequence[Strategy]) -> str:
    if not recommendations:
        return "## Strategy Recommendations\nNo strategy recommendations available."

    body = "\n\n".join(
        f"### {r.strategy} {risk_level_emoji(r.risk_level)}\n"
        f"- {r.description}\n"
        f"- Expected Return: {r.potential_return}"
        for r in recommendations
    )
    return f"## Strategy Recommendations\n{body}"


def concentration_risk(diversification: float) -> str:
    if diversification < DIVERSIFICATION_LOW:
        return RISK_INDICATORS["HIGH"]
    if diversification < DIVERSIFICATION_MEDIUM:
        return RISK_INDICATORS["MEDIUM"]
    return RISK_INDICATORS["LOW"]


def trading_frequency(activity_count: int) -> str:
    if activity_count > ACTIVITY_MEDIUM:
        return ACTIVITY_INDICATORS["HIGH"]
    if activity_count > ACTIVITY_LOW:
        return ACTIVITY_INDICATORS["MEDIUM"]
    return ACTIVITY_INDICATORS["LOW"]


def _risk_assessment(profile: WalletProfile) -> str:
    return (
        "## Risk Assessment\n"
        f"- Portfolio Concentration: {concentration_risk(profile.portfolio_diversification)}\n"
        f"- Trading Frequency: {trading_frequency(profile.activity_count)}\n"
        f"- Protocol Diversity: {len(profile.favorite_protocols)} different protocols used"
    )


def _safety_tips(profile: WalletProfile) -> str:
    tips = [
        "Always verify transaction details before signing",
        "Consider using hardware wallet for large holdings",
        "Maintain a diversified portfolio across different protocols",
        "Monitor position health regularly",
    ]
    if profile.risk_profile == "aggressive":
        tips.append("Consider setting stop-loss orders for trading positions")
    if profile.portfolio_diversification < DIVERSIFICATION_LOW:
        tips.append("Consider diversifying across more protocols to reduce risk")

    return (
        "## Safety Tips\n"
        + "\n".join(f"- {tip}" for tip in tips)
        + "\n\n"
        + FOOTER.format(source="activity")
    )


# ── Transaction details ───────────────────────────────────────────────────────


def format_transaction_details(tx: TransactionDetails, now: Optional[int] = None) -> str:
    program_ids = {p.id for p in tx.program_ids}
    roles = [account_role(account, program_ids) for account in tx.accounts]
    is_token_transfer = (
        tx.type == "Transfer" and KNOWN_PROGRAMS["TOKEN_PROGRAM"] in program_ids
    )

    basic = (
        f"# Transaction Details {'✅' if tx.status == 'Success' else '❌'}\n\n"
        "## Basic Information\n"
        f"**Type:** {type_emoji(tx.type, '📄')} {tx.type}\n"
        f"**Status:** {tx.status}\n"
        f"**Signature:** `{tx.signature}`\n"
        f"**Timestamp:** {format_date(tx.block_time, seconds=True)} "
        f"({time_ago(tx.block_time, now)})\n"
        f"**Transaction Fee:** {tx.fee} SOL"
    )

    programs = "## Program Interaction\n" + (
        "\n".join(f"- **{p.name or 'Unknown Program'}** (`{p.id}`)" for p in tx.program_ids)
        or "No program interactions found."
    )

    participants = "## Account Participants\n" + (
        "\n".join(f"- **{role}**: `{account}`" for account, role in zip(tx.accounts, roles))
        or "No accounts found."
    )

    analysis = (
        "## Transaction Analysis\n"
        f"- **Complexity:** {complexity(len(tx.program_ids))}\n"
        f"- **Program Type:** {', '.join(p.name or 'Unknown' for p in tx.program_ids)}\n"
        f"- **Account Count:** {len(tx.accounts)} accounts involved\n"
    )
    if tx.type == "Transfer":
        kind = "Token Transfer" if is_token_transfer else "SOL Transfer"
        analysis += f"- **Transfer Type:** {kind}\n"

    security = (
        "## Security Considerations\n"
        "- Always verify transaction signatures\n"
        "- Check program IDs match expected addresses\n"
        "- Confirm account permissions and roles\n"
    )
    if tx.fee > HIGH_FEE_SOL:
        security += "- **Note:** Higher than average transaction fee\n"
    security += "\n" + FOOTER.format(source="data")

    return "\n\n".join([basic, programs, participants, analysis, security])


def account_role(account: str, program_ids: set[str]) -> str:
    if account == SYSTEM_PROGRAM:
        return "System Program"
    if account == COMPUTE_BUDGET_PROGRAM:
        return "Compute Budget Program"
    if account in program_ids:
        return "Program"
    return "User Account"


def complexity(program_count: int) -> str:
    if program_count == 1:
        return COMPLEXITY_SIMPLE
    if program_count <= 3:
        return COMPLEXITY_MODERATE
    return COMPLEXITY_COMPLEX


def time_ago(timestamp_ms: int, now: Optional[int] = None) -> str:
    seconds = max(0, ((now_ms() if now is None else now) - timestamp_ms) // 1000)
    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 60 * 60:
        return f"{seconds // 60} minutes ago"
    if seconds < 24 * 60 * 60:
        return f"{seconds // (60 * 60)} hours ago"
    return f"{seconds // (24 * 60 * 60)} days ago"
