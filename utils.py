import re
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Optional

from constants import KNOWN_PROGRAMS, LAMPORTS_PER_SOL

UNKNOWN_PROTOCOL = "Unknown"


class InvalidInputError(ValueError):
    """A wallet address, signature or limit supplied by the caller is malformed."""


# address -> protocol name, built once from KNOWN_PROGRAMS
_PROGRAM_NAMES = MappingProxyType({addr: name for name, addr in KNOWN_PROGRAMS.items()})

_BASE58_ADDRESS = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
_BASE58_SIGNATURE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{64,88}$")


def identify_protocol(program_id: Optional[str]) -> str:
    """Map a program address to its known protocol name, or "Unknown"."""
    if not program_id:
        return UNKNOWN_PROTOCOL
    return _PROGRAM_NAMES.get(program_id, UNKNOWN_PROTOCOL)


def known_programs() -> MappingProxyType:
    return KNOWN_PROGRAMS


def is_valid_solana_address(address: str) -> bool:
    # Solana base58, 32-44 chars
    return bool(address) and bool(_BASE58_ADDRESS.match(address.strip()))


def is_valid_signature(signature: str) -> bool:
    return bool(signature) and bool(_BASE58_SIGNATURE.match(signature.strip()))


def validate_address(address: str) -> str:
    address = (address or "").strip()
    if not is_valid_solana_address(address):
        raise InvalidInputError(f"Invalid Solana wallet address: {address!r}")
    return address


def validate_signature(signature: str) -> str:
    signature = (signature or "").strip()
    if not is_valid_signature(signature):
        raise InvalidInputError(f"Invalid transaction signature: {signature!r}")
    return signature


def short_address(address: str, chars: int = 6) -> str:
    """Truncate: 9QCfNu...VUrka"""
    if len(address) <= chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def lamports_to_sol(lamports: int | str) -> float:
    return int(lamports) / LAMPORTS_PER_SOL


def format_sol(value: float) -> str:
    return f"{value:.{6 if value < 0.01 else 4}f} SOL"


def format_date(timestamp_ms: int, seconds: bool = False) -> str:
    """Render epoch milliseconds as 'Jan 5, 2025, 03:04 PM' (UTC)."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    clock = dt.strftime("%I:%M:%S %p" if seconds else "%I:%M %p")
    return f"{dt:%b} {dt.day}, {dt.year}, {clock}"


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)
