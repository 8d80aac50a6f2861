import asyncio
from typing import Any, Optional

import httpx

from constants import (
    COMPUTE_BUDGET_PROGRAM,
    CORE_PROGRAM_IDS,
    DEX_PROTOCOLS,
    RPC_CONCURRENCY,
    RPC_TIMEOUT,
    RPC_URL,
    STAKE_PROGRAM,
    SYSTEM_PROGRAM,
)
from models import ActivityType, ProgramInfo, TransactionDetails, WalletActivity
from utils import UNKNOWN_PROTOCOL, identify_protocol, lamports_to_sol


WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"

_MINT_INSTRUCTIONS = {"mintTo", "mintToChecked"}
_CREATE_INSTRUCTIONS = {
    "createAccount", "createAccountWithSeed", "create", "createIdempotent",
    "initializeAccount", "initializeAccount2", "initializeAccount3",
}
_TRANSFER_INSTRUCTIONS = {"transfer", "transferChecked", "transferWithSeed"}

_PROGRAM_LABELS = {
    SYSTEM_PROGRAM: "System Program",
    COMPUTE_BUDGET_PROGRAM: "Compute Budget",
    STAKE_PROGRAM: "Stake Program",
}


class SolanaRPCError(Exception):
    """The Solana RPC endpoint was unreachable, rate-limited or returned garbage."""


class NotFoundError(LookupError):
    """The RPC endpoint has no record of the requested transaction."""


# ── Client ────────────────────────────────────────────────────────────────────


class SolanaClient:
    """JSON-RPC client for the handful of Solana calls the analyzer needs."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: float = RPC_TIMEOUT,
        retries: int = 1,
        retry_delay: float = 1.0,
        concurrency: int = RPC_CONCURRENCY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rpc_url = rpc_url or RPC_URL
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.concurrency = max(1, concurrency)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    async def _rpc(self, client: httpx.AsyncClient, method: str, params: list) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        for attempt in range(self.retries + 1):
            retryable = attempt < self.retries
            try:
                resp = await client.post(self.rpc_url, json=payload)
            except httpx.TransportError as e:
                if retryable:
                    await asyncio.sleep(self.retry_delay)
                    continue
                raise SolanaRPCError(f"{method} failed: {e!r}") from e

            if resp.status_code == 429 or resp.status_code >= 500:
                if retryable:
                    await asyncio.sleep(self.retry_delay)
                    continue
                raise SolanaRPCError(f"{method} failed: HTTP {resp.status_code}")

            try:
                resp.raise_for_status()
                data = resp.json()
            except (httpx.HTTPStatusError, ValueError) as e:
                raise SolanaRPCError(f"{method} returned an invalid response: {e}") from e

            if not isinstance(data, dict):
                raise SolanaRPCError(f"{method} returned an invalid response")
            if data.get("error"):
                error = data["error"]
                message = error.get("message", error) if isinstance(error, dict) else error
                raise SolanaRPCError(f"{method} error: {message}")
            return data.get("result")

        raise SolanaRPCError(f"{method} failed after {self.retries + 1} attempts")

    # ── Wallet activity ────────────────────────────────────────────────────

    async def get_wallet_activity(self, address: str, limit: int) -> list[WalletActivity]:
        """Fetch the ``limit`` most recent activities for a wallet, newest first."""
        async with self._client() as client:
            signatures = await self._rpc(
                client, "getSignaturesForAddress", [address, {"limit": limit}]
            ) or []

            semaphore = asyncio.Semaphore(self.concurrency)

            async def fetch(sig_info: dict) -> WalletActivity:
                async with semaphore:
                    return await self._fetch_activity(client, address, sig_info)

            return list(await asyncio.gather(*(fetch(s) for s in signatures)))

    async def _fetch_activity(
        self, client: httpx.AsyncClient, address: str, sig_info: dict
    ) -> WalletActivity:
        signature = sig_info.get("signature", "")
        try:
            tx = await self._rpc(client, "getTransaction", [
                signature,
                {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0},
            ])
        except SolanaRPCError as e:
            print(f"  [!] {signature[:12]}... details unavailable: {e}")
            tx = None

        if not tx:
            return activity_from_signature(sig_info)
        return parse_activity(address, signature, tx)

    # ── Transaction details ────────────────────────────────────────────────

    async def get_transaction_details(self, signature: str) -> TransactionDetails:
        async with self._client() as client:
            tx = await self._rpc(client, "getTransaction", [
                signature,
                {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0},
            ])
        if not tx:
            raise NotFoundError(f"Transaction not found: {signature}")
        return parse_transaction_details(signature, tx)


# ── Parsing ───────────────────────────────────────────────────────────────────


def activity_from_signature(sig_info: dict) -> WalletActivity:
    """Fallback when only the signature listing is available."""
    block_time = sig_info.get("blockTime")
    return WalletActivity(
        signature=sig_info.get("signature", ""),
        type=ActivityType.OTHER,
        timestamp=int(block_time * 1000) if block_time else 0,
        success=sig_info.get("err") is None,
        description=sig_info.get("memo"),
    )


def parse_activity(address: str, signature: str, tx: dict) -> WalletActivity:
    meta = tx.get("meta") or {}
    account_keys = _account_keys(tx)
    programs = _program_ids(tx, include_inner=True)
    activity_type = classify_transaction(
        programs, _instruction_types(tx), meta.get("logMessages") or []
    )
    primary = primary_program(programs)
    protocol = identify_protocol(primary)
    block_time = tx.get("blockTime")

    return WalletActivity(
        signature=signature,
        type=activity_type,
        program_id=primary,
        token=_changed_token(address, meta),
        value=_sol_change(address, account_keys, meta),
        timestamp=int(block_time * 1000) if block_time else 0,
        success=meta.get("err") is None,
        description=(
            f"{activity_type.value} via {protocol}"
            if protocol != UNKNOWN_PROTOCOL else None
        ),
    )


def parse_transaction_details(signature: str, tx: dict) -> TransactionDetails:
    meta = tx.get("meta") or {}
    programs = _program_ids(tx)
    block_time = tx.get("blockTime")

    return TransactionDetails(
        signature=signature,
        type=classify_transaction(
            _program_ids(tx, include_inner=True),
            _instruction_types(tx),
            meta.get("logMessages") or [],
        ).value,
        status="Success" if meta.get("err") is None else "Failed",
        block_time=int(block_time * 1000) if block_time else 0,
        fee=lamports_to_sol(meta.get("fee") or 0),
        program_ids=[
            ProgramInfo(id=pid, name=program_name(pid, tx)) for pid in programs
        ],
        accounts=_account_keys(tx),
    )


def classify_transaction(
    program_ids: list[str], instruction_types: set[str], logs: list[str]
) -> ActivityType:
    protocols = {identify_protocol(pid) for pid in program_ids}
    creates_account = bool(instruction_types & _CREATE_INSTRUCTIONS)

    if protocols & DEX_PROTOCOLS:
        mentions_swap = any("swap" in line.lower() for line in logs)
        if creates_account and not mentions_swap:
            return ActivityType.ACCOUNT_CREATION
        return ActivityType.SWAP
    if "MARINADE_STAKING" in protocols or STAKE_PROGRAM in program_ids:
        return ActivityType.STAKING
    if "SOLEND" in protocols:
        return ActivityType.LENDING
    if "MANGO_MARKETS" in protocols:
        return ActivityType.TRADING
    if "METAPLEX" in protocols or instruction_types & _MINT_INSTRUCTIONS:
        return ActivityType.MINT
    if creates_account:
        return ActivityType.ACCOUNT_CREATION
    if instruction_types & _TRANSFER_INSTRUCTIONS:
        return ActivityType.TRANSFER
    return ActivityType.OTHER


def primary_program(program_ids: list[str]) -> Optional[str]:
    """First non-core program invoked, else the first program at all."""
    for pid in program_ids:
        if pid not in CORE_PROGRAM_IDS:
            return pid
    return program_ids[0] if program_ids else None


def program_name(program_id: str, tx: Optional[dict] = None) -> Optional[str]:
    protocol = identify_protocol(program_id)
    if protocol != UNKNOWN_PROTOCOL:
        return protocol
    if program_id in _PROGRAM_LABELS:
        return _PROGRAM_LABELS[program_id]
    for ix in _instructions(tx or {}, include_inner=True):
        if ix.get("programId") == program_id and ix.get("program"):
            return ix["program"]
    return None


def _account_keys(tx: dict) -> list[str]:
    keys = ((tx.get("transaction") or {}).get("message") or {}).get("accountKeys") or []
    return [k.get("pubkey", "") if isinstance(k, dict) else k for k in keys]


def _instructions(tx: dict, include_inner: bool = False) -> list[dict]:
    message = (tx.get("transaction") or {}).get("message") or {}
    instructions = list(message.get("instructions") or [])
    if include_inner:
        for inner in (tx.get("meta") or {}).get("innerInstructions") or []:
            instructions.extend(inner.get("instructions") or [])
    return instructions


def _program_ids(tx: dict, include_inner: bool = False) -> list[str]:
    account_keys = _account_keys(tx)
    seen: list[str] = []
    for ix in _instructions(tx, include_inner):
        pid = ix.get("programId")
        if pid is None and "programIdIndex" in ix:
            index = ix["programIdIndex"]
            pid = account_keys[index] if index < len(account_keys) else None
        if pid and pid not in seen:
            seen.append(pid)
    return seen


def _instruction_types(tx: dict) -> set[str]:
    types = set()
    for ix in _instructions(tx, include_inner=True):
        parsed = ix.get("parsed")
        if isinstance(parsed, dict) and parsed.get("type"):
            types.add(parsed["type"])
    return types


def _sol_change(address: str, account_keys: list[str], meta: dict) -> float:
    if address not in account_keys:
        return 0.0
    index = account_keys.index(address)
    pre = meta.get("preBalances") or []
    post = meta.get("postBalances") or []
    if index >= len(pre) or index >= len(post):
        return 0.0
    return round(abs(lamports_to_sol(post[index] - pre[index])), 9)


def _changed_token(address: str, meta: dict) -> str:
    def owned(balances):
        return {
            b.get("mint"): float((b.get("uiTokenAmount") or {}).get("uiAmount") or 0)
            for b in balances or []
            if b.get("owner") == address
        }

    pre = owned(meta.get("preTokenBalances"))
    post = owned(meta.get("postTokenBalances"))
    for mint in list(post) + list(pre):
        if mint and mint != WRAPPED_SOL_MINT and pre.get(mint, 0.0) != post.get(mint, 0.0):
            return mint
    return "SOL"
