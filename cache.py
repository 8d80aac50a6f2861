import asyncio
from typing import Any, Optional


class WalletCache:
    """
    Process-wide in-memory store of per-wallet data, keyed by address.

    Entries are plain dicts (``activities``, ``profile``, ``defi_positions``).
    ``set`` merges into the existing entry instead of replacing it. Nothing is
    ever evicted.
    """

    def __init__(self):
        self._entries: dict[str, dict[str, Any]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> Optional[dict[str, Any]]:
        entry = self._entries.get(key)
        return dict(entry) if entry is not None else None

    def set(self, key: str, partial: dict[str, Any]) -> None:
        entry = self._entries.setdefault(key, {})
        entry.update(partial)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        self._locks.clear()

    def lock(self, key: str) -> asyncio.Lock:
        """One lock per address so concurrent analyses don't recompute the same entry."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


wallet_cache = WalletCache()
