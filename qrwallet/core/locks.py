"""Per-account mutual exclusion for ledger writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLockManager:
    """Hands out one ``asyncio.Lock`` per key.

    Entries are dropped once nobody holds or waits on them, so the table only
    grows with the number of accounts currently being written.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                logger.debug("Lock acquired for %s", key)
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)

    def is_locked(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["KeyedLockManager"]
