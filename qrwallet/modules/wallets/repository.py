"""Repository protocol for wallet accounts."""

from __future__ import annotations

from typing import Protocol

from .models import AccountLedger, WalletSnapshot


class WalletRepository(Protocol):
    async def get_snapshot(self, account_id: str) -> WalletSnapshot | None:
        ...

    async def create_wallet(self, account_id: str) -> WalletSnapshot:
        ...

    async def load_ledger(self, account_id: str, *, for_update: bool = True) -> AccountLedger | None:
        ...

    async def save_ledger(self, ledger: AccountLedger) -> WalletSnapshot:
        ...
