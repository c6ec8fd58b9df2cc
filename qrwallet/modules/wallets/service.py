"""Wallet domain service (read side and account creation)."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.exceptions import AccountNotFoundError, ValidationError

from .models import WalletSnapshot
from .repository import WalletRepository

MAX_ACCOUNT_ID_LENGTH = 64


@dataclass(slots=True)
class WalletService:
    repository: WalletRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        # imported late, the repository depends on this package's models
        from qrwallet.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

        return cls(SqlWalletRepository(session))

    async def create_wallet(self, account_id: str) -> WalletSnapshot:
        return await self.repository.create_wallet(normalize_account_id(account_id))

    async def get_snapshot(self, account_id: str) -> WalletSnapshot | None:
        return await self.repository.get_snapshot(account_id)

    async def require_snapshot(self, account_id: str) -> WalletSnapshot:
        snapshot = await self.repository.get_snapshot(account_id)
        if snapshot is None:
            raise AccountNotFoundError(f"wallet {account_id} not found")
        return snapshot


def normalize_account_id(account_id: str) -> str:
    if not isinstance(account_id, str) or not account_id.strip():
        raise ValidationError("account_id is required")
    account_id = account_id.strip()
    if len(account_id) > MAX_ACCOUNT_ID_LENGTH:
        raise ValidationError(f"account_id must be at most {MAX_ACCOUNT_ID_LENGTH} characters")
    return account_id
