"""SQLAlchemy implementation for wallet accounts"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.exceptions import (
    AccountAlreadyEnrolledError,
    AccountNotFoundError,
    ConcurrentModificationError,
)
from qrwallet.db.models import Wallet, utc_now
from qrwallet.modules.wallets.models import AccountLedger, WalletSnapshot


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_snapshot(self, account_id: str) -> WalletSnapshot | None:
        stmt = select(Wallet).where(Wallet.account_id == account_id)
        result = await self.session.execute(stmt)
        wallet = result.scalars().first()
        return self._to_snapshot(wallet) if wallet else None

    async def create_wallet(self, account_id: str) -> WalletSnapshot:
        wallet = Wallet(
            account_id=account_id,
            balance_cents=0,
            frozen=False,
            total_credited_cents=0,
            total_debited_cents=0,
            movement_count=0,
        )
        self.session.add(wallet)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # another writer enrolled the same account after our existence check
            raise AccountAlreadyEnrolledError(f"account {account_id} is already enrolled") from exc
        return self._to_snapshot(wallet)

    async def load_ledger(self, account_id: str, *, for_update: bool = True) -> AccountLedger | None:
        stmt = select(Wallet).where(Wallet.account_id == account_id)
        if for_update:
            stmt = stmt.with_for_update()
        # populate_existing so a row cached earlier in this session is re-read under the lock
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        wallet = result.scalars().first()
        if wallet is None:
            return None
        return AccountLedger(
            account_id=wallet.account_id,
            balance_cents=wallet.balance_cents,
            frozen=wallet.frozen,
            total_credited_cents=wallet.total_credited_cents,
            total_debited_cents=wallet.total_debited_cents,
            movement_count=wallet.movement_count,
            last_movement_at=wallet.last_movement_at,
            version=wallet.version,
        )

    async def save_ledger(self, ledger: AccountLedger) -> WalletSnapshot:
        # compare-and-swap on the version read by load_ledger
        stmt = (
            update(Wallet)
            .where(Wallet.account_id == ledger.account_id, Wallet.version == ledger.version)
            .values(
                balance_cents=ledger.balance_cents,
                frozen=ledger.frozen,
                total_credited_cents=ledger.total_credited_cents,
                total_debited_cents=ledger.total_debited_cents,
                movement_count=ledger.movement_count,
                last_movement_at=ledger.last_movement_at,
                version=ledger.version + 1,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session="fetch", populate_existing=True)
            .returning(Wallet)
        )
        result = await self.session.execute(stmt)
        wallet = result.scalars().first()
        if wallet is None:
            exists = await self.session.scalar(select(Wallet.account_id).where(Wallet.account_id == ledger.account_id))
            if exists is None:
                raise AccountNotFoundError(f"wallet {ledger.account_id} not found")
            raise ConcurrentModificationError(
                f"wallet {ledger.account_id} changed since version {ledger.version} was read"
            )
        ledger.version = wallet.version
        return self._to_snapshot(wallet)

    @staticmethod
    def _to_snapshot(model: Wallet) -> WalletSnapshot:
        return WalletSnapshot(
            account_id=model.account_id,
            balance_cents=model.balance_cents,
            frozen=bool(model.frozen),
            total_credited_cents=model.total_credited_cents,
            total_debited_cents=model.total_debited_cents,
            movement_count=model.movement_count,
            last_movement_at=model.last_movement_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
