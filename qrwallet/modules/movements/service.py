"""Movement log service: the single append path and read-only projections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.exceptions import (
    AccountNotFoundError,
    IntegrityViolationError,
    MovementNotFoundError,
    ValidationError,
)

from .models import LedgerAudit, MovementKind, MovementQuery, MovementRecord, NewMovement
from .repository import MovementRepository

if TYPE_CHECKING:
    from qrwallet.modules.wallets.repository import WalletRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


@dataclass(slots=True)
class MovementLogService:
    repository: MovementRepository
    wallets: Optional[WalletRepository] = None

    @classmethod
    def with_session(cls, session: AsyncSession) -> "MovementLogService":
        # imported late, the repositories depend on this package's models
        from qrwallet.infrastructure.database.repositories.movement_repository import SqlMovementRepository
        from qrwallet.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

        return cls(SqlMovementRepository(session), SqlWalletRepository(session))

    async def append(self, movement: NewMovement) -> MovementRecord:
        if movement.amount_cents <= 0:
            raise ValidationError("movement amount must be positive")
        expected = movement.balance_before_cents + (
            movement.amount_cents if movement.kind is MovementKind.CREDIT else -movement.amount_cents
        )
        if movement.balance_after_cents != expected or movement.balance_after_cents < 0:
            logger.critical(
                "Refusing movement for %s: %s -> %s does not match %s of %s",
                movement.account_id,
                movement.balance_before_cents,
                movement.balance_after_cents,
                movement.kind.value,
                movement.amount_cents,
            )
            raise IntegrityViolationError("movement balances do not match its amount")
        return await self.repository.append(movement)

    async def ensure_chain(self, account_id: str, sequence: int, balance_before_cents: int) -> None:
        """Check that a movement about to be appended continues the account's chain."""
        latest = await self.repository.latest_for_account(account_id)
        previous_balance = latest.balance_after_cents if latest else 0
        previous_sequence = latest.sequence if latest else 0
        if previous_sequence + 1 != sequence or previous_balance != balance_before_cents:
            logger.critical(
                "Ledger/log mismatch for %s: log ends at #%s with %s, ledger has #%s from %s",
                account_id,
                previous_sequence,
                previous_balance,
                sequence,
                balance_before_cents,
            )
            raise IntegrityViolationError(f"ledger and movement log disagree for account {account_id}")

    async def get_movement(self, movement_id: str) -> MovementRecord:
        record = await self.repository.get(movement_id)
        if record is None:
            raise MovementNotFoundError(f"movement {movement_id} not found")
        return record

    async def list_movements(self, query: MovementQuery) -> list[MovementRecord]:
        if query.limit <= 0 or query.limit > MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if query.offset < 0:
            raise ValidationError("offset must not be negative")
        if query.since and query.until and query.since > query.until:
            raise ValidationError("since must not be after until")
        return list(await self.repository.query(query))

    async def audit_account(self, account_id: str) -> LedgerAudit:
        """Recompute the account from its log and compare with the stored ledger."""
        if self.wallets is None:
            raise RuntimeError("audit requires a wallet repository")
        snapshot = await self.wallets.get_snapshot(account_id)
        if snapshot is None:
            raise AccountNotFoundError(f"wallet {account_id} not found")

        records = await self.repository.list_for_account(account_id)
        credited = debited = 0
        running = 0
        issues: list[str] = []
        for expected_sequence, record in enumerate(records, start=1):
            if record.sequence != expected_sequence:
                issues.append(f"movement {record.id} has sequence {record.sequence}, expected {expected_sequence}")
            if record.balance_before_cents != running:
                issues.append(
                    f"movement #{record.sequence} starts at {record.balance_before_cents}, previous ended at {running}"
                )
            if record.balance_before_cents + record.signed_amount_cents != record.balance_after_cents:
                issues.append(f"movement #{record.sequence} does not add up")
            if record.kind is MovementKind.CREDIT:
                credited += record.amount_cents
            else:
                debited += record.amount_cents
            running = record.balance_after_cents

        if snapshot.balance_cents != credited - debited:
            issues.append(f"balance {snapshot.balance_cents} != credits {credited} - debits {debited}")
        if snapshot.total_credited_cents != credited:
            issues.append(f"total credited {snapshot.total_credited_cents} != logged {credited}")
        if snapshot.total_debited_cents != debited:
            issues.append(f"total debited {snapshot.total_debited_cents} != logged {debited}")
        if snapshot.movement_count != len(records):
            issues.append(f"movement count {snapshot.movement_count} != logged {len(records)}")

        audit = LedgerAudit(
            account_id=account_id,
            movement_count=len(records),
            credited_cents=credited,
            debited_cents=debited,
            balance_cents=snapshot.balance_cents,
            issues=issues,
        )
        if issues:
            logger.critical("Ledger audit failed for %s: %s", account_id, "; ".join(issues))
        return audit

    async def assert_consistent(self, account_id: str) -> LedgerAudit:
        audit = await self.audit_account(account_id)
        if not audit.consistent:
            raise IntegrityViolationError("; ".join(audit.issues))
        return audit
