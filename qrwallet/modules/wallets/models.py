"""Domain models for wallet accounts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from qrwallet.core.exceptions import (
    FrozenError,
    InsufficientBalanceError,
    IntegrityViolationError,
    ValidationError,
)
from qrwallet.core.money import format_cents, from_cents
from qrwallet.modules.movements.models import MovementKind


@dataclass(slots=True)
class WalletSnapshot:
    account_id: str
    balance_cents: int
    frozen: bool
    total_credited_cents: int
    total_debited_cents: int
    movement_count: int
    last_movement_at: Optional[datetime]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)


@dataclass(frozen=True, slots=True)
class BalanceChange:
    kind: MovementKind
    amount_cents: int
    balance_before_cents: int
    balance_after_cents: int
    sequence: int


@dataclass(slots=True)
class AccountLedger:
    """Mutable balance state of one account.

    Callers must hold the account lock for as long as they work with an
    instance. Each successful ``credit``/``debit`` corresponds to exactly one
    movement and advances ``movement_count``, which is the sequence number of
    that movement.
    """

    account_id: str
    balance_cents: int = 0
    frozen: bool = False
    total_credited_cents: int = 0
    total_debited_cents: int = 0
    movement_count: int = 0
    last_movement_at: Optional[datetime] = None
    # row version read from storage; a save only succeeds against this version
    version: int = 0

    def can_debit(self, amount_cents: int) -> None:
        _check_amount(amount_cents)
        if self.frozen:
            raise FrozenError(f"wallet {self.account_id} is frozen")
        if self.balance_cents < amount_cents:
            raise InsufficientBalanceError(
                f"balance {format_cents(self.balance_cents)} is below {format_cents(amount_cents)}"
            )

    def credit(self, amount_cents: int, now: datetime) -> BalanceChange:
        _check_amount(amount_cents)
        if self.frozen:
            raise FrozenError(f"wallet {self.account_id} is frozen")
        before = self.balance_cents
        self.balance_cents += amount_cents
        self.total_credited_cents += amount_cents
        return self._record(MovementKind.CREDIT, amount_cents, before, now)

    def debit(self, amount_cents: int, now: datetime) -> BalanceChange:
        self.can_debit(amount_cents)
        before = self.balance_cents
        self.balance_cents -= amount_cents
        self.total_debited_cents += amount_cents
        return self._record(MovementKind.DEBIT, amount_cents, before, now)

    def adjust(self, amount_cents: int, kind: MovementKind, now: datetime) -> BalanceChange:
        if kind is MovementKind.CREDIT:
            return self.credit(amount_cents, now)
        return self.debit(amount_cents, now)

    def set_frozen(self, frozen: bool) -> None:
        self.frozen = bool(frozen)

    def check_invariants(self) -> None:
        if self.balance_cents < 0:
            raise IntegrityViolationError(f"wallet {self.account_id} balance is negative")
        if self.balance_cents != self.total_credited_cents - self.total_debited_cents:
            raise IntegrityViolationError(f"wallet {self.account_id} balance does not match its totals")

    def _record(self, kind: MovementKind, amount_cents: int, before: int, now: datetime) -> BalanceChange:
        self.movement_count += 1
        self.last_movement_at = now
        self.check_invariants()
        return BalanceChange(
            kind=kind,
            amount_cents=amount_cents,
            balance_before_cents=before,
            balance_after_cents=self.balance_cents,
            sequence=self.movement_count,
        )


def _check_amount(amount_cents: int) -> None:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int) or amount_cents <= 0:
        raise ValidationError("amount must be a positive number of cents")
