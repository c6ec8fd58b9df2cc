from datetime import datetime, timezone

import pytest

from qrwallet.core.exceptions import (
    FrozenError,
    InsufficientBalanceError,
    IntegrityViolationError,
    ValidationError,
)
from qrwallet.modules.movements import MovementKind
from qrwallet.modules.wallets import AccountLedger

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _snapshot(ledger: AccountLedger) -> tuple:
    return (
        ledger.balance_cents,
        ledger.total_credited_cents,
        ledger.total_debited_cents,
        ledger.movement_count,
        ledger.last_movement_at,
    )


def test_credit_then_debit_updates_balance_and_totals():
    ledger = AccountLedger(account_id="a")

    change = ledger.credit(2000, NOW)
    assert (change.balance_before_cents, change.balance_after_cents, change.sequence) == (0, 2000, 1)

    change = ledger.debit(500, NOW)
    assert change.kind is MovementKind.DEBIT
    assert (change.balance_before_cents, change.balance_after_cents, change.sequence) == (2000, 1500, 2)

    assert ledger.balance_cents == 1500
    assert ledger.total_credited_cents == 2000
    assert ledger.total_debited_cents == 500
    assert ledger.movement_count == 2
    assert ledger.last_movement_at == NOW


def test_debit_beyond_balance_leaves_state_unchanged():
    ledger = AccountLedger(account_id="a")
    ledger.credit(1000, NOW)
    before = _snapshot(ledger)

    with pytest.raises(InsufficientBalanceError):
        ledger.debit(1001, NOW)

    assert _snapshot(ledger) == before


def test_frozen_wallet_rejects_credit_and_debit():
    ledger = AccountLedger(account_id="a")
    ledger.credit(1000, NOW)
    ledger.set_frozen(True)
    before = _snapshot(ledger)

    with pytest.raises(FrozenError):
        ledger.credit(100, NOW)
    with pytest.raises(FrozenError):
        ledger.debit(100, NOW)
    with pytest.raises(FrozenError):
        ledger.can_debit(100)
    assert _snapshot(ledger) == before

    ledger.set_frozen(False)
    ledger.credit(100, NOW)
    assert ledger.balance_cents == 1100


@pytest.mark.parametrize("amount", [0, -1, 1.5, True, "100"])
def test_amounts_must_be_positive_integer_cents(amount):
    ledger = AccountLedger(account_id="a")
    with pytest.raises(ValidationError):
        ledger.credit(amount, NOW)


def test_adjust_dispatches_on_kind():
    ledger = AccountLedger(account_id="a")
    ledger.adjust(300, MovementKind.CREDIT, NOW)
    ledger.adjust(100, MovementKind.DEBIT, NOW)
    assert ledger.balance_cents == 200
    assert ledger.balance_cents == ledger.total_credited_cents - ledger.total_debited_cents


def test_check_invariants_detects_inconsistent_totals():
    ledger = AccountLedger(account_id="a", balance_cents=100, total_credited_cents=50)
    with pytest.raises(IntegrityViolationError):
        ledger.check_invariants()
