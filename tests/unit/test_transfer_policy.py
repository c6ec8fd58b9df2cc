from decimal import Decimal

import pytest

from qrwallet.core.config import TransferSettings
from qrwallet.core.exceptions import ValidationError
from qrwallet.modules.movements import ActorRole, MovementCategory, MovementKind
from qrwallet.modules.provenance import ItemCondition, ItemUnit, ProvenanceInput
from qrwallet.modules.transfers import TransferPolicy


def _transfer(policy: TransferPolicy, **overrides):
    kwargs = dict(
        amount="20.00",
        amount_cents=None,
        kind=MovementKind.CREDIT,
        actor_id="officer-1",
        actor_role=ActorRole.VERIFYING_OFFICER,
        description="Collected 2 phones",
        category=MovementCategory.VERIFIED_CREDIT,
    )
    kwargs.update(overrides)
    return policy.validate_transfer(**kwargs)


def test_from_settings_converts_caps_to_cents():
    policy = TransferPolicy.from_settings(TransferSettings(max_debit_amount=Decimal("50")))
    assert policy.max_credit_cents == 100000
    assert policy.max_debit_cents == 5000
    assert policy.max_adjust_cents is None


def test_verified_credit_gets_default_provenance():
    request = _transfer(TransferPolicy())
    assert request.amount_cents == 2000
    assert request.provenance is not None
    assert request.provenance.quantity == Decimal("1")
    assert request.provenance.unit is ItemUnit.VERIFICATION
    assert request.provenance.condition is ItemCondition.VERIFIED
    assert request.provenance.value_per_unit_cents == 2000


def test_explicit_provenance_is_validated_and_kept():
    item = ProvenanceInput(item_category=" Laptops ", quantity=Decimal("2.5"), value_per_unit_cents=400)
    request = _transfer(TransferPolicy(), provenance=item)
    assert request.provenance.item_category == "Laptops"
    assert request.provenance.total_value_cents == 1000


def test_strings_are_normalised_to_enums():
    request = _transfer(TransferPolicy(), kind="credit", actor_role="admin", category="other")
    assert request.kind is MovementKind.CREDIT
    assert request.actor_role is ActorRole.ADMIN
    assert request.category is MovementCategory.OTHER
    assert request.provenance is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"actor_role": ActorRole.PARTICIPANT},
        {"kind": MovementKind.DEBIT, "category": MovementCategory.SERVICE},
        {"actor_role": ActorRole.SERVICE_OFFICER},
        {"category": MovementCategory.SERVICE},
        {"category": MovementCategory.ADMIN_ADJUSTMENT},
        {"kind": "refund"},
        {"category": "bonus"},
        {"description": "   "},
        {"description": "x" * 501},
        {"actor_id": ""},
        {"metadata": {"bad": object()}},
        {"metadata": ["not", "a", "mapping"]},
        {"amount": 12.5},
        {"amount": "0.00"},
    ],
)
def test_invalid_transfers_are_rejected(overrides):
    with pytest.raises(ValidationError):
        _transfer(TransferPolicy(), **overrides)


def test_provenance_only_for_verified_credit():
    item = ProvenanceInput(item_category="Phones", quantity=Decimal("1"), value_per_unit_cents=100)
    with pytest.raises(ValidationError):
        _transfer(TransferPolicy(), actor_role=ActorRole.ADMIN, category=MovementCategory.OTHER, provenance=item)


def test_credit_cap_is_inclusive():
    policy = TransferPolicy(max_credit_cents=100000)
    assert _transfer(policy, amount="1000.00").amount_cents == 100000
    with pytest.raises(ValidationError):
        _transfer(policy, amount="1000.01")


def test_debit_cap_applies_to_debits_only():
    policy = TransferPolicy(max_debit_cents=500)
    with pytest.raises(ValidationError):
        _transfer(
            policy,
            amount="5.01",
            kind=MovementKind.DEBIT,
            actor_role=ActorRole.SERVICE_OFFICER,
            category=MovementCategory.SERVICE,
        )
    assert _transfer(policy, amount="5.01").amount_cents == 501


def test_adjustment_requires_admin_and_uses_reserved_category():
    policy = TransferPolicy(max_adjust_cents=1000)
    request = policy.validate_adjustment(
        amount=None,
        amount_cents=1000,
        kind="debit",
        actor_id="admin-1",
        actor_role=ActorRole.ADMIN,
        description="Correction",
    )
    assert request.category is MovementCategory.ADMIN_ADJUSTMENT
    assert request.kind is MovementKind.DEBIT

    with pytest.raises(ValidationError):
        policy.validate_adjustment(
            amount="10.01",
            amount_cents=None,
            kind="credit",
            actor_id="admin-1",
            actor_role=ActorRole.ADMIN,
            description="Correction",
        )
    with pytest.raises(ValidationError):
        policy.validate_adjustment(
            amount="1.00",
            amount_cents=None,
            kind="credit",
            actor_id="officer-1",
            actor_role=ActorRole.VERIFYING_OFFICER,
            description="Correction",
        )
