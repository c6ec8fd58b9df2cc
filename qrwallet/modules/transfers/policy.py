"""Validation rules applied to every transfer before any state is touched."""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from qrwallet.core.config import TransferSettings
from qrwallet.core.exceptions import ValidationError
from qrwallet.core.money import MAX_CENTS, MoneyInput, format_cents, parse_positive_cents, to_cents, to_decimal
from qrwallet.modules.movements.models import ActorRole, MovementCategory, MovementKind
from qrwallet.modules.provenance.models import ItemCondition, ItemUnit, ProvenanceInput

from .models import TransferRequest

MAX_DESCRIPTION_LENGTH = 500
MAX_NOTES_LENGTH = 500
MAX_ACTOR_ID_LENGTH = 64
MAX_QUANTITY = Decimal("9999999999.99")

# which movement kinds each role may initiate through a token transfer
ROLE_KINDS: dict[ActorRole, frozenset[MovementKind]] = {
    ActorRole.VERIFYING_OFFICER: frozenset({MovementKind.CREDIT}),
    ActorRole.SERVICE_OFFICER: frozenset({MovementKind.DEBIT}),
    ActorRole.ADMIN: frozenset({MovementKind.CREDIT, MovementKind.DEBIT}),
}

CATEGORY_KINDS: dict[MovementCategory, frozenset[MovementKind]] = {
    MovementCategory.VERIFIED_CREDIT: frozenset({MovementKind.CREDIT}),
    MovementCategory.SERVICE: frozenset({MovementKind.DEBIT}),
    MovementCategory.OTHER: frozenset({MovementKind.CREDIT, MovementKind.DEBIT}),
}

PROVENANCE_CATEGORIES = frozenset({MovementCategory.VERIFIED_CREDIT})


def _optional_cents(value: Optional[Decimal]) -> Optional[int]:
    return to_cents(value) if value is not None else None


@dataclass(frozen=True, slots=True)
class TransferPolicy:
    max_credit_cents: Optional[int] = None
    max_debit_cents: Optional[int] = None
    max_adjust_cents: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: TransferSettings) -> "TransferPolicy":
        return cls(
            max_credit_cents=_optional_cents(settings.max_credit_amount),
            max_debit_cents=_optional_cents(settings.max_debit_amount),
            max_adjust_cents=_optional_cents(settings.max_adjust_amount),
        )

    def validate_transfer(
        self,
        *,
        amount: MoneyInput | None,
        amount_cents: int | None,
        kind: MovementKind | str,
        actor_id: str,
        actor_role: ActorRole | str,
        description: str,
        category: MovementCategory | str,
        metadata: Optional[Mapping[str, Any]] = None,
        provenance: Optional[ProvenanceInput] = None,
    ) -> TransferRequest:
        kind = _enum(MovementKind, kind, "kind")
        role = _enum(ActorRole, actor_role, "actor_role")
        category = _enum(MovementCategory, category, "category")
        cents = parse_positive_cents(amount, amount_cents)

        if kind not in ROLE_KINDS.get(role, frozenset()):
            raise ValidationError(f"role {role.value} may not initiate a {kind.value}")
        allowed = CATEGORY_KINDS.get(category)
        if allowed is None:
            raise ValidationError(f"category {category.value} is reserved for administrative adjustments")
        if kind not in allowed:
            raise ValidationError(f"category {category.value} does not allow a {kind.value}")

        cap = self.max_credit_cents if kind is MovementKind.CREDIT else self.max_debit_cents
        _check_cap(cents, cap, kind.value)

        if provenance is not None and category not in PROVENANCE_CATEGORIES:
            raise ValidationError(f"category {category.value} does not take provenance detail")
        if category in PROVENANCE_CATEGORIES:
            provenance = validate_provenance(provenance) if provenance else default_provenance(cents)

        return TransferRequest(
            kind=kind,
            amount_cents=cents,
            actor_id=_actor_id(actor_id),
            actor_role=role,
            description=_description(description),
            category=category,
            metadata=_metadata(metadata),
            provenance=provenance,
        )

    def validate_adjustment(
        self,
        *,
        amount: MoneyInput | None,
        amount_cents: int | None,
        kind: MovementKind | str,
        actor_id: str,
        actor_role: ActorRole | str,
        description: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> TransferRequest:
        kind = _enum(MovementKind, kind, "kind")
        role = _enum(ActorRole, actor_role, "actor_role")
        if role is not ActorRole.ADMIN:
            raise ValidationError("only administrators may adjust a wallet")
        cents = parse_positive_cents(amount, amount_cents)
        _check_cap(cents, self.max_adjust_cents, "adjustment")
        return TransferRequest(
            kind=kind,
            amount_cents=cents,
            actor_id=_actor_id(actor_id),
            actor_role=role,
            description=_description(description),
            category=MovementCategory.ADMIN_ADJUSTMENT,
            metadata=_metadata(metadata),
        )


def default_provenance(amount_cents: int) -> ProvenanceInput:
    """A single verification worth the credited amount."""
    return ProvenanceInput(
        item_category="Verified E-Waste",
        quantity=Decimal("1"),
        value_per_unit_cents=amount_cents,
        unit=ItemUnit.VERIFICATION,
        condition=ItemCondition.VERIFIED,
    )


def validate_provenance(item: ProvenanceInput) -> ProvenanceInput:
    if not item.item_category or not item.item_category.strip():
        raise ValidationError("provenance item_category is required")
    quantity = to_decimal(item.quantity)
    if quantity <= 0 or quantity > MAX_QUANTITY or quantity != quantity.quantize(Decimal("0.01")):
        raise ValidationError("provenance quantity must be positive with at most 2 decimals")
    if isinstance(item.value_per_unit_cents, bool) or not isinstance(item.value_per_unit_cents, int):
        raise ValidationError("provenance value_per_unit_cents must be an integer")
    if item.value_per_unit_cents < 0 or item.value_per_unit_cents > MAX_CENTS:
        raise ValidationError("provenance value per unit is out of range")
    if item.notes and len(item.notes) > MAX_NOTES_LENGTH:
        raise ValidationError(f"provenance notes must be at most {MAX_NOTES_LENGTH} characters")
    validated = ProvenanceInput(
        item_category=item.item_category.strip(),
        quantity=quantity,
        value_per_unit_cents=item.value_per_unit_cents,
        unit=_enum(ItemUnit, item.unit, "unit"),
        condition=_enum(ItemCondition, item.condition, "condition"),
        notes=item.notes,
    )
    if validated.total_value_cents > MAX_CENTS:
        raise ValidationError("provenance total value is too large")
    return validated


def _check_cap(cents: int, cap: Optional[int], label: str) -> None:
    if cap is not None and cents > cap:
        raise ValidationError(f"{label} amount cannot exceed {format_cents(cap)}")


def _enum(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(f"invalid {name}: {value!r}") from exc


def _actor_id(actor_id: str) -> str:
    if not isinstance(actor_id, str) or not actor_id.strip():
        raise ValidationError("actor_id is required")
    if len(actor_id) > MAX_ACTOR_ID_LENGTH:
        raise ValidationError(f"actor_id must be at most {MAX_ACTOR_ID_LENGTH} characters")
    return actor_id.strip()


def _description(description: str) -> str:
    if not isinstance(description, str) or not description.strip():
        raise ValidationError("description is required")
    description = description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"description must be at most {MAX_DESCRIPTION_LENGTH} characters")
    return description


def _metadata(metadata: Optional[Mapping[str, Any]]) -> Optional[dict[str, Any]]:
    if metadata is None:
        return None
    if not isinstance(metadata, Mapping):
        raise ValidationError("metadata must be an object")
    try:
        json.dumps(metadata)
    except (TypeError, ValueError) as exc:
        raise ValidationError("metadata must be JSON serialisable") from exc
    return dict(metadata)
