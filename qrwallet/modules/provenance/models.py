"""Domain models for provenance artifacts justifying verified credits."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from qrwallet.core.money import from_cents, multiply_to_cents


class ItemUnit(str, Enum):
    PIECE = "piece"
    KG = "kg"
    UNIT = "unit"
    VERIFICATION = "verification"


class ItemCondition(str, Enum):
    WORKING = "working"
    NON_WORKING = "non-working"
    PARTIALLY_WORKING = "partially-working"
    VERIFIED = "verified"


@dataclass(slots=True)
class ProvenanceInput:
    """Physical-item detail supplied by the verifying officer."""

    item_category: str
    quantity: Decimal
    value_per_unit_cents: int
    unit: ItemUnit = ItemUnit.PIECE
    condition: ItemCondition = ItemCondition.NON_WORKING
    notes: Optional[str] = None

    @property
    def total_value_cents(self) -> int:
        return multiply_to_cents(self.quantity, self.value_per_unit_cents)


@dataclass(slots=True)
class ProvenanceRecord:
    id: str
    movement_id: str
    account_id: str
    item_category: str
    quantity: Decimal
    unit: ItemUnit
    value_per_unit_cents: int
    total_value_cents: int
    condition: ItemCondition
    verified_by: str
    created_at: datetime
    notes: Optional[str] = None

    @property
    def total_value(self) -> Decimal:
        return from_cents(self.total_value_cents)


@dataclass(frozen=True, slots=True)
class ProvenanceSummary:
    account_id: str
    artifact_count: int
    total_value_cents: int
