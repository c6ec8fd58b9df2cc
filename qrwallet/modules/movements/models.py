"""Domain models for the movement log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from qrwallet.core.money import from_cents


class MovementKind(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class MovementCategory(str, Enum):
    VERIFIED_CREDIT = "verified_credit"
    SERVICE = "service"
    ADMIN_ADJUSTMENT = "admin_adjustment"
    OTHER = "other"


class ActorRole(str, Enum):
    PARTICIPANT = "participant"
    VERIFYING_OFFICER = "verifying_officer"
    SERVICE_OFFICER = "service_officer"
    ADMIN = "admin"


@dataclass(slots=True)
class NewMovement:
    account_id: str
    sequence: int
    kind: MovementKind
    amount_cents: int
    balance_before_cents: int
    balance_after_cents: int
    actor_id: str
    actor_role: ActorRole
    description: str
    category: MovementCategory
    created_at: datetime
    metadata: Optional[dict[str, Any]] = None


@dataclass(slots=True)
class MovementRecord:
    id: str
    account_id: str
    sequence: int
    kind: MovementKind
    amount_cents: int
    balance_before_cents: int
    balance_after_cents: int
    actor_id: str
    actor_role: ActorRole
    description: str
    category: MovementCategory
    created_at: datetime
    metadata: Optional[dict[str, Any]] = None

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)

    @property
    def balance_before(self) -> Decimal:
        return from_cents(self.balance_before_cents)

    @property
    def balance_after(self) -> Decimal:
        return from_cents(self.balance_after_cents)

    @property
    def signed_amount_cents(self) -> int:
        return self.amount_cents if self.kind is MovementKind.CREDIT else -self.amount_cents


@dataclass(slots=True)
class MovementQuery:
    """Filters for read-only projections over the log. Results are newest first."""

    account_id: Optional[str] = None
    actor_id: Optional[str] = None
    category: Optional[MovementCategory] = None
    kind: Optional[MovementKind] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: int = 50
    offset: int = 0


@dataclass(slots=True)
class LedgerAudit:
    account_id: str
    movement_count: int
    credited_cents: int
    debited_cents: int
    balance_cents: int
    issues: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.issues
