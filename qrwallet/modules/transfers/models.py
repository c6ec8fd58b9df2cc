"""Domain models for transfers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from qrwallet.core.money import from_cents
from qrwallet.modules.movements.models import ActorRole, MovementCategory, MovementKind
from qrwallet.modules.provenance.models import ProvenanceInput, ProvenanceRecord
from qrwallet.modules.tokens.models import ScanMetadata
from qrwallet.modules.wallets.models import WalletSnapshot


class TransferState(str, Enum):
    RECEIVED = "received"
    TOKEN_RESOLVED = "token_resolved"
    TOKEN_VERIFIED = "token_verified"
    LOCKED = "locked"
    MUTATED = "mutated"
    LOGGED = "logged"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass(slots=True)
class TransferRequest:
    """A validated, normalised transfer or adjustment."""

    kind: MovementKind
    amount_cents: int
    actor_id: str
    actor_role: ActorRole
    description: str
    category: MovementCategory
    metadata: Optional[dict[str, Any]] = None
    provenance: Optional[ProvenanceInput] = None


@dataclass(slots=True)
class TransferResult:
    movement_id: str
    account_id: str
    kind: MovementKind
    amount_cents: int
    balance_before_cents: int
    balance_after_cents: int
    sequence: int
    created_at: datetime
    state: TransferState = TransferState.COMMITTED
    provenance: Optional[ProvenanceRecord] = None

    @property
    def balance_after(self) -> Decimal:
        return from_cents(self.balance_after_cents)

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)


@dataclass(slots=True)
class EnrollmentResult:
    account_id: str
    token: str
    key_id: str
    expires_at: Optional[datetime]
    wallet: WalletSnapshot


@dataclass(slots=True)
class PresentedToken:
    account_id: str
    wallet: WalletSnapshot
    scan: ScanMetadata
    expires_at: Optional[datetime] = None
