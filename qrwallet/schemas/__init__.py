"""Pydantic schemas used by the HTTP adapter.

Money leaves the API as decimal strings. Requests carry either a decimal
string ``amount`` or integer ``amount_cents``; JSON floats are rejected.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from qrwallet.core.money import format_cents
from qrwallet.modules.movements.models import (
    ActorRole,
    LedgerAudit,
    MovementCategory,
    MovementKind,
    MovementRecord,
)
from qrwallet.modules.provenance.models import (
    ItemCondition,
    ItemUnit,
    ProvenanceInput,
    ProvenanceRecord,
    ProvenanceSummary,
)
from qrwallet.modules.tokens.models import AuthorizationToken, ScanMetadata
from qrwallet.modules.transfers.models import EnrollmentResult, PresentedToken, TransferResult
from qrwallet.modules.wallets.models import WalletSnapshot


class AmountRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Optional[StrictStr] = Field(default=None, max_length=32)
    amount_cents: Optional[StrictInt] = None


class WalletResponse(BaseModel):
    account_id: str
    balance: str
    balance_cents: int
    frozen: bool
    total_credited: str
    total_debited: str
    movement_count: int
    last_movement_at: Optional[datetime] = None

    @classmethod
    def from_snapshot(cls, snapshot: WalletSnapshot) -> "WalletResponse":
        return cls(
            account_id=snapshot.account_id,
            balance=format_cents(snapshot.balance_cents),
            balance_cents=snapshot.balance_cents,
            frozen=snapshot.frozen,
            total_credited=format_cents(snapshot.total_credited_cents),
            total_debited=format_cents(snapshot.total_debited_cents),
            movement_count=snapshot.movement_count,
            last_movement_at=snapshot.last_movement_at,
        )


class EnrollRequest(BaseModel):
    account_id: str = Field(..., min_length=1, max_length=64)
    expires_at: Optional[datetime] = None


class EnrollResponse(BaseModel):
    account_id: str
    token: str
    key_id: str
    expires_at: Optional[datetime] = None
    wallet: WalletResponse

    @classmethod
    def from_result(cls, result: EnrollmentResult) -> "EnrollResponse":
        return cls(
            account_id=result.account_id,
            token=result.token,
            key_id=result.key_id,
            expires_at=result.expires_at,
            wallet=WalletResponse.from_snapshot(result.wallet),
        )


class ScanResponse(BaseModel):
    scan_count: int
    last_scanned_at: Optional[datetime] = None
    last_scanned_by: Optional[str] = None

    @classmethod
    def from_metadata(cls, scan: ScanMetadata) -> "ScanResponse":
        return cls(
            scan_count=scan.scan_count,
            last_scanned_at=scan.last_scanned_at,
            last_scanned_by=scan.last_scanned_by,
        )


class PresentTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)


class PresentTokenResponse(BaseModel):
    account_id: str
    wallet: WalletResponse
    scan: ScanResponse
    expires_at: Optional[datetime] = None

    @classmethod
    def from_presented(cls, presented: PresentedToken) -> "PresentTokenResponse":
        return cls(
            account_id=presented.account_id,
            wallet=WalletResponse.from_snapshot(presented.wallet),
            scan=ScanResponse.from_metadata(presented.scan),
            expires_at=presented.expires_at,
        )


class ProvenancePayload(BaseModel):
    item_category: str = Field(..., min_length=1, max_length=100)
    quantity: Decimal = Field(default=Decimal("1"), gt=0, max_digits=12, decimal_places=2)
    value_per_unit_cents: int = Field(..., ge=0)
    unit: ItemUnit = ItemUnit.PIECE
    condition: ItemCondition = ItemCondition.NON_WORKING
    notes: Optional[str] = Field(default=None, max_length=500)

    def to_input(self) -> ProvenanceInput:
        return ProvenanceInput(
            item_category=self.item_category,
            quantity=self.quantity,
            value_per_unit_cents=self.value_per_unit_cents,
            unit=self.unit,
            condition=self.condition,
            notes=self.notes,
        )


class ProvenanceResponse(BaseModel):
    id: str
    movement_id: str
    account_id: str
    item_category: str
    quantity: str
    unit: ItemUnit
    value_per_unit: str
    total_value: str
    condition: ItemCondition
    verified_by: str
    created_at: datetime
    notes: Optional[str] = None

    @classmethod
    def from_record(cls, record: ProvenanceRecord) -> "ProvenanceResponse":
        return cls(
            id=record.id,
            movement_id=record.movement_id,
            account_id=record.account_id,
            item_category=record.item_category,
            quantity=str(record.quantity),
            unit=record.unit,
            value_per_unit=format_cents(record.value_per_unit_cents),
            total_value=format_cents(record.total_value_cents),
            condition=record.condition,
            verified_by=record.verified_by,
            created_at=record.created_at,
            notes=record.notes,
        )


class ProvenanceListResponse(BaseModel):
    account_id: str
    artifact_count: int
    total_value: str
    artifacts: list[ProvenanceResponse] = Field(default_factory=list)
    limit: int
    offset: int

    @classmethod
    def build(
        cls,
        summary: ProvenanceSummary,
        records: list[ProvenanceRecord],
        *,
        limit: int,
        offset: int,
    ) -> "ProvenanceListResponse":
        return cls(
            account_id=summary.account_id,
            artifact_count=summary.artifact_count,
            total_value=format_cents(summary.total_value_cents),
            artifacts=[ProvenanceResponse.from_record(record) for record in records],
            limit=limit,
            offset=offset,
        )


class TransferRequestBody(AmountRequest):
    token: str = Field(..., min_length=1, max_length=128)
    description: str = Field(..., min_length=1, max_length=500)
    category: MovementCategory
    metadata: Optional[dict[str, Any]] = None
    provenance: Optional[ProvenancePayload] = None


class TransferResponse(BaseModel):
    movement_id: str
    account_id: str
    kind: MovementKind
    amount: str
    balance_before: str
    balance_after: str
    sequence: int
    created_at: datetime
    provenance: Optional[ProvenanceResponse] = None

    @classmethod
    def from_result(cls, result: TransferResult) -> "TransferResponse":
        return cls(
            movement_id=result.movement_id,
            account_id=result.account_id,
            kind=result.kind,
            amount=format_cents(result.amount_cents),
            balance_before=format_cents(result.balance_before_cents),
            balance_after=format_cents(result.balance_after_cents),
            sequence=result.sequence,
            created_at=result.created_at,
            provenance=ProvenanceResponse.from_record(result.provenance) if result.provenance else None,
        )


class AdjustRequest(AmountRequest):
    kind: MovementKind
    description: str = Field(..., min_length=1, max_length=500)
    metadata: Optional[dict[str, Any]] = None


class FreezeRequest(BaseModel):
    frozen: bool = True


class TokenLifecycleRequest(BaseModel):
    expires_at: Optional[datetime] = None


class TokenStatusResponse(BaseModel):
    account_id: str
    key_id: str
    active: bool
    scan_count: int
    issued_at: datetime
    expires_at: Optional[datetime] = None
    last_scanned_at: Optional[datetime] = None
    last_scanned_by: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def from_record(cls, record: AuthorizationToken, *, reveal: bool = False) -> "TokenStatusResponse":
        return cls(
            account_id=record.account_id,
            key_id=record.key_id,
            active=record.active,
            scan_count=record.scan_count,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            last_scanned_at=record.last_scanned_at,
            last_scanned_by=record.last_scanned_by,
            token=record.token if reveal else None,
        )


class MovementResponse(BaseModel):
    id: str
    account_id: str
    sequence: int
    kind: MovementKind
    amount: str
    balance_before: str
    balance_after: str
    actor_id: str
    actor_role: ActorRole
    description: str
    category: MovementCategory
    created_at: datetime
    metadata: Optional[dict[str, Any]] = None

    @classmethod
    def from_record(cls, record: MovementRecord) -> "MovementResponse":
        return cls(
            id=record.id,
            account_id=record.account_id,
            sequence=record.sequence,
            kind=record.kind,
            amount=format_cents(record.amount_cents),
            balance_before=format_cents(record.balance_before_cents),
            balance_after=format_cents(record.balance_after_cents),
            actor_id=record.actor_id,
            actor_role=record.actor_role,
            description=record.description,
            category=record.category,
            created_at=record.created_at,
            metadata=record.metadata,
        )


class MovementDetailResponse(BaseModel):
    movement: MovementResponse
    provenance: Optional[ProvenanceResponse] = None


class MovementListResponse(BaseModel):
    movements: list[MovementResponse] = Field(default_factory=list)
    limit: int
    offset: int


class AuditResponse(BaseModel):
    account_id: str
    consistent: bool
    movement_count: int
    total_credited: str
    total_debited: str
    balance: str
    issues: list[str] = Field(default_factory=list)

    @classmethod
    def from_audit(cls, audit: LedgerAudit) -> "AuditResponse":
        return cls(
            account_id=audit.account_id,
            consistent=audit.consistent,
            movement_count=audit.movement_count,
            total_credited=format_cents(audit.credited_cents),
            total_debited=format_cents(audit.debited_cents),
            balance=format_cents(audit.balance_cents),
            issues=list(audit.issues),
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
