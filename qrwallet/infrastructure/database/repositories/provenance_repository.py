"""SQLAlchemy implementation for provenance artifacts"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.money import quantize
from qrwallet.db.models import ProvenanceArtifact, WalletMovement
from qrwallet.modules.provenance.models import (
    ItemCondition,
    ItemUnit,
    ProvenanceInput,
    ProvenanceRecord,
    ProvenanceSummary,
)


class SqlProvenanceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(
        self,
        *,
        movement_id: str,
        account_id: str,
        verified_by: str,
        item: ProvenanceInput,
    ) -> ProvenanceRecord:
        model = ProvenanceArtifact(
            movement_id=movement_id,
            account_id=account_id,
            item_category=item.item_category,
            quantity=item.quantity,
            unit=item.unit.value,
            value_per_unit_cents=item.value_per_unit_cents,
            total_value_cents=item.total_value_cents,
            condition=item.condition.value,
            verified_by=verified_by,
            notes=item.notes,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def get_by_movement(self, movement_id: str) -> ProvenanceRecord | None:
        stmt = select(ProvenanceArtifact).where(ProvenanceArtifact.movement_id == movement_id)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def list_for_account(self, account_id: str, *, limit: int, offset: int) -> list[ProvenanceRecord]:
        stmt = (
            select(ProvenanceArtifact)
            .join(WalletMovement, WalletMovement.id == ProvenanceArtifact.movement_id)
            .where(ProvenanceArtifact.account_id == account_id)
            .order_by(WalletMovement.sequence.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def summarize_account(self, account_id: str) -> ProvenanceSummary:
        stmt = select(
            func.count(ProvenanceArtifact.id),
            func.coalesce(func.sum(ProvenanceArtifact.total_value_cents), 0),
        ).where(ProvenanceArtifact.account_id == account_id)
        count, total = (await self.session.execute(stmt)).one()
        return ProvenanceSummary(account_id=account_id, artifact_count=count, total_value_cents=int(total))

    @staticmethod
    def _to_domain(model: ProvenanceArtifact) -> ProvenanceRecord:
        return ProvenanceRecord(
            id=model.id,
            movement_id=model.movement_id,
            account_id=model.account_id,
            item_category=model.item_category,
            quantity=quantize(Decimal(str(model.quantity))),
            unit=ItemUnit(model.unit),
            value_per_unit_cents=model.value_per_unit_cents,
            total_value_cents=model.total_value_cents,
            condition=ItemCondition(model.condition),
            verified_by=model.verified_by,
            created_at=model.created_at,
            notes=model.notes,
        )
