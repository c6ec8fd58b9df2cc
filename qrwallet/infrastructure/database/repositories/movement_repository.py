"""SQLAlchemy implementation for the movement log.

Only inserts and selects live here; the ORM guards in ``qrwallet.db.guards``
reject any update or delete of a stored movement.
"""

from __future__ import annotations

import json
from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.db.models import WalletMovement
from qrwallet.modules.movements.models import (
    ActorRole,
    MovementCategory,
    MovementKind,
    MovementQuery,
    MovementRecord,
    NewMovement,
)


class SqlMovementRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(self, movement: NewMovement) -> MovementRecord:
        model = WalletMovement(
            account_id=movement.account_id,
            sequence=movement.sequence,
            kind=movement.kind.value,
            amount_cents=movement.amount_cents,
            balance_before_cents=movement.balance_before_cents,
            balance_after_cents=movement.balance_after_cents,
            actor_id=movement.actor_id,
            actor_role=movement.actor_role.value,
            description=movement.description,
            category=movement.category.value,
            meta=json.dumps(movement.metadata, ensure_ascii=False) if movement.metadata is not None else None,
            created_at=movement.created_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def get(self, movement_id: str) -> MovementRecord | None:
        stmt = select(WalletMovement).where(WalletMovement.id == movement_id)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def latest_for_account(self, account_id: str) -> MovementRecord | None:
        stmt = (
            select(WalletMovement)
            .where(WalletMovement.account_id == account_id)
            .order_by(desc(WalletMovement.sequence))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def list_for_account(self, account_id: str) -> Sequence[MovementRecord]:
        stmt = (
            select(WalletMovement)
            .where(WalletMovement.account_id == account_id)
            .order_by(WalletMovement.sequence)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def query(self, query: MovementQuery) -> Sequence[MovementRecord]:
        stmt = select(WalletMovement)
        if query.account_id:
            stmt = stmt.where(WalletMovement.account_id == query.account_id)
        if query.actor_id:
            stmt = stmt.where(WalletMovement.actor_id == query.actor_id)
        if query.category:
            stmt = stmt.where(WalletMovement.category == query.category.value)
        if query.kind:
            stmt = stmt.where(WalletMovement.kind == query.kind.value)
        if query.since:
            stmt = stmt.where(WalletMovement.created_at >= query.since)
        if query.until:
            stmt = stmt.where(WalletMovement.created_at < query.until)
        stmt = (
            stmt.order_by(desc(WalletMovement.created_at), desc(WalletMovement.sequence))
            .offset(query.offset)
            .limit(query.limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    @staticmethod
    def _to_domain(model: WalletMovement) -> MovementRecord:
        return MovementRecord(
            id=model.id,
            account_id=model.account_id,
            sequence=model.sequence,
            kind=MovementKind(model.kind),
            amount_cents=model.amount_cents,
            balance_before_cents=model.balance_before_cents,
            balance_after_cents=model.balance_after_cents,
            actor_id=model.actor_id,
            actor_role=ActorRole(model.actor_role),
            description=model.description,
            category=MovementCategory(model.category),
            created_at=model.created_at,
            metadata=json.loads(model.meta) if model.meta is not None else None,
        )
