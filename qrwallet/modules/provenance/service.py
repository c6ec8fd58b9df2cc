"""Read side of provenance artifacts recorded with verified credits."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.exceptions import ValidationError

from .models import ProvenanceRecord, ProvenanceSummary
from .repository import ProvenanceRepository

MAX_PAGE_SIZE = 200


@dataclass(slots=True)
class ProvenanceService:
    repository: ProvenanceRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ProvenanceService":
        # imported late, the repository depends on this package's models
        from qrwallet.infrastructure.database.repositories.provenance_repository import SqlProvenanceRepository

        return cls(SqlProvenanceRepository(session))

    async def list_for_account(self, account_id: str, *, limit: int = 50, offset: int = 0) -> list[ProvenanceRecord]:
        """Artifacts of one account, newest credit first."""
        if limit <= 0 or limit > MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValidationError("offset must not be negative")
        return await self.repository.list_for_account(account_id, limit=limit, offset=offset)

    async def summarize_account(self, account_id: str) -> ProvenanceSummary:
        return await self.repository.summarize_account(account_id)

    async def get_for_movement(self, movement_id: str) -> ProvenanceRecord | None:
        return await self.repository.get_by_movement(movement_id)
