"""Repository protocol for provenance artifacts."""

from __future__ import annotations

from typing import Protocol

from .models import ProvenanceInput, ProvenanceRecord, ProvenanceSummary


class ProvenanceRepository(Protocol):
    async def add(
        self,
        *,
        movement_id: str,
        account_id: str,
        verified_by: str,
        item: ProvenanceInput,
    ) -> ProvenanceRecord:
        ...

    async def get_by_movement(self, movement_id: str) -> ProvenanceRecord | None:
        ...

    async def list_for_account(self, account_id: str, *, limit: int, offset: int) -> list[ProvenanceRecord]:
        ...

    async def summarize_account(self, account_id: str) -> ProvenanceSummary:
        ...
