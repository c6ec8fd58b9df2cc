"""Repository protocol for the append-only movement log."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import MovementQuery, MovementRecord, NewMovement


class MovementRepository(Protocol):
    async def append(self, movement: NewMovement) -> MovementRecord:
        ...

    async def get(self, movement_id: str) -> MovementRecord | None:
        ...

    async def latest_for_account(self, account_id: str) -> MovementRecord | None:
        ...

    async def list_for_account(self, account_id: str) -> Sequence[MovementRecord]:
        ...

    async def query(self, query: MovementQuery) -> Sequence[MovementRecord]:
        ...
