"""Participant views of their own wallet, movements, provenance and token.

The bearer token's subject is the participant's account id.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.container import ApplicationContainer
from qrwallet.core.security import Actor
from qrwallet.interfaces.http.deps import get_app_container, get_db_session, get_participant
from qrwallet.modules.movements import MovementCategory, MovementKind, MovementLogService, MovementQuery
from qrwallet.modules.provenance import ProvenanceService
from qrwallet.modules.tokens import TokenAuthority
from qrwallet.modules.wallets import WalletService
from qrwallet.schemas import (
    MovementListResponse,
    MovementResponse,
    ProvenanceListResponse,
    TokenStatusResponse,
    WalletResponse,
)

router = APIRouter()


@router.get("/wallet", response_model=WalletResponse)
async def get_own_wallet(
    participant: Actor = Depends(get_participant),
    db: AsyncSession = Depends(get_db_session),
):
    snapshot = await WalletService.with_session(db).require_snapshot(participant.actor_id)
    return WalletResponse.from_snapshot(snapshot)


@router.get("/movements", response_model=MovementListResponse)
async def list_own_movements(
    kind: Optional[MovementKind] = None,
    category: Optional[MovementCategory] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 20,
    offset: int = 0,
    participant: Actor = Depends(get_participant),
    db: AsyncSession = Depends(get_db_session),
):
    await WalletService.with_session(db).require_snapshot(participant.actor_id)
    movements = await MovementLogService.with_session(db).list_movements(
        MovementQuery(
            account_id=participant.actor_id,
            kind=kind,
            category=category,
            since=since,
            until=until,
            limit=limit,
            offset=offset,
        )
    )
    return MovementListResponse(
        movements=[MovementResponse.from_record(item) for item in movements],
        limit=limit,
        offset=offset,
    )


@router.get("/provenance", response_model=ProvenanceListResponse)
async def list_own_provenance(
    limit: int = 20,
    offset: int = 0,
    participant: Actor = Depends(get_participant),
    db: AsyncSession = Depends(get_db_session),
):
    await WalletService.with_session(db).require_snapshot(participant.actor_id)
    service = ProvenanceService.with_session(db)
    records = await service.list_for_account(participant.actor_id, limit=limit, offset=offset)
    summary = await service.summarize_account(participant.actor_id)
    return ProvenanceListResponse.build(summary, records, limit=limit, offset=offset)


@router.get("/token", response_model=TokenStatusResponse)
async def get_own_token(
    participant: Actor = Depends(get_participant),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
):
    authority = TokenAuthority.with_session(db, container.keyring, container.default_token_ttl)
    record = await authority.get_for_account(participant.actor_id)
    # revealed to its own holder only
    return TokenStatusResponse.from_record(record, reveal=True)
