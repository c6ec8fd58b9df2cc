"""Administrative endpoints: freezing, adjustments, token lifecycle and movement lookups."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.container import ApplicationContainer
from qrwallet.core.security import Actor
from qrwallet.interfaces.http.deps import (
    get_app_container,
    get_current_admin,
    get_db_session,
    get_transfer_coordinator,
)
from qrwallet.modules.movements import MovementCategory, MovementKind, MovementLogService, MovementQuery
from qrwallet.modules.provenance import ProvenanceService
from qrwallet.modules.tokens import UNSET, TokenAuthority
from qrwallet.modules.transfers import TransferCoordinator
from qrwallet.schemas import (
    AdjustRequest,
    FreezeRequest,
    MovementDetailResponse,
    MovementListResponse,
    MovementResponse,
    ProvenanceResponse,
    TokenLifecycleRequest,
    TokenStatusResponse,
    TransferResponse,
    WalletResponse,
)

router = APIRouter()


def _token_authority(db: AsyncSession, container: ApplicationContainer) -> TokenAuthority:
    return TokenAuthority.with_session(db, container.keyring, container.default_token_ttl)


def _expires_at(payload: Optional[TokenLifecycleRequest]):
    if payload is None or payload.expires_at is None:
        return UNSET
    return payload.expires_at


@router.post("/accounts/{account_id}/freeze", response_model=WalletResponse)
async def freeze_account(
    account_id: str,
    payload: FreezeRequest,
    admin: Actor = Depends(get_current_admin),
    coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
):
    snapshot = await coordinator.set_frozen(account_id, payload.frozen)
    return WalletResponse.from_snapshot(snapshot)


@router.post("/accounts/{account_id}/adjust", response_model=TransferResponse)
async def adjust_account(
    account_id: str,
    payload: AdjustRequest,
    admin: Actor = Depends(get_current_admin),
    coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
):
    result = await coordinator.adjust(
        account_id,
        payload.amount,
        payload.kind,
        admin.actor_id,
        payload.description,
        admin.role,
        payload.metadata,
        amount_cents=payload.amount_cents,
    )
    return TransferResponse.from_result(result)


@router.get("/accounts/{account_id}/token", response_model=TokenStatusResponse)
async def get_token_status(
    account_id: str,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
):
    record = await _token_authority(db, container).get_for_account(account_id)
    return TokenStatusResponse.from_record(record)


@router.post("/accounts/{account_id}/token/deactivate", response_model=TokenStatusResponse)
async def deactivate_token(
    account_id: str,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
):
    record = await _token_authority(db, container).deactivate(account_id)
    await db.commit()
    return TokenStatusResponse.from_record(record)


@router.post("/accounts/{account_id}/token/reactivate", response_model=TokenStatusResponse)
async def reactivate_token(
    account_id: str,
    payload: Optional[TokenLifecycleRequest] = None,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
):
    record = await _token_authority(db, container).reactivate(account_id, _expires_at(payload))
    await db.commit()
    return TokenStatusResponse.from_record(record)


@router.post("/accounts/{account_id}/token/reissue", response_model=TokenStatusResponse)
async def reissue_token(
    account_id: str,
    payload: Optional[TokenLifecycleRequest] = None,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
):
    record = await _token_authority(db, container).reissue(account_id, _expires_at(payload))
    await db.commit()
    return TokenStatusResponse.from_record(record, reveal=True)


@router.get("/movements", response_model=MovementListResponse)
async def search_movements(
    account_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    kind: Optional[MovementKind] = None,
    category: Optional[MovementCategory] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 50,
    offset: int = 0,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    movements = await MovementLogService.with_session(db).list_movements(
        MovementQuery(
            account_id=account_id,
            actor_id=actor_id,
            category=category,
            kind=kind,
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


@router.get("/movements/{movement_id}", response_model=MovementDetailResponse)
async def get_movement(
    movement_id: str,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    movement = await MovementLogService.with_session(db).get_movement(movement_id)
    artifact = await ProvenanceService.with_session(db).get_for_movement(movement_id)
    return MovementDetailResponse(
        movement=MovementResponse.from_record(movement),
        provenance=ProvenanceResponse.from_record(artifact) if artifact else None,
    )
