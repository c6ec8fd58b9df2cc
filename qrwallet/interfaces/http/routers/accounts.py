"""Participant enrollment and read-only account views."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.security import Actor
from qrwallet.interfaces.http.deps import get_current_admin, get_db_session, get_transfer_coordinator
from qrwallet.modules.movements import MovementCategory, MovementKind, MovementLogService, MovementQuery
from qrwallet.modules.provenance import ProvenanceService
from qrwallet.modules.tokens import UNSET
from qrwallet.modules.transfers import TransferCoordinator
from qrwallet.modules.wallets import WalletService
from qrwallet.schemas import (
    AuditResponse,
    EnrollRequest,
    EnrollResponse,
    MovementListResponse,
    MovementResponse,
    ProvenanceListResponse,
    WalletResponse,
)

router = APIRouter()


@router.post("", response_model=EnrollResponse, status_code=status.HTTP_201_CREATED)
async def enroll_account(
    payload: EnrollRequest,
    admin: Actor = Depends(get_current_admin),
    coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
):
    expires_at = payload.expires_at if payload.expires_at is not None else UNSET
    result = await coordinator.enroll(payload.account_id, expires_at)
    return EnrollResponse.from_result(result)


@router.get("/{account_id}/wallet", response_model=WalletResponse)
async def get_wallet(
    account_id: str,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    snapshot = await WalletService.with_session(db).require_snapshot(account_id)
    return WalletResponse.from_snapshot(snapshot)


@router.get("/{account_id}/movements", response_model=MovementListResponse)
async def list_account_movements(
    account_id: str,
    kind: Optional[MovementKind] = None,
    category: Optional[MovementCategory] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 50,
    offset: int = 0,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    await WalletService.with_session(db).require_snapshot(account_id)
    movements = await MovementLogService.with_session(db).list_movements(
        MovementQuery(
            account_id=account_id,
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


@router.get("/{account_id}/audit", response_model=AuditResponse)
async def audit_account(
    account_id: str,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    audit = await MovementLogService.with_session(db).audit_account(account_id)
    return AuditResponse.from_audit(audit)


@router.get("/{account_id}/provenance", response_model=ProvenanceListResponse)
async def list_account_provenance(
    account_id: str,
    limit: int = 50,
    offset: int = 0,
    admin: Actor = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    await WalletService.with_session(db).require_snapshot(account_id)
    service = ProvenanceService.with_session(db)
    records = await service.list_for_account(account_id, limit=limit, offset=offset)
    summary = await service.summarize_account(account_id)
    return ProvenanceListResponse.build(summary, records, limit=limit, offset=offset)
