"""Token-authorized credits and debits."""
from fastapi import APIRouter, Depends

from qrwallet.core.security import Actor
from qrwallet.interfaces.http.deps import (
    get_crediting_officer,
    get_debiting_officer,
    get_transfer_coordinator,
)
from qrwallet.modules.movements import MovementKind
from qrwallet.modules.transfers import TransferCoordinator
from qrwallet.schemas import TransferRequestBody, TransferResponse

router = APIRouter()


async def _transfer(
    kind: MovementKind,
    payload: TransferRequestBody,
    actor: Actor,
    coordinator: TransferCoordinator,
) -> TransferResponse:
    result = await coordinator.transfer(
        payload.token,
        payload.amount,
        kind,
        actor.actor_id,
        actor.role,
        payload.description,
        payload.category,
        metadata=payload.metadata,
        provenance=payload.provenance.to_input() if payload.provenance else None,
        amount_cents=payload.amount_cents,
    )
    return TransferResponse.from_result(result)


@router.post("/credit", response_model=TransferResponse)
async def credit(
    payload: TransferRequestBody,
    actor: Actor = Depends(get_crediting_officer),
    coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
):
    return await _transfer(MovementKind.CREDIT, payload, actor, coordinator)


@router.post("/debit", response_model=TransferResponse)
async def debit(
    payload: TransferRequestBody,
    actor: Actor = Depends(get_debiting_officer),
    coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
):
    return await _transfer(MovementKind.DEBIT, payload, actor, coordinator)
