"""Token presentation by officers at a collection or service point."""
from fastapi import APIRouter, Depends

from qrwallet.core.security import Actor
from qrwallet.interfaces.http.deps import get_token_scanner, get_transfer_coordinator
from qrwallet.modules.transfers import TransferCoordinator
from qrwallet.schemas import PresentTokenRequest, PresentTokenResponse

router = APIRouter()


@router.post("/present", response_model=PresentTokenResponse)
async def present_token(
    payload: PresentTokenRequest,
    actor: Actor = Depends(get_token_scanner),
    coordinator: TransferCoordinator = Depends(get_transfer_coordinator),
):
    presented = await coordinator.present_token(payload.token, actor.actor_id)
    return PresentTokenResponse.from_presented(presented)
