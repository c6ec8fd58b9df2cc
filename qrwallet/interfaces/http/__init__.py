"""FastAPI adapter for the wallet ledger."""
from fastapi import APIRouter

from qrwallet.interfaces.http.routers import accounts, admin, me, tokens, transfers


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
    router.include_router(tokens.router, prefix="/tokens", tags=["tokens"])
    router.include_router(transfers.router, prefix="/transfers", tags=["transfers"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    router.include_router(me.router, prefix="/me", tags=["me"])
    return router


__all__ = [
    "create_api_router",
]
