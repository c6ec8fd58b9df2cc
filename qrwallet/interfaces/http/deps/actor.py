"""Caller identity and role guards."""

from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from qrwallet.core.container import ApplicationContainer
from qrwallet.core.security import Actor, decode_access_token
from qrwallet.modules.movements.models import ActorRole

from .database import get_app_container

security = HTTPBearer()


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    container: ApplicationContainer = Depends(get_app_container),
) -> Actor:
    return decode_access_token(credentials.credentials, container.settings)


def require_roles(*roles: ActorRole) -> Callable[..., Awaitable[Actor]]:
    allowed = frozenset(roles)

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="role not permitted")
        return actor

    return dependency


get_current_admin = require_roles(ActorRole.ADMIN)
get_participant = require_roles(ActorRole.PARTICIPANT)
get_token_scanner = require_roles(ActorRole.VERIFYING_OFFICER, ActorRole.SERVICE_OFFICER, ActorRole.ADMIN)
get_crediting_officer = require_roles(ActorRole.VERIFYING_OFFICER, ActorRole.ADMIN)
get_debiting_officer = require_roles(ActorRole.SERVICE_OFFICER, ActorRole.ADMIN)


__all__ = [
    "get_current_actor",
    "get_current_admin",
    "get_crediting_officer",
    "get_debiting_officer",
    "get_participant",
    "get_token_scanner",
    "require_roles",
]
