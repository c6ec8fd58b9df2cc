"""JWT helpers for officers and administrators calling the API."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError, jwt

from qrwallet.core.config import Settings, get_settings
from qrwallet.modules.movements.models import ActorRole


@dataclass(frozen=True, slots=True)
class Actor:
    actor_id: str
    role: ActorRole


def create_access_token(
    actor_id: str,
    role: ActorRole | str,
    expires_delta: Optional[timedelta] = None,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": actor_id,
        "role": ActorRole(role).value,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Actor:
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="could not validate credentials") from exc

    actor_id = payload.get("sub")
    role = payload.get("role")
    if not actor_id or not role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="could not validate credentials")
    try:
        return Actor(actor_id=actor_id, role=ActorRole(role))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unknown role") from exc


__all__ = ["Actor", "create_access_token", "decode_access_token"]
