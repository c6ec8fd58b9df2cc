"""Repository protocol for authorization tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .models import UNSET, AuthorizationToken


class TokenRepository(Protocol):
    async def get_by_token(self, token: str) -> AuthorizationToken | None:
        ...

    async def get_by_account(self, account_id: str) -> AuthorizationToken | None:
        ...

    async def create(
        self,
        *,
        account_id: str,
        token: str,
        key_id: str,
        issued_at: datetime,
        expires_at: datetime | None,
    ) -> AuthorizationToken:
        ...

    async def record_scan(self, token_id: str, *, scanner_id: str, scanned_at: datetime) -> AuthorizationToken:
        ...

    async def set_active(
        self,
        account_id: str,
        *,
        active: bool,
        expires_at: datetime | None | object = UNSET,
    ) -> AuthorizationToken | None:
        ...

    async def replace(
        self,
        account_id: str,
        *,
        token: str,
        key_id: str,
        issued_at: datetime,
        expires_at: datetime | None,
    ) -> AuthorizationToken | None:
        ...
