"""Token authority: issues, resolves and verifies participant tokens and tracks scans.

A verified token is not consumed by a scan or a transfer. Presenting the same
token again is accepted for as long as it stays active and unexpired, so one
token can authorize any number of transfers; the per-transfer amount caps of
the transfer policy are the only limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.crypto import DerivedToken, TokenKeyring
from qrwallet.core.exceptions import (
    AccountNotFoundError,
    InvalidTokenError,
    TokenExpiredError,
    TokenInactiveError,
    ValidationError,
)

from .models import UNSET, AuthorizationToken
from .repository import TokenRepository

logger = logging.getLogger(__name__)

MAX_TOKEN_LENGTH = 128


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class TokenAuthority:
    repository: TokenRepository
    keyring: TokenKeyring
    default_ttl: Optional[timedelta] = None
    clock: Callable[[], datetime] = field(default=utc_now)

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        keyring: TokenKeyring,
        default_ttl: Optional[timedelta] = None,
    ) -> "TokenAuthority":
        # imported late, the repository depends on this package's models
        from qrwallet.infrastructure.database.repositories.token_repository import SqlTokenRepository

        return cls(SqlTokenRepository(session), keyring, default_ttl)

    def issue(self, account_id: str) -> DerivedToken:
        """Derive a fresh token for ``account_id`` with the active key."""
        return self.keyring.derive(account_id, self.clock())

    async def create_for_account(
        self,
        account_id: str,
        expires_at: datetime | None | object = UNSET,
    ) -> AuthorizationToken:
        derived = self.issue(account_id)
        issued_at = self.clock()
        record = await self.repository.create(
            account_id=account_id,
            token=derived.value,
            key_id=derived.key_id,
            issued_at=issued_at,
            expires_at=self._expiry(issued_at, expires_at),
        )
        logger.info("Issued token for %s with key %s", account_id, derived.key_id)
        return record

    async def resolve(self, token: str) -> AuthorizationToken:
        if not isinstance(token, str) or not token.strip() or len(token) > MAX_TOKEN_LENGTH:
            raise InvalidTokenError("invalid token")
        record = await self.repository.get_by_token(token.strip())
        if record is None:
            raise InvalidTokenError("invalid token")
        return record

    def verify(self, record: AuthorizationToken, now: Optional[datetime] = None) -> None:
        if not record.active:
            raise TokenInactiveError(f"token for {record.account_id} is inactive")
        if record.is_expired(now or self.clock()):
            raise TokenExpiredError(f"token for {record.account_id} has expired")

    async def record_scan(self, record: AuthorizationToken, scanner_id: str) -> AuthorizationToken:
        if not scanner_id:
            raise ValidationError("scanner_id is required")
        updated = await self.repository.record_scan(record.id, scanner_id=scanner_id, scanned_at=self.clock())
        logger.debug("Token for %s scanned by %s (%s scans)", updated.account_id, scanner_id, updated.scan_count)
        return updated

    async def present(self, token: str, scanner_id: str) -> AuthorizationToken:
        """Resolve, verify and then record the scan; a failed check records nothing."""
        record = await self.resolve(token)
        self.verify(record)
        return await self.record_scan(record, scanner_id)

    async def get_for_account(self, account_id: str) -> AuthorizationToken:
        record = await self.repository.get_by_account(account_id)
        if record is None:
            raise AccountNotFoundError(f"no token for account {account_id}")
        return record

    async def deactivate(self, account_id: str) -> AuthorizationToken:
        record = await self.repository.set_active(account_id, active=False)
        if record is None:
            raise AccountNotFoundError(f"no token for account {account_id}")
        logger.info("Deactivated token for %s", account_id)
        return record

    async def reactivate(
        self,
        account_id: str,
        expires_at: datetime | None | object = UNSET,
    ) -> AuthorizationToken:
        record = await self.repository.set_active(
            account_id,
            active=True,
            expires_at=self._check_future(expires_at),
        )
        if record is None:
            raise AccountNotFoundError(f"no token for account {account_id}")
        logger.info("Reactivated token for %s", account_id)
        return record

    async def reissue(
        self,
        account_id: str,
        expires_at: datetime | None | object = UNSET,
    ) -> AuthorizationToken:
        """Replace the account's token with a fresh one; the old string stops resolving."""
        derived = self.issue(account_id)
        issued_at = self.clock()
        record = await self.repository.replace(
            account_id,
            token=derived.value,
            key_id=derived.key_id,
            issued_at=issued_at,
            expires_at=self._expiry(issued_at, expires_at),
        )
        if record is None:
            raise AccountNotFoundError(f"no token for account {account_id}")
        logger.info("Reissued token for %s with key %s", account_id, derived.key_id)
        return record

    def _expiry(self, issued_at: datetime, expires_at: datetime | None | object) -> datetime | None:
        if expires_at is UNSET:
            return issued_at + self.default_ttl if self.default_ttl else None
        return self._check_future(expires_at)

    def _check_future(self, expires_at: datetime | None | object) -> datetime | None | object:
        if expires_at is UNSET or expires_at is None:
            return expires_at
        if not isinstance(expires_at, datetime):
            raise ValidationError("expires_at must be a datetime")
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= self.clock():
            raise ValidationError("expires_at must be in the future")
        return expires_at
