"""SQLAlchemy implementation for authorization tokens"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.db.models import AuthorizationToken as TokenModel
from qrwallet.modules.tokens.models import UNSET, AuthorizationToken


class SqlTokenRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_token(self, token: str) -> AuthorizationToken | None:
        stmt = select(TokenModel).where(TokenModel.token == token)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def get_by_account(self, account_id: str) -> AuthorizationToken | None:
        model = await self._get_model(account_id)
        return self._to_domain(model) if model else None

    async def create(
        self,
        *,
        account_id: str,
        token: str,
        key_id: str,
        issued_at: datetime,
        expires_at: datetime | None,
    ) -> AuthorizationToken:
        model = TokenModel(
            account_id=account_id,
            token=token,
            key_id=key_id,
            active=True,
            scan_count=0,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def record_scan(self, token_id: str, *, scanner_id: str, scanned_at: datetime) -> AuthorizationToken:
        # increment in SQL so concurrent presentations never lose a scan
        stmt = (
            update(TokenModel)
            .where(TokenModel.id == token_id)
            .values(
                scan_count=TokenModel.scan_count + 1,
                last_scanned_at=scanned_at,
                last_scanned_by=scanner_id,
            )
            .execution_options(synchronize_session="fetch")
            .returning(TokenModel)
        )
        result = await self.session.execute(stmt)
        return self._to_domain(result.scalars().one())

    async def set_active(
        self,
        account_id: str,
        *,
        active: bool,
        expires_at: datetime | None | object = UNSET,
    ) -> AuthorizationToken | None:
        model = await self._get_model(account_id)
        if model is None:
            return None
        model.active = active
        if expires_at is not UNSET:
            model.expires_at = expires_at
        await self.session.flush()
        return self._to_domain(model)

    async def replace(
        self,
        account_id: str,
        *,
        token: str,
        key_id: str,
        issued_at: datetime,
        expires_at: datetime | None,
    ) -> AuthorizationToken | None:
        model = await self._get_model(account_id)
        if model is None:
            return None
        model.token = token
        model.key_id = key_id
        model.issued_at = issued_at
        model.expires_at = expires_at
        model.active = True
        model.scan_count = 0
        model.last_scanned_at = None
        model.last_scanned_by = None
        await self.session.flush()
        return self._to_domain(model)

    async def _get_model(self, account_id: str) -> TokenModel | None:
        stmt = select(TokenModel).where(TokenModel.account_id == account_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    def _to_domain(model: TokenModel) -> AuthorizationToken:
        return AuthorizationToken(
            id=model.id,
            account_id=model.account_id,
            key_id=model.key_id,
            active=bool(model.active),
            scan_count=model.scan_count,
            issued_at=model.issued_at,
            token=model.token,
            expires_at=model.expires_at,
            last_scanned_at=model.last_scanned_at,
            last_scanned_by=model.last_scanned_by,
        )
