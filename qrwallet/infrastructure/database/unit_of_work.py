"""SQLAlchemy unit of work: one session, one transaction, all-or-nothing."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from qrwallet.core.exceptions import (
    ConcurrentModificationError,
    IntegrityViolationError,
    LedgerError,
    StorageFailureError,
)
from qrwallet.db.guards import is_immutable_row_error

from .repositories import (
    SqlMovementRepository,
    SqlProvenanceRepository,
    SqlTokenRepository,
    SqlWalletRepository,
)

logger = logging.getLogger(__name__)


def translate_storage_error(exc: SQLAlchemyError) -> LedgerError:
    if is_immutable_row_error(exc):
        logger.critical("Database refused a change to an immutable ledger row: %s", exc)
        return IntegrityViolationError("movement log rows are immutable")
    if isinstance(exc, (StaleDataError, IntegrityError)):
        return ConcurrentModificationError(f"concurrent write detected: {exc.__class__.__name__}")
    return StorageFailureError(f"storage failure: {exc.__class__.__name__}")


class SqlUnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlUnitOfWork":
        self.session = self._session_factory()
        self.wallets = SqlWalletRepository(self.session)
        self.movements = SqlMovementRepository(self.session)
        self.tokens = SqlTokenRepository(self.session)
        self.provenance = SqlProvenanceRepository(self.session)
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        assert self.session is not None
        try:
            if not self._committed:
                await self.session.rollback()
        finally:
            await self.session.close()
        if isinstance(exc, SQLAlchemyError):
            logger.error("Unit of work rolled back after storage error: %s", exc)
            raise translate_storage_error(exc) from exc

    async def commit(self) -> None:
        assert self.session is not None
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            logger.error("Commit failed: %s", exc)
            raise translate_storage_error(exc) from exc
        self._committed = True


__all__ = ["SqlUnitOfWork", "translate_storage_error"]
