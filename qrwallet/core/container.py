"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from qrwallet.core.config import Settings, get_settings
from qrwallet.core.crypto import TokenKeyring
from qrwallet.core.locks import KeyedLockManager
from qrwallet.infrastructure.database.session import build_engine, build_session_factory
from qrwallet.infrastructure.database.unit_of_work import SqlUnitOfWork
from qrwallet.modules.transfers import TransferCoordinator, TransferPolicy


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    engine: AsyncEngine = field(init=False)
    session_factory: async_sessionmaker[AsyncSession] = field(init=False)
    locks: KeyedLockManager = field(default_factory=KeyedLockManager)
    keyring: TokenKeyring = field(init=False)
    policy: TransferPolicy = field(init=False)

    def __post_init__(self) -> None:
        self.keyring = TokenKeyring.from_settings(self.settings.tokens)
        self.policy = TransferPolicy.from_settings(self.settings.transfers)
        self.init_infrastructure()

    def init_infrastructure(self) -> None:
        """Build the database engine and session factory for this container."""
        self.engine = build_engine(self.settings)
        self.session_factory = build_session_factory(self.engine)

    @property
    def default_token_ttl(self) -> Optional[timedelta]:
        days = self.settings.tokens.default_ttl_days
        return timedelta(days=days) if days else None

    def unit_of_work(self) -> SqlUnitOfWork:
        return SqlUnitOfWork(self.session_factory)

    def transfer_coordinator(self) -> TransferCoordinator:
        return TransferCoordinator(
            uow_factory=self.unit_of_work,
            locks=self.locks,
            keyring=self.keyring,
            policy=self.policy,
            default_token_ttl=self.default_token_ttl,
        )

    async def dispose(self) -> None:
        await self.engine.dispose()


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer(settings=get_settings())


__all__ = ["ApplicationContainer", "get_container"]
