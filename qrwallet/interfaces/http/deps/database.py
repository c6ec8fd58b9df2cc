"""Database and container dependency providers."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from qrwallet.core.container import ApplicationContainer
from qrwallet.modules.transfers import TransferCoordinator


def get_app_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


async def get_db_session(
    container: ApplicationContainer = Depends(get_app_container),
) -> AsyncGenerator[AsyncSession, None]:
    async with container.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def get_transfer_coordinator(
    container: ApplicationContainer = Depends(get_app_container),
) -> TransferCoordinator:
    return container.transfer_coordinator()


__all__ = [
    "get_app_container",
    "get_db_session",
    "get_transfer_coordinator",
]
