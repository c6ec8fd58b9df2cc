"""Unit-of-work protocol: the atomic commit boundary of a ledger operation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from qrwallet.modules.movements.repository import MovementRepository
    from qrwallet.modules.provenance.repository import ProvenanceRepository
    from qrwallet.modules.tokens.repository import TokenRepository
    from qrwallet.modules.wallets.repository import WalletRepository


class UnitOfWork(Protocol):
    """Repositories sharing one transaction.

    Leaving the ``async with`` block without ``commit()`` rolls everything
    back, so no partial write of the block is ever observable.
    """

    wallets: "WalletRepository"
    movements: "MovementRepository"
    tokens: "TokenRepository"
    provenance: "ProvenanceRepository"

    async def __aenter__(self) -> "UnitOfWork":
        ...

    async def __aexit__(self, exc_type, exc, tb) -> None:
        ...

    async def commit(self) -> None:
        ...
