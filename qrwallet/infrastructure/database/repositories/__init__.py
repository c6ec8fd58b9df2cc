"""SQLAlchemy repository implementations."""

from .movement_repository import SqlMovementRepository
from .provenance_repository import SqlProvenanceRepository
from .token_repository import SqlTokenRepository
from .wallet_repository import SqlWalletRepository

__all__ = [
    "SqlMovementRepository",
    "SqlProvenanceRepository",
    "SqlTokenRepository",
    "SqlWalletRepository",
]
