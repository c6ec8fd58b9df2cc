"""Movement log exports."""

from .models import (
    ActorRole,
    LedgerAudit,
    MovementCategory,
    MovementKind,
    MovementQuery,
    MovementRecord,
    NewMovement,
)
from .service import MovementLogService

__all__ = [
    "ActorRole",
    "LedgerAudit",
    "MovementCategory",
    "MovementKind",
    "MovementQuery",
    "MovementRecord",
    "NewMovement",
    "MovementLogService",
]
