"""Transfer coordination: token-authorized credits and debits."""

from .models import EnrollmentResult, PresentedToken, TransferRequest, TransferResult, TransferState
from .policy import TransferPolicy, default_provenance
from .service import TransferCoordinator

__all__ = [
    "EnrollmentResult",
    "PresentedToken",
    "TransferCoordinator",
    "TransferPolicy",
    "TransferRequest",
    "TransferResult",
    "TransferState",
    "default_provenance",
]
