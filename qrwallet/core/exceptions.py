"""Ledger error hierarchy.

Every error carries a stable ``code`` identifying the violated contract and a
``retryable`` flag. Only storage failures are safe to retry, and only by
repeating the whole call.
"""


class LedgerError(Exception):
    """Base class for wallet ledger errors."""

    code = "ledger_error"
    retryable = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__)

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(LedgerError):
    """Malformed or out-of-range input."""

    code = "validation_error"


class InvalidTokenError(LedgerError):
    """Authorization token not found."""

    code = "invalid_token"


class TokenInactiveError(LedgerError):
    """Authorization token is inactive."""

    code = "token_inactive"


class TokenExpiredError(LedgerError):
    """Authorization token has expired."""

    code = "token_expired"


class TokenSecretError(LedgerError):
    """Token keyring is misconfigured."""

    code = "token_secret"


class FrozenError(LedgerError):
    """Wallet is frozen."""

    code = "frozen"


class InsufficientBalanceError(LedgerError):
    """Insufficient balance."""

    code = "insufficient_balance"


class AccountNotFoundError(LedgerError):
    """Wallet account not found."""

    code = "account_not_found"


class MovementNotFoundError(LedgerError):
    """Movement not found."""

    code = "movement_not_found"


class AccountAlreadyEnrolledError(LedgerError):
    """Wallet account is already enrolled."""

    code = "account_exists"


class IntegrityViolationError(LedgerError):
    """Ledger integrity violation."""

    code = "integrity_violation"


class StorageFailureError(LedgerError):
    """Storage failure while committing."""

    code = "storage_failure"
    retryable = True


class ConcurrentModificationError(StorageFailureError):
    """Wallet was modified concurrently."""

    code = "concurrent_modification"


__all__ = [
    "LedgerError",
    "ValidationError",
    "InvalidTokenError",
    "TokenInactiveError",
    "TokenExpiredError",
    "TokenSecretError",
    "FrozenError",
    "InsufficientBalanceError",
    "AccountNotFoundError",
    "MovementNotFoundError",
    "AccountAlreadyEnrolledError",
    "IntegrityViolationError",
    "StorageFailureError",
    "ConcurrentModificationError",
]
