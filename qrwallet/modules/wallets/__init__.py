"""Wallet domain exports"""

from .models import AccountLedger, BalanceChange, WalletSnapshot
from .service import WalletService, normalize_account_id

__all__ = [
    "AccountLedger",
    "BalanceChange",
    "WalletSnapshot",
    "WalletService",
    "normalize_account_id",
]
