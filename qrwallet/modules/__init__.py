"""Ledger modules and their public exports."""

from . import common, movements, provenance, tokens, transfers, wallets

__all__ = [
    "common",
    "movements",
    "provenance",
    "tokens",
    "transfers",
    "wallets",
]
