"""Shared abstractions for ledger modules."""

from .unit_of_work import UnitOfWork

__all__ = ["UnitOfWork"]
