"""Money conversion helpers.

The ledger stores integer minor units (cents). Boundary values arrive as
decimal strings, ``Decimal`` instances or integer cents and are rounded to the
cent with ``ROUND_HALF_UP`` exactly once, here. Binary floats are rejected.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from qrwallet.core.exceptions import ValidationError

CENT = Decimal("0.01")
ROUNDING = ROUND_HALF_UP
# upper bound for a single amount, in cents
MAX_CENTS = 10**15

MoneyInput = str | Decimal


def to_decimal(value: MoneyInput) -> Decimal:
    """Parse a boundary money value into a finite ``Decimal``."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError("amount must be a decimal string, not a binary float")
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValidationError(f"invalid amount: {value!r}") from exc
    else:
        raise ValidationError(f"unsupported amount type: {type(value).__name__}")
    if not parsed.is_finite():
        raise ValidationError("amount must be finite")
    return parsed


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUNDING)


def to_cents(value: MoneyInput) -> int:
    """Round a decimal amount to the cent and return it in minor units."""
    try:
        return int(quantize(to_decimal(value)) * 100)
    except InvalidOperation as exc:
        raise ValidationError(f"amount out of range: {value!r}") from exc


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_cents(cents: int) -> str:
    return str(from_cents(cents))


def parse_positive_cents(amount: MoneyInput | None = None, amount_cents: int | None = None) -> int:
    """Resolve exactly one of ``amount`` / ``amount_cents`` into positive cents."""
    if (amount is None) == (amount_cents is None):
        raise ValidationError("provide exactly one of amount or amount_cents")
    if amount_cents is not None:
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            raise ValidationError("amount_cents must be an integer")
        cents = amount_cents
    else:
        cents = to_cents(amount)
    if cents <= 0:
        raise ValidationError("amount must be positive after rounding to the cent")
    if cents > MAX_CENTS:
        raise ValidationError("amount is too large")
    return cents


def multiply_to_cents(quantity: Decimal, unit_cents: int) -> int:
    """``round_half_up(quantity * unit value, 2)`` expressed in cents."""
    total = quantize(quantity * from_cents(unit_cents))
    return int(total * 100)


__all__ = [
    "CENT",
    "ROUNDING",
    "MAX_CENTS",
    "MoneyInput",
    "to_decimal",
    "quantize",
    "to_cents",
    "from_cents",
    "format_cents",
    "parse_positive_cents",
    "multiply_to_cents",
]
