from decimal import Decimal

import pytest

from qrwallet.core.exceptions import ValidationError
from qrwallet.core.money import (
    MAX_CENTS,
    format_cents,
    from_cents,
    multiply_to_cents,
    parse_positive_cents,
    to_cents,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12.34", 1234),
        ("12.345", 1235),
        ("12.344", 1234),
        ("0.005", 1),
        (" 7 ", 700),
        (Decimal("2.5"), 250),
    ],
)
def test_to_cents_rounds_half_up(value, expected):
    assert to_cents(value) == expected


@pytest.mark.parametrize("value", [1.5, True, "abc", "NaN", "Infinity", "", 10])
def test_to_cents_rejects_bad_input(value):
    with pytest.raises(ValidationError):
        to_cents(value)


def test_to_cents_rejects_values_beyond_decimal_precision():
    with pytest.raises(ValidationError):
        to_cents("9" * 40)


def test_format_and_from_cents():
    assert format_cents(1234) == "12.34"
    assert format_cents(5) == "0.05"
    assert format_cents(0) == "0.00"
    assert from_cents(250) == Decimal("2.50")


def test_parse_positive_cents_requires_exactly_one_input():
    with pytest.raises(ValidationError):
        parse_positive_cents()
    with pytest.raises(ValidationError):
        parse_positive_cents("1.00", 100)


def test_parse_positive_cents_accepts_either_form():
    assert parse_positive_cents("20.00") == 2000
    assert parse_positive_cents(amount_cents=2000) == 2000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"amount": "0.004"},
        {"amount": "-1.00"},
        {"amount_cents": 0},
        {"amount_cents": -5},
        {"amount_cents": True},
        {"amount_cents": MAX_CENTS + 1},
    ],
)
def test_parse_positive_cents_rejects_non_positive_or_oversized(kwargs):
    with pytest.raises(ValidationError):
        parse_positive_cents(**kwargs)


def test_multiply_to_cents_rounds_once():
    # 2.5 * 3.33 = 8.325 -> 8.33
    assert multiply_to_cents(Decimal("2.5"), 333) == 833
    assert multiply_to_cents(Decimal("1"), 2000) == 2000


def test_repeated_partial_cent_amounts_do_not_drift():
    total = sum(to_cents("0.015") for _ in range(1000))
    assert total == 1000 * 2
