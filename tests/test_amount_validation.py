from __future__ import annotations

from decimal import Decimal

import pytest

from expensi.modules.validation.amounts import AmountWarningType, round_amount, validate_amount


def _types(amount: float) -> list[AmountWarningType]:
    return [w.type for w in validate_amount(amount)]


def test_large_amount_warning():
    assert AmountWarningType.LARGE_AMOUNT in _types(15000)
    assert AmountWarningType.LARGE_AMOUNT not in _types(10000)


def test_excessive_decimals_warning():
    warnings = validate_amount(12.345)

    assert [w.type for w in warnings] == [AmountWarningType.EXCESSIVE_DECIMALS]
    assert warnings[0].message == "Amount will be rounded to 2 decimals"


def test_possible_decimal_error_suggests_cents():
    warnings = [w for w in validate_amount(1500) if w.type == AmountWarningType.POSSIBLE_DECIMAL_ERROR]

    assert len(warnings) == 1
    assert warnings[0].suggested_amount == 15.0
    assert warnings[0].message == "Did you mean $15.00 instead of $1,500.00?"


@pytest.mark.parametrize("amount", [9.99, 10000, 999, 1550, 42])
def test_ordinary_and_boundary_amounts_have_no_decimal_warning(amount):
    assert AmountWarningType.POSSIBLE_DECIMAL_ERROR not in _types(amount)


def test_lower_boundary_is_inclusive():
    assert AmountWarningType.POSSIBLE_DECIMAL_ERROR in _types(1000)


@pytest.mark.parametrize("amount", [1100, 9900])
def test_any_round_hundred_below_ten_thousand_warns(amount):
    assert AmountWarningType.POSSIBLE_DECIMAL_ERROR in _types(amount)


def test_plain_amount_has_no_warnings():
    assert validate_amount(9.99) == []


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(2.675, 2.68), (1.005, 1.01), (12.344, 12.34), (7, 7.0)],
)
def test_round_amount_half_up(amount, expected):
    assert round_amount(amount) == expected


ROUNDING_SAMPLES = [0.005, 0.015, 1.005, 2.675, 0.125, 99.995, 123.4, 7, 1e-7, 12345678.905, 9999999.999]


@pytest.mark.parametrize("amount", ROUNDING_SAMPLES)
def test_round_amount_has_at_most_two_decimals(amount):
    rounded = round_amount(amount)

    assert Decimal(str(rounded)).as_tuple().exponent >= -2


@pytest.mark.parametrize("amount", ROUNDING_SAMPLES)
def test_round_amount_is_idempotent(amount):
    assert round_amount(round_amount(amount)) == round_amount(amount)
