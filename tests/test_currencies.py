from __future__ import annotations

import pytest

from expensi.core.categories import category_label, coerce_category
from expensi.core.currencies import (
    convert_to_usd,
    currency_symbol,
    format_currency,
    normalize_currency,
    round_half_up,
)


def test_format_currency():
    assert format_currency(1500) == "$1,500.00"
    assert format_currency(-5) == "-$5.00"
    assert format_currency(1234.5, "JPY") == "¥1,235"
    assert format_currency(3, "XYZ") == "$3.00"


def test_currency_lookup_helpers():
    assert normalize_currency(" eur ") == "EUR"
    assert normalize_currency("₹") == "INR"
    assert normalize_currency("doubloons") is None
    assert currency_symbol("gbp") == "£"


def test_convert_to_usd():
    assert convert_to_usd(92, "EUR") == 100.0
    with pytest.raises(ValueError):
        convert_to_usd(1, "XYZ")


def test_round_half_up_handles_non_finite():
    assert round_half_up(0.125) == 0.13
    assert round_half_up(float("inf")) == float("inf")


def test_category_helpers():
    assert coerce_category(" Food ") == "food"
    assert coerce_category(None) == "other"
    assert coerce_category("gadgets") == "other"
    assert category_label("food") == "Food & Dining"
    assert category_label("custom") == "custom"
