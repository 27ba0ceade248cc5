"""Tests for amount parsing."""

import pytest
from decimal import Decimal
from spendwise.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("15000", Decimal("15000")),
        ("15,000", Decimal("15000")),
        ("UGX 15,000", Decimal("15000")),
        ("ugx1,500,000", Decimal("1500000")),
        ("15000.50", Decimal("15000.50")),
        ("$15.00", Decimal("15.00")),
        ("1_000", Decimal("1000")),
        ("  250  ", Decimal("250")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_negative_amounts_parse():
    """Test sign is preserved; positivity is checked by validation."""
    assert parse_amount("-500") == Decimal("-500")


@pytest.mark.parametrize("text", ["", "   ", "abc", "UGX", "15,000 shillings"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
