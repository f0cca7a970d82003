from decimal import Decimal

import pytest

from src.core.common.formatting import format_inr


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("0", "₹0"),
        ("999", "₹999"),
        ("1000", "₹1,000"),
        ("100000", "₹1,00,000"),
        ("1234567", "₹12,34,567"),
        ("1500.5", "₹1,501"),
        ("-2500", "-₹2,500"),
    ],
)
def test_format_inr_uses_indian_grouping(amount, expected):
    assert format_inr(Decimal(amount)) == expected
