from decimal import Decimal

import pytest

from src.core.common.errors import DomainViolationError, InvalidInputError
from src.core.models import OrderEconomicsOptions
from src.core.orders.switch import calculate_switch, estimate_switch_tax
from tests.factories import product

SOURCE = product(101, "Bluechip Equity Fund", "large_cap_equity", nav="50")
TARGET = product(201, "Corporate Bond Fund", "debt", nav="20")


def test_switch_by_amount_applies_exit_load():
    calc = calculate_switch(SOURCE, TARGET, amount=Decimal("10000"))

    assert calc.source_units == Decimal("200")
    assert calc.switch_amount == Decimal("10000")
    assert calc.exit_load == Decimal("1.0")
    assert calc.exit_load_amount == Decimal("100")
    assert calc.net_amount == Decimal("9900")
    assert calc.target_units == Decimal("495")
    assert calc.tax_implications is None


def test_switch_by_units_uses_source_nav():
    calc = calculate_switch(SOURCE, TARGET, units=Decimal("100"))

    assert calc.switch_amount == Decimal("5000")
    assert calc.source_nav == Decimal("50")
    assert calc.target_nav == Decimal("20")


def test_switch_without_exit_load():
    options = OrderEconomicsOptions(switch_exit_load_percent=Decimal("0"))

    calc = calculate_switch(SOURCE, TARGET, amount=Decimal("10000"), options=options)

    assert calc.exit_load is None
    assert calc.exit_load_amount is None
    assert calc.target_units == Decimal("500")


def test_short_term_switch_taxes_gain_at_fifteen_percent():
    calc = calculate_switch(
        SOURCE,
        TARGET,
        amount=Decimal("10000"),
        purchase_nav=Decimal("40"),
        holding_period_months=6,
    )

    tax = calc.tax_implications
    assert tax.short_term_gain == Decimal("2000")
    assert tax.long_term_gain == Decimal("0")
    assert tax.tax_amount == Decimal("300")


def test_short_term_loss_is_not_taxed():
    tax = estimate_switch_tax(
        switch_amount=Decimal("10000"),
        source_units=Decimal("200"),
        purchase_nav=Decimal("60"),
        holding_period_months=3,
    )

    assert tax.short_term_gain == Decimal("-2000")
    assert tax.tax_amount == Decimal("0")


def test_long_term_gain_is_taxed_above_exemption():
    tax = estimate_switch_tax(
        switch_amount=Decimal("500000"),
        source_units=Decimal("10000"),
        purchase_nav=Decimal("20"),
        holding_period_months=24,
    )

    assert tax.long_term_gain == Decimal("300000")
    assert tax.tax_amount == Decimal("20000")


def test_long_term_gain_within_exemption_is_free():
    tax = estimate_switch_tax(
        switch_amount=Decimal("10000"),
        source_units=Decimal("200"),
        purchase_nav=Decimal("40"),
        holding_period_months=12,
    )

    assert tax.short_term_gain == Decimal("0")
    assert tax.tax_amount == Decimal("0")


def test_switch_requires_amount_or_units():
    with pytest.raises(InvalidInputError, match="Either amount or units must be provided"):
        calculate_switch(SOURCE, TARGET)


def test_switch_requires_priced_schemes():
    unpriced = product(999, "Unpriced Fund", "debt", nav="0")

    with pytest.raises(DomainViolationError):
        calculate_switch(SOURCE, unpriced, amount=Decimal("1000"))
