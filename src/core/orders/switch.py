"""
FILE: src/core/orders/switch.py
Switch economics between two schemes: exit load, target units and capital-gains tax.
"""

from decimal import Decimal
from typing import Optional

from src.core.common.errors import DomainViolationError, InvalidInputError
from src.core.models import (
    OrderEconomicsOptions,
    Product,
    SwitchCalculation,
    SwitchTaxImplications,
)

SHORT_TERM_HOLDING_MONTHS = 12
SHORT_TERM_GAINS_RATE = Decimal("0.15")
LONG_TERM_GAINS_RATE = Decimal("0.10")
LONG_TERM_GAINS_EXEMPTION = Decimal("100000")
_ZERO = Decimal("0")


def estimate_switch_tax(
    *,
    switch_amount: Decimal,
    source_units: Decimal,
    purchase_nav: Decimal,
    holding_period_months: int,
) -> SwitchTaxImplications:
    capital_gain = switch_amount - source_units * purchase_nav
    if holding_period_months < SHORT_TERM_HOLDING_MONTHS:
        tax = max(_ZERO, capital_gain) * SHORT_TERM_GAINS_RATE
        return SwitchTaxImplications(
            short_term_gain=capital_gain, long_term_gain=_ZERO, tax_amount=tax
        )
    taxable = max(_ZERO, capital_gain - LONG_TERM_GAINS_EXEMPTION)
    return SwitchTaxImplications(
        short_term_gain=_ZERO,
        long_term_gain=capital_gain,
        tax_amount=taxable * LONG_TERM_GAINS_RATE,
    )


def calculate_switch(
    source: Product,
    target: Product,
    *,
    amount: Optional[Decimal] = None,
    units: Optional[Decimal] = None,
    purchase_nav: Optional[Decimal] = None,
    holding_period_months: Optional[int] = None,
    options: Optional[OrderEconomicsOptions] = None,
) -> SwitchCalculation:
    options = options or OrderEconomicsOptions()
    if not amount and not units:
        raise InvalidInputError("Either amount or units must be provided")
    if not source.nav or not target.nav:
        raise DomainViolationError("NAV not available for this scheme")

    if amount:
        switch_amount = amount
        source_units = amount / source.nav
    else:
        source_units = units
        switch_amount = units * source.nav
    if switch_amount <= _ZERO:
        raise InvalidInputError("Invalid units or amount")

    exit_load_percent = options.switch_exit_load_percent
    exit_load_amount = switch_amount * exit_load_percent / Decimal("100")
    net_amount = switch_amount - exit_load_amount

    tax_implications = None
    if purchase_nav is not None and holding_period_months is not None:
        tax_implications = estimate_switch_tax(
            switch_amount=switch_amount,
            source_units=source_units,
            purchase_nav=purchase_nav,
            holding_period_months=holding_period_months,
        )

    return SwitchCalculation(
        source_scheme=source.scheme_name,
        target_scheme=target.scheme_name,
        source_units=source_units,
        source_nav=source.nav,
        target_nav=target.nav,
        switch_amount=switch_amount,
        target_units=net_amount / target.nav,
        exit_load=exit_load_percent if exit_load_percent > _ZERO else None,
        exit_load_amount=exit_load_amount if exit_load_amount > _ZERO else None,
        net_amount=net_amount,
        tax_implications=tax_implications,
    )
