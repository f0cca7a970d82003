"""
FILE: src/core/orders/redemption.py
Redemption proceeds, settlement dates and instant-redemption eligibility.
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from src.core.common.errors import DomainViolationError, InvalidInputError
from src.core.common.formatting import format_inr
from src.core.models import (
    InstantRedemptionEligibility,
    OrderEconomicsOptions,
    PreparedRedemption,
    Product,
    RedemptionCalculation,
    RedemptionItem,
    RedemptionType,
)

_ZERO = Decimal("0")


def resolve_units(
    product: Product, *, units: Optional[Decimal], amount: Optional[Decimal]
) -> Decimal:
    """Units to redeem; derived from the amount at the current NAV when not given."""
    if not product.nav:
        raise DomainViolationError("NAV not available for this scheme")
    resolved = units
    if not resolved and amount:
        resolved = amount / product.nav
    if not resolved or resolved <= _ZERO:
        raise InvalidInputError("Invalid units or amount")
    return resolved


def settlement_date_for(
    redemption_type: RedemptionType, now: datetime, options: OrderEconomicsOptions
) -> datetime:
    if redemption_type == RedemptionType.INSTANT:
        return now + timedelta(hours=options.instant_settlement_hours)
    return now + timedelta(days=options.standard_settlement_days)


def calculate_redemption(
    product: Product,
    *,
    units: Optional[Decimal] = None,
    amount: Optional[Decimal] = None,
    redemption_type: RedemptionType = RedemptionType.STANDARD,
    options: Optional[OrderEconomicsOptions] = None,
    now: datetime,
) -> RedemptionCalculation:
    """
    Gross, exit load, tax withheld and final proceeds for one redemption.

    Exit load is charged on Standard redemptions only. Tax is withheld on the
    net amount for Standard and Instant redemptions and never for Full.
    """
    options = options or OrderEconomicsOptions()
    resolved_units = resolve_units(product, units=units, amount=amount)
    nav = product.nav

    gross_amount = resolved_units * nav
    exit_load_rate = options.exit_load_rate if redemption_type == RedemptionType.STANDARD else _ZERO
    exit_load_amount = gross_amount * exit_load_rate
    net_amount = gross_amount - exit_load_amount

    tds = _ZERO
    if redemption_type in (RedemptionType.STANDARD, RedemptionType.INSTANT):
        tds = net_amount * options.tds_rate

    return RedemptionCalculation(
        scheme_name=product.scheme_name or "Unknown Scheme",
        units=resolved_units,
        nav=nav,
        gross_amount=gross_amount,
        exit_load=exit_load_rate * Decimal("100") if exit_load_rate > _ZERO else None,
        exit_load_amount=exit_load_amount if exit_load_amount > _ZERO else None,
        net_amount=net_amount,
        tds=tds if tds > _ZERO else None,
        final_amount=net_amount - tds,
        settlement_date=settlement_date_for(redemption_type, now, options),
    )


def check_instant_redemption_eligibility(
    amount: Decimal,
    product: Optional[Product],
    options: Optional[OrderEconomicsOptions] = None,
) -> InstantRedemptionEligibility:
    options = options or OrderEconomicsOptions()
    limit = options.instant_redemption_max_amount
    minimum = options.instant_redemption_min_amount

    reason = None
    if amount > limit:
        reason = f"Amount exceeds instant redemption limit of {format_inr(limit)}"
    elif amount <= minimum:
        reason = f"Instant redemption amount must exceed {format_inr(minimum)}"
    elif product is None:
        reason = "Scheme not found"

    return InstantRedemptionEligibility(
        eligible=reason is None,
        max_amount=limit,
        available_amount=limit,
        reason=reason,
    )


def build_redemption_item(
    product: Product, calculation: RedemptionCalculation
) -> PreparedRedemption:
    """Cart line for a calculated redemption, sized at the final proceeds."""
    return PreparedRedemption(
        cart_item=RedemptionItem(
            id=f"redemption-{uuid.uuid4().hex[:12]}",
            product_id=product.id,
            scheme_name=product.scheme_name,
            amount=calculation.final_amount,
            units=calculation.units,
            nav=calculation.nav,
            category=product.category,
        ),
        calculation=calculation,
    )
