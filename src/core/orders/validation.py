"""
FILE: src/core/orders/validation.py
Pre-submission checks for an order basket and its nomination details.

HARD issues block submission; SOFT issues are returned as warnings and the
order may proceed. Every issue carries the error taxonomy bucket it belongs
to so callers can tell malformed input from business-rule breaches.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from src.core.common.errors import ErrorCode
from src.core.models import (
    CartItem,
    Nominee,
    OrderEconomicsOptions,
    OrderValidationRequest,
    OrderValidationResult,
    Product,
    ValidationIssue,
)
from src.core.orders.compliance import ComplianceAdvisors, apply_compliance_findings

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
EUIN_PATTERN = re.compile(r"^E[A-Za-z0-9]{6}$")
MINOR_AGE_YEARS = 18
_ZERO_PERCENT = Decimal("0")
_FULL_NOMINATION = Decimal("100")
NEAR_FULL_EXIT_RATIO = Decimal("0.95")
_PARTIAL_EXIT_TYPES = {"Redemption", "Switch"}


def is_valid_pan(value: Optional[str]) -> bool:
    return bool(value) and PAN_PATTERN.match(value) is not None


def is_valid_euin(value: Optional[str]) -> bool:
    return bool(value) and EUIN_PATTERN.match(value) is not None


def deviation_key(product_id: int) -> str:
    return f"amount-{product_id}"


def age_on(birth_date: date, as_of: date) -> int:
    before_birthday = (as_of.month, as_of.day) < (birth_date.month, birth_date.day)
    return as_of.year - birth_date.year - int(before_birthday)


def _hard(code: str, category: ErrorCode, message: str, **extra) -> ValidationIssue:
    return ValidationIssue(code=code, severity="HARD", category=category, message=message, **extra)


def _soft(code: str, category: ErrorCode, message: str, **extra) -> ValidationIssue:
    return ValidationIssue(code=code, severity="SOFT", category=category, message=message, **extra)


def _check_item(
    item: CartItem,
    product: Optional[Product],
    request: OrderValidationRequest,
    errors: List[ValidationIssue],
    warnings: List[ValidationIssue],
) -> None:
    label = item.scheme_name or (product.scheme_name if product else f"Scheme {item.product_id}")

    if product is None:
        errors.append(
            _hard(
                "PRODUCT_NOT_FOUND",
                ErrorCode.NOT_FOUND,
                f"{label}: scheme not found in the product catalog",
                product_id=item.product_id,
            )
        )

    if item.amount <= 0:
        errors.append(
            _hard(
                "AMOUNT_NOT_POSITIVE",
                ErrorCode.INVALID_INPUT,
                f"{label}: amount must be greater than zero",
                field="amount",
                product_id=item.product_id,
            )
        )
        return

    if product is not None and item.transaction_type == "Purchase":
        if product.max_investment is not None and item.amount > product.max_investment:
            errors.append(
                _hard(
                    "AMOUNT_ABOVE_MAXIMUM",
                    ErrorCode.DOMAIN_VIOLATION,
                    f"{label}: amount exceeds the maximum investment of {product.max_investment}",
                    field="amount",
                    product_id=item.product_id,
                )
            )
        if item.amount < product.min_investment:
            message = f"{label}: amount is below the minimum investment of {product.min_investment}"
            if deviation_key(item.product_id) in request.acknowledged_deviations:
                warnings.append(
                    _soft(
                        "AMOUNT_BELOW_MINIMUM",
                        ErrorCode.DOMAIN_VIOLATION,
                        f"Amount Below Minimum (acknowledged): {message}",
                        field="amount",
                        product_id=item.product_id,
                    )
                )
            else:
                errors.append(
                    _hard(
                        "AMOUNT_BELOW_MINIMUM",
                        ErrorCode.DOMAIN_VIOLATION,
                        message,
                        field="amount",
                        product_id=item.product_id,
                    )
                )

    # Full variants liquidate the whole holding, so no market-value cap applies.
    if item.transaction_type in _PARTIAL_EXIT_TYPES:
        market_value = request.market_values.get(item.product_id)
        if market_value is None:
            warnings.append(
                _soft(
                    "MARKET_VALUE_MISSING",
                    ErrorCode.INVALID_INPUT,
                    f"{label}: market value not supplied; holding balance not verified",
                    product_id=item.product_id,
                )
            )
        elif item.amount > market_value:
            errors.append(
                _hard(
                    "AMOUNT_EXCEEDS_MARKET_VALUE",
                    ErrorCode.DOMAIN_VIOLATION,
                    f"{label}: {item.transaction_type.lower()} amount exceeds the holding's "
                    f"market value of {market_value}",
                    field="amount",
                    product_id=item.product_id,
                )
            )
        elif item.amount > market_value * NEAR_FULL_EXIT_RATIO:
            share = item.amount / market_value * Decimal("100")
            warnings.append(
                _soft(
                    "NEAR_FULL_REDEMPTION",
                    ErrorCode.DOMAIN_VIOLATION,
                    f"{label}: you are redeeming {share:.1f}% of your holdings. "
                    "Consider keeping some balance for future needs.",
                    field="amount",
                    product_id=item.product_id,
                )
            )


def _check_nominee(nominee: Nominee, as_of: date, errors: List[ValidationIssue]) -> None:
    if not _ZERO_PERCENT <= nominee.percentage <= _FULL_NOMINATION:
        errors.append(
            _hard(
                "NOMINEE_PERCENTAGE_OUT_OF_RANGE",
                ErrorCode.DOMAIN_VIOLATION,
                f"Nominee {nominee.name}: percentage must be between 0 and 100",
                field=f"nominees.{nominee.id}.percentage",
            )
        )
    if not is_valid_pan(nominee.pan):
        errors.append(
            _hard(
                "NOMINEE_PAN_INVALID",
                ErrorCode.INVALID_INPUT,
                f"Nominee {nominee.name}: PAN must be in format ABCDE1234F",
                field=f"nominees.{nominee.id}.pan",
            )
        )

    try:
        birth_date = date.fromisoformat(nominee.date_of_birth)
    except ValueError:
        errors.append(
            _hard(
                "NOMINEE_DOB_INVALID",
                ErrorCode.INVALID_INPUT,
                f"Nominee {nominee.name}: date of birth must be an ISO date",
                field=f"nominees.{nominee.id}.date_of_birth",
            )
        )
        return

    if age_on(birth_date, as_of) >= MINOR_AGE_YEARS:
        return

    if not (nominee.guardian_name and nominee.guardian_pan and nominee.guardian_relationship):
        errors.append(
            _hard(
                "GUARDIAN_DETAILS_REQUIRED",
                ErrorCode.DOMAIN_VIOLATION,
                f"Nominee {nominee.name} is a minor; guardian name, PAN and relationship "
                "are required",
                field=f"nominees.{nominee.id}.guardian",
            )
        )
    if nominee.guardian_pan and not is_valid_pan(nominee.guardian_pan):
        errors.append(
            _hard(
                "GUARDIAN_PAN_INVALID",
                ErrorCode.INVALID_INPUT,
                f"Guardian of nominee {nominee.name}: PAN must be in format ABCDE1234F",
                field=f"nominees.{nominee.id}.guardian_pan",
            )
        )


def _check_nominations(
    request: OrderValidationRequest, as_of: date, errors: List[ValidationIssue]
) -> None:
    if request.opt_out_of_nomination:
        return
    if not request.nominees:
        errors.append(
            _hard(
                "NOMINEES_REQUIRED",
                ErrorCode.DOMAIN_VIOLATION,
                "At least one nominee is required unless the investor opts out of nomination",
                field="nominees",
            )
        )
        return

    total = sum((nominee.percentage for nominee in request.nominees), Decimal("0"))
    if total != _FULL_NOMINATION:
        errors.append(
            _hard(
                "NOMINEE_TOTAL_NOT_100",
                ErrorCode.DOMAIN_VIOLATION,
                f"Nominee percentages must total exactly 100% (currently {total}%)",
                field="nominees",
            )
        )
    for nominee in request.nominees:
        _check_nominee(nominee, as_of, errors)


def validate_order(
    request: OrderValidationRequest,
    products: Dict[int, Product],
    *,
    as_of: Optional[date] = None,
    options: Optional[OrderEconomicsOptions] = None,
) -> OrderValidationResult:
    """Minor status is judged on `as_of`, today when omitted."""
    options = options or OrderEconomicsOptions()
    as_of = as_of or date.today()
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    if not request.cart_items:
        errors.append(
            _hard("CART_EMPTY", ErrorCode.INVALID_INPUT, "Cart is empty", field="cart_items")
        )
    for item in request.cart_items:
        _check_item(item, products.get(item.product_id), request, errors, warnings)

    if request.investor_pan is not None and not is_valid_pan(request.investor_pan):
        errors.append(
            _hard(
                "INVESTOR_PAN_INVALID",
                ErrorCode.INVALID_INPUT,
                "Investor PAN must be in format ABCDE1234F",
                field="investor_pan",
            )
        )

    _check_nominations(request, as_of, errors)

    if request.euin is not None and not is_valid_euin(request.euin):
        errors.append(
            _hard(
                "EUIN_INVALID",
                ErrorCode.INVALID_INPUT,
                "EUIN must be 'E' followed by 6 alphanumeric characters",
                field="euin",
            )
        )

    result = OrderValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
    if not options.compliance_advisors_enabled:
        return result
    return apply_compliance_findings(result, ComplianceAdvisors.evaluate(request, products))
