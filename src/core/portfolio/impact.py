"""
FILE: src/core/portfolio/impact.py
Before/after allocation preview for a pending order basket.
"""

from decimal import Decimal
from typing import Dict, List, Sequence

from src.core.models import (
    ALLOCATION_BUCKETS,
    AllocationChange,
    CartItem,
    PortfolioAllocation,
    PortfolioImpact,
)
from src.core.portfolio.classification import classify_category

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")

_BUY_TRANSACTIONS = {"Purchase"}
_SELL_TRANSACTIONS = {"Redemption", "Full Redemption"}


def _order_amounts(items: Sequence[CartItem]) -> tuple[Dict[str, Decimal], Decimal]:
    bucket_amounts: Dict[str, Decimal] = {bucket: _ZERO for bucket in ALLOCATION_BUCKETS}
    net_total = _ZERO
    for item in items:
        bucket = classify_category(item.category)
        if item.transaction_type in _BUY_TRANSACTIONS:
            bucket_amounts[bucket] += item.amount
            net_total += item.amount
        elif item.transaction_type in _SELL_TRANSACTIONS:
            bucket_amounts[bucket] = max(_ZERO, bucket_amounts[bucket] - item.amount)
            net_total -= item.amount
        # Switch variants move money between schemes without changing the order total.
    return bucket_amounts, net_total


def calculate_impact(
    allocation: PortfolioAllocation,
    total_value: Decimal,
    items: Sequence[CartItem],
) -> PortfolioImpact:
    """
    Recomputes bucket percentages after applying the basket.

    Purchases add to their bucket and to the portfolio total. Redemptions
    reduce the total and their bucket's order amount, floored at zero while
    accumulating. When the post-order total is not positive the before
    allocation is carried over unchanged.
    """
    bucket_amounts, net_total = _order_amounts(items)
    new_total = total_value + net_total

    after_values: Dict[str, Decimal] = {}
    changes: List[AllocationChange] = []
    for bucket in ALLOCATION_BUCKETS:
        before = allocation.get(bucket)
        if new_total > _ZERO:
            current_amount = before * total_value / _HUNDRED
            after = (current_amount + bucket_amounts[bucket]) / new_total * _HUNDRED
        else:
            after = before
        after_values[bucket] = after

        change = after - before
        changes.append(
            AllocationChange(
                category=bucket,
                change=change,
                change_percent=change / before * _HUNDRED if before > _ZERO else _ZERO,
                direction="increase" if change > _ZERO else "decrease",
            )
        )

    return PortfolioImpact(
        before_allocation=allocation,
        after_allocation=PortfolioAllocation(**after_values),
        changes=changes,
        total_value_change=net_total,
    )
