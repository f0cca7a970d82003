"""
FILE: src/core/portfolio/rebalancing.py
Turns allocation gaps into Buy / Switch / Sell suggestions.
"""

from decimal import Decimal
from typing import List, Sequence

from src.core.models import PRIORITY_RANK, AllocationGap, Holding, RebalancingSuggestion

MIN_ACTIONABLE_GAP = Decimal("1")


def _sized(total_value: Decimal, gap: Decimal) -> Decimal:
    return total_value * abs(gap) / Decimal("100")


def build_rebalancing_suggestions(
    gaps: Sequence[AllocationGap],
    holdings: Sequence[Holding],
    total_value: Decimal,
) -> List[RebalancingSuggestion]:
    """
    One suggestion per actionable gap, highest priority first.

    Overweight buckets are reduced from their first holding: switched into
    the first underweight bucket when one exists, otherwise sold to cash.
    An overweight bucket with no holdings yields nothing.
    """
    suggestions: List[RebalancingSuggestion] = []

    for gap in gaps:
        if abs(gap.gap) < MIN_ACTIONABLE_GAP:
            continue

        if gap.gap > 0:
            suggestions.append(
                RebalancingSuggestion(
                    id=f"buy-{gap.category}",
                    action="Buy",
                    to_scheme=f"Increase {gap.category} allocation",
                    amount=_sized(total_value, gap.gap),
                    reason=gap.recommendation,
                    priority=gap.priority,
                    expected_impact=(
                        f"Will bring {gap.category} allocation from "
                        f"{gap.current:.1f}% to {gap.target:.1f}%"
                    ),
                )
            )
            continue

        holding = next((h for h in holdings if h.category == gap.category), None)
        if holding is None:
            continue

        receiver = next(
            (g for g in gaps if g.gap > 0 and g.category != gap.category),
            None,
        )
        if receiver is not None:
            suggestions.append(
                RebalancingSuggestion(
                    id=f"switch-{gap.category}-{receiver.category}",
                    action="Switch",
                    from_scheme=holding.scheme_name,
                    from_scheme_id=holding.product_id,
                    to_scheme=f"Increase {receiver.category} allocation",
                    amount=_sized(total_value, gap.gap),
                    reason=(
                        f"Switch from {gap.category} to {receiver.category} "
                        "to rebalance portfolio"
                    ),
                    priority=gap.priority,
                    expected_impact=(
                        f"Will reduce {gap.category} by {abs(gap.gap):.1f}% and increase "
                        f"{receiver.category} by {receiver.gap:.1f}%"
                    ),
                )
            )
        else:
            suggestions.append(
                RebalancingSuggestion(
                    id=f"sell-{gap.category}",
                    action="Sell",
                    from_scheme=holding.scheme_name,
                    from_scheme_id=holding.product_id,
                    to_scheme="Cash",
                    amount=_sized(total_value, gap.gap),
                    reason=f"Reduce {gap.category} allocation",
                    priority=gap.priority,
                    expected_impact=(
                        f"Will reduce {gap.category} allocation from "
                        f"{gap.current:.1f}% to {gap.target:.1f}%"
                    ),
                )
            )

    # sorted() is stable, so equal priorities keep gap order.
    return sorted(suggestions, key=lambda s: PRIORITY_RANK[s.priority], reverse=True)
