"""
FILE: src/core/portfolio/advice.py
Advice feed assembled from rebalancing suggestions and tax-loss candidates.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from src.core.common.formatting import format_inr
from src.core.models import (
    Holding,
    PortfolioAdviceAction,
    PortfolioAdviceItem,
    RebalancingSuggestion,
)
from src.core.portfolio.tax_loss import build_tax_loss_advice

_TITLES = {
    "Buy": "Add to underweight allocation",
    "Sell": "Trim overweight holding",
    "Switch": "Switch allocation to rebalance",
}


def summarize_suggestion(
    suggestion: RebalancingSuggestion, generated_at: datetime
) -> PortfolioAdviceItem:
    if suggestion.action == "Buy":
        direction = f"increase exposure to {suggestion.to_scheme}"
    elif suggestion.action == "Sell":
        direction = f"lighten {suggestion.from_scheme}"
    else:
        direction = f"switch part of {suggestion.from_scheme}"

    return PortfolioAdviceItem(
        id=suggestion.id,
        category="rebalance",
        title=_TITLES[suggestion.action],
        summary=(
            f"Model recommends {direction.lower()} worth {format_inr(suggestion.amount)}."
        ),
        rationale=suggestion.expected_impact,
        generated_at=generated_at,
        actions=[
            PortfolioAdviceAction(
                label=suggestion.action,
                description=suggestion.reason,
                amount=suggestion.amount,
                impact=suggestion.expected_impact,
            )
        ],
        metadata={
            "from_scheme": suggestion.from_scheme,
            "to_scheme": suggestion.to_scheme,
            "priority": suggestion.priority,
        },
    )


def build_portfolio_advice(
    suggestions: Sequence[RebalancingSuggestion],
    holdings: Sequence[Holding],
    *,
    generated_at: Optional[datetime] = None,
) -> List[PortfolioAdviceItem]:
    """Rebalancing items in suggestion order, followed by one tax-loss item."""
    stamp = generated_at or datetime.now(timezone.utc)
    items = [summarize_suggestion(suggestion, stamp) for suggestion in suggestions]
    items.append(build_tax_loss_advice(holdings, generated_at=stamp))
    return items
