"""
FILE: src/core/portfolio/tax_loss.py
Tax-loss harvesting candidates from a deterministic pseudo-return.

The pseudo-return is a placeholder derived from the holding identifier; it is
not market data and only drives the shape of the advice until a real
performance feed is wired in.
"""

import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from src.core.common.formatting import format_inr
from src.core.models import Holding, PortfolioAdviceAction, PortfolioAdviceItem

MAX_HARVEST_ACTIONS = 2


def pseudo_return_percent(holding: Holding) -> Decimal:
    base = holding.product_id or holding.id or 1
    raw = Decimal(str(math.sin(base * 13.37))) * Decimal("0.12") * Decimal("100")
    return raw.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _loss_candidates(holdings: Sequence[Holding]) -> List[tuple[Holding, Decimal, Decimal]]:
    candidates = []
    for holding in holdings:
        invested = holding.invested_amount or holding.current_value or Decimal("0")
        pseudo_return = pseudo_return_percent(holding)
        estimated_current = invested * (Decimal("1") + pseudo_return / Decimal("100"))
        loss = max(Decimal("0"), invested - estimated_current)
        if loss > 0:
            candidates.append((holding, pseudo_return, loss))
    return sorted(candidates, key=lambda candidate: candidate[2], reverse=True)


def build_tax_loss_advice(
    holdings: Sequence[Holding],
    *,
    generated_at: Optional[datetime] = None,
) -> PortfolioAdviceItem:
    candidates = _loss_candidates(holdings)

    actions = [
        PortfolioAdviceAction(
            label=holding.scheme_name,
            description=(
                f"Harvest approximately {format_inr(loss)} by switching to a similar exposure."
            ),
            impact=f"Estimated return: {pseudo_return:.2f}%",
            amount=loss,
        )
        for holding, pseudo_return, loss in candidates[:MAX_HARVEST_ACTIONS]
    ]

    if candidates:
        summary = (
            f"Model spotted {len(candidates)} positions trading below cost basis. "
            "Harvesting the top candidate could unlock approximately "
            f"{format_inr(candidates[0][2])} in losses."
        )
        rationale = (
            "Realising targeted losses can offset capital gains without materially "
            "altering the allocation."
        )
    else:
        summary = (
            "Model did not detect any significant unrealised losses. "
            "Maintain current positions for now."
        )
        rationale = "No holdings are materially underwater based on synthetic performance estimates."
        actions = [
            PortfolioAdviceAction(
                label="Monitor positions",
                description=(
                    "Re-run analysis closer to financial year-end or after market "
                    "volatility spikes."
                ),
            )
        ]

    return PortfolioAdviceItem(
        id="tax-loss",
        category="tax_loss",
        title="Tax-Loss Harvesting Opportunities",
        summary=summary,
        rationale=rationale,
        generated_at=generated_at or datetime.now(timezone.utc),
        actions=actions,
        metadata={"analysed_holdings": len(holdings)},
    )
