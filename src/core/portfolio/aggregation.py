"""
FILE: src/core/portfolio/aggregation.py
Replays a client's transaction history into holdings and bucket allocation.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, Optional

from src.core.models import (
    ALLOCATION_BUCKETS,
    ClientProfile,
    Holding,
    PortfolioAllocation,
    PortfolioData,
    Transaction,
)
from src.core.portfolio.classification import classify_category

_BUY_TYPES = {"buy", "purchase"}
_SELL_TYPES = {"sell", "redemption"}
_ZERO = Decimal("0")


def normalize_allocation(raw_amounts: Dict[str, Decimal]) -> PortfolioAllocation:
    """
    Converts raw bucket amounts into percentages of their sum.
    All buckets are zero when nothing is allocated.
    """
    total = sum((raw_amounts.get(bucket, _ZERO) for bucket in ALLOCATION_BUCKETS), _ZERO)
    if total <= _ZERO:
        return PortfolioAllocation()
    return PortfolioAllocation(
        **{
            bucket: raw_amounts.get(bucket, _ZERO) / total * Decimal("100")
            for bucket in ALLOCATION_BUCKETS
        }
    )


def _units_for(txn: Transaction, amount: Decimal, nav: Decimal) -> Decimal:
    if txn.quantity:
        return txn.quantity
    return amount / nav


def aggregate_portfolio(
    client: ClientProfile,
    transactions: Iterable[Transaction],
    *,
    include_holdings: bool = True,
    as_of: Optional[datetime] = None,
) -> PortfolioData:
    raw_allocation: Dict[str, Decimal] = {bucket: _ZERO for bucket in ALLOCATION_BUCKETS}
    total_invested = _ZERO
    total_value = _ZERO
    holdings: Dict[int, Holding] = {}

    for txn in transactions:
        transaction_type = (txn.transaction_type or "").strip().lower()
        amount = abs(txn.amount)
        nav = txn.nav or Decimal("1")
        bucket = classify_category(txn.product_category)

        if transaction_type in _BUY_TYPES:
            total_invested += amount
            total_value += amount
            raw_allocation[bucket] += amount

            if include_holdings and txn.product_id:
                units = _units_for(txn, amount, nav)
                existing = holdings.get(txn.product_id)
                if existing is None:
                    holdings[txn.product_id] = Holding(
                        id=txn.product_id,
                        product_id=txn.product_id,
                        scheme_name=txn.product_name or "Unknown",
                        category=bucket,
                        units=units,
                        nav=nav,
                        invested_amount=amount,
                        current_value=amount,
                        purchase_date=txn.transaction_date,
                        last_transaction_date=txn.transaction_date,
                    )
                else:
                    existing.units += units
                    existing.invested_amount += amount
                    existing.current_value += amount
                    existing.last_transaction_date = _latest(
                        existing.last_transaction_date, txn.transaction_date
                    )
        elif transaction_type in _SELL_TYPES:
            total_invested -= amount
            total_value -= amount
            raw_allocation[bucket] = max(_ZERO, raw_allocation[bucket] - amount)

            if include_holdings and txn.product_id:
                existing = holdings.get(txn.product_id)
                if existing is not None:
                    units = _units_for(txn, amount, nav)
                    existing.units = max(_ZERO, existing.units - units)
                    existing.invested_amount = max(_ZERO, existing.invested_amount - amount)
                    existing.current_value = max(_ZERO, existing.current_value - amount)
                    existing.last_transaction_date = _latest(
                        existing.last_transaction_date, txn.transaction_date
                    )

    portfolio_value = client.current_value or total_value
    total_gain_loss = portfolio_value - total_invested
    total_gain_loss_percent = (
        total_gain_loss / total_invested * Decimal("100") if total_invested > _ZERO else _ZERO
    )

    return PortfolioData(
        total_value=portfolio_value,
        total_invested=total_invested,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_gain_loss_percent,
        allocation=normalize_allocation(raw_allocation),
        holdings=[h for h in holdings.values() if h.units > _ZERO] if include_holdings else [],
        last_updated=as_of or datetime.now(timezone.utc),
    )


def _latest(current: Optional[datetime], candidate: Optional[datetime]) -> Optional[datetime]:
    if current is None:
        return candidate
    if candidate is None:
        return current
    return max(current, candidate, key=_as_utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are recorded in UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
