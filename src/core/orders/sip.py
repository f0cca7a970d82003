"""
FILE: src/core/orders/sip.py
Systematic investment plan projection and installment calendar.
"""

import calendar
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from src.core.common.errors import InvalidInputError
from src.core.models import SIPCalculatorResult, SIPFrequency, SIPMonthlyBreakdown, SIPSummary

INSTALLMENTS_PER_MONTH: Dict[SIPFrequency, Decimal] = {
    SIPFrequency.MONTHLY: Decimal("1"),
    SIPFrequency.QUARTERLY: Decimal("1") / Decimal("3"),
    SIPFrequency.WEEKLY: Decimal("4"),
    SIPFrequency.DAILY: Decimal("30"),
}

_MONTH_STEP = {SIPFrequency.MONTHLY: 1, SIPFrequency.QUARTERLY: 3}
_DAY_STEP = {SIPFrequency.DAILY: 1, SIPFrequency.WEEKLY: 7}


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the end of shorter months."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_installment_date(
    start_date: date, frequency: SIPFrequency, completed_installments: int
) -> date:
    step = completed_installments + 1
    if frequency in _DAY_STEP:
        return start_date + timedelta(days=_DAY_STEP[frequency] * step)
    return add_months(start_date, _MONTH_STEP[frequency] * step)


def build_installment_schedule(
    start_date: date, frequency: SIPFrequency, count: int
) -> List[date]:
    """The first `count` installment dates, starting on the start date."""
    if count <= 0:
        return []
    return [start_date] + [
        next_installment_date(start_date, frequency, completed) for completed in range(count - 1)
    ]


def calculate_sip(
    amount: Decimal,
    frequency: SIPFrequency,
    duration: int,
    expected_return: Decimal,
    *,
    start_date: Optional[date] = None,
) -> SIPCalculatorResult:
    """
    Month-by-month compound projection.

    Each month's contribution is the installment amount times the number of
    installments that frequency places in a month; the running value grows at
    the monthly rate after the contribution is added.
    """
    if amount <= 0:
        raise InvalidInputError("SIP amount must be greater than zero")
    if duration < 1:
        raise InvalidInputError("SIP duration must be at least one month")

    start_date = start_date or date.today()

    monthly_rate = expected_return / Decimal("100") / Decimal("12")
    per_month = INSTALLMENTS_PER_MONTH[frequency]

    breakdown: List[SIPMonthlyBreakdown] = []
    cumulative_invested = Decimal("0")
    value = Decimal("0")
    for month in range(1, duration + 1):
        invested = amount * per_month
        cumulative_invested += invested
        value = (value + invested) * (Decimal("1") + monthly_rate)
        returns = value - cumulative_invested
        breakdown.append(
            SIPMonthlyBreakdown(
                month=month,
                installment_date=add_months(start_date, month - 1),
                invested=invested,
                cumulative_invested=cumulative_invested,
                value=value,
                returns=returns,
                return_percentage=returns / cumulative_invested * Decimal("100"),
            )
        )

    estimated_returns = value - cumulative_invested
    return SIPCalculatorResult(
        total_invested=cumulative_invested,
        expected_value=value,
        estimated_returns=estimated_returns,
        return_percentage=estimated_returns / cumulative_invested * Decimal("100"),
        monthly_breakdown=breakdown,
        summary=SIPSummary(total_installments=math.ceil(duration * per_month)),
    )
