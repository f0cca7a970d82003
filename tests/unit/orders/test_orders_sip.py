from datetime import date
from decimal import Decimal

import pytest

from src.core.common.errors import InvalidInputError
from src.core.models import SIPFrequency
from src.core.orders.sip import (
    add_months,
    build_installment_schedule,
    calculate_sip,
    next_installment_date,
)

START = date(2026, 1, 31)


def test_monthly_sip_projection():
    result = calculate_sip(
        Decimal("5000"), SIPFrequency.MONTHLY, 12, Decimal("12"), start_date=START
    )

    assert result.total_invested == Decimal("60000")
    assert abs(result.expected_value - Decimal("64046.64")) < Decimal("0.01")
    assert result.estimated_returns == result.expected_value - result.total_invested
    assert result.summary.total_installments == 12
    assert len(result.monthly_breakdown) == 12

    first = result.monthly_breakdown[0]
    assert first.month == 1
    assert first.installment_date == START
    assert first.value == Decimal("5050")
    assert first.returns == Decimal("50")


def test_cumulative_invested_never_decreases():
    result = calculate_sip(
        Decimal("2500"), SIPFrequency.WEEKLY, 24, Decimal("10"), start_date=START
    )

    cumulative = [row.cumulative_invested for row in result.monthly_breakdown]
    assert cumulative == sorted(cumulative)
    assert result.summary.total_installments == 96
    assert result.total_invested == Decimal("240000")


def test_daily_sip_projection():
    result = calculate_sip(
        Decimal("100"), SIPFrequency.DAILY, 6, Decimal("12"), start_date=START
    )

    assert result.total_invested == Decimal("18000")
    assert result.summary.total_installments == 180
    assert result.monthly_breakdown[0].cumulative_invested == Decimal("3000")
    assert result.expected_value > result.total_invested


def test_quarterly_sip_spreads_installment_across_months():
    result = calculate_sip(
        Decimal("15000"), SIPFrequency.QUARTERLY, 12, Decimal("0"), start_date=START
    )

    assert abs(result.total_invested - Decimal("60000")) < Decimal("0.0001")
    assert abs(result.expected_value - result.total_invested) < Decimal("0.0001")
    assert result.summary.total_installments == 4


def test_breakdown_dates_clamp_to_month_end():
    result = calculate_sip(
        Decimal("1000"), SIPFrequency.MONTHLY, 3, Decimal("8"), start_date=START
    )

    assert [row.installment_date for row in result.monthly_breakdown] == [
        date(2026, 1, 31),
        date(2026, 2, 28),
        date(2026, 3, 31),
    ]


@pytest.mark.parametrize("amount, duration", [("0", 12), ("-100", 12), ("1000", 0)])
def test_invalid_sip_inputs(amount, duration):
    with pytest.raises(InvalidInputError):
        calculate_sip(
            Decimal(amount), SIPFrequency.MONTHLY, duration, Decimal("12"), start_date=START
        )


def test_add_months_rolls_over_year():
    assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)


def test_next_installment_date_by_frequency():
    start = date(2026, 1, 15)

    assert next_installment_date(start, SIPFrequency.DAILY, 0) == date(2026, 1, 16)
    assert next_installment_date(start, SIPFrequency.WEEKLY, 1) == date(2026, 1, 29)
    assert next_installment_date(start, SIPFrequency.MONTHLY, 2) == date(2026, 4, 15)
    assert next_installment_date(start, SIPFrequency.QUARTERLY, 1) == date(2026, 7, 15)


def test_installment_schedule_starts_on_start_date():
    assert build_installment_schedule(date(2026, 1, 1), SIPFrequency.WEEKLY, 3) == [
        date(2026, 1, 1),
        date(2026, 1, 8),
        date(2026, 1, 15),
    ]
    assert build_installment_schedule(date(2026, 1, 1), SIPFrequency.MONTHLY, 0) == []
