from decimal import Decimal

from src.core.portfolio.gaps import analyze_gaps, target_for_risk_profile
from src.core.portfolio.rebalancing import build_rebalancing_suggestions
from tests.factories import allocation, holding


def _gaps(current, profile="moderate"):
    return analyze_gaps(current, target_for_risk_profile(profile))


def test_overweight_bucket_switches_into_first_underweight_bucket():
    holdings = [holding(101, "Bluechip Equity", "equity", "70000")]
    suggestions = build_rebalancing_suggestions(
        _gaps(allocation("70", "20", "5", "5")), holdings, Decimal("100000")
    )

    by_id = {s.id: s for s in suggestions}
    assert set(by_id) == {"switch-equity-debt", "buy-debt", "buy-hybrid"}

    switch = by_id["switch-equity-debt"]
    assert switch.action == "Switch"
    assert switch.from_scheme == "Bluechip Equity"
    assert switch.from_scheme_id == 101
    assert switch.to_scheme == "Increase debt allocation"
    assert switch.amount == Decimal("20000")
    assert switch.priority == "High"
    assert switch.expected_impact == "Will reduce equity by 20.0% and increase debt by 10.0%"

    assert by_id["buy-debt"].amount == Decimal("10000")
    assert suggestions[0].id == "switch-equity-debt"


def test_sorted_by_priority_and_stable_within_priority():
    suggestions = build_rebalancing_suggestions(
        _gaps(allocation("30", "45", "20", "5")), [], Decimal("100000")
    )

    assert [s.id for s in suggestions] == ["buy-equity"]
    assert suggestions[0].priority == "High"

    suggestions = build_rebalancing_suggestions(
        _gaps(allocation("44", "24", "15", "17")),
        [holding(401, "Gold ETF", "others", "17000")],
        Decimal("100000"),
    )
    assert [s.id for s in suggestions] == ["switch-others-equity", "buy-equity", "buy-debt"]
    assert [s.priority for s in suggestions] == ["High", "Medium", "Medium"]


def test_sell_to_cash_when_no_bucket_is_underweight():
    current = allocation("52", "30", "15", "5")
    gaps = _gaps(current)
    suggestions = build_rebalancing_suggestions(
        gaps, [holding(101, "Bluechip Equity", "equity", "52000")], Decimal("200000")
    )

    ids = [s.id for s in suggestions]
    assert "sell-equity" in ids
    sell = next(s for s in suggestions if s.id == "sell-equity")
    assert sell.to_scheme == "Cash"
    assert sell.amount == Decimal("4000")
    assert sell.reason == "Reduce equity allocation"
    assert sell.expected_impact == "Will reduce equity allocation from 52.0% to 50.0%"


def test_overweight_bucket_without_holdings_is_skipped():
    suggestions = build_rebalancing_suggestions(
        _gaps(allocation("70", "20", "5", "5")), [], Decimal("100000")
    )

    assert all(s.action == "Buy" for s in suggestions)


def test_small_gaps_are_ignored():
    suggestions = build_rebalancing_suggestions(
        _gaps(allocation("50.5", "29.5", "15", "5")), [], Decimal("100000")
    )

    assert suggestions == []
