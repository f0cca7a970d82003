from decimal import Decimal

from src.core.portfolio.scenario import parse_intents, resolve_key, run_scenario_analysis


def _base(**weights):
    return {key: Decimal(value) for key, value in weights.items()}


def test_parse_intents_reads_shift_increase_and_decrease():
    intents = parse_intents("Shift 10% from equity to debt. Increase gold by 2.5%. Trim hybrid by 3%")

    assert [intent.kind for intent in intents] == ["shift", "increase", "decrease"]
    assert intents[0].source == "equity"
    assert intents[0].amount == Decimal("10")
    assert intents[1].target == "gold"
    assert intents[1].amount == Decimal("2.5")
    assert intents[2].source == "hybrid"


def test_resolve_key_maps_synonyms_and_substrings():
    allocation = _base(large_cap_equity="60", debt="30", gold="10")

    assert resolve_key(allocation, "stocks") == "large_cap_equity"
    assert resolve_key(allocation, "Bonds") == "debt"
    assert resolve_key(allocation, "commodities") == "gold"
    assert resolve_key(allocation, "crypto") is None


def test_shift_into_debt_lowers_risk_and_return():
    result = run_scenario_analysis(
        "Shift 10% from equity to debt", _base(equity="60", debt="30", hybrid="10")
    )

    adjustments = result.adjustments
    assert adjustments.allocation == _base(equity="50", debt="40", hybrid="10")
    assert adjustments.expected_return_delta == Decimal("-0.20")
    assert adjustments.risk_shift == "lower"
    assert adjustments.confidence == Decimal("0.7")
    assert result.summary == "Shifted 10% from equity to debt."
    assert result.detected_intents == ["shift"]


def test_increase_takes_from_largest_other_bucket():
    result = run_scenario_analysis(
        "Increase equity by 5%", _base(equity="40", debt="50", gold="10")
    )

    adjustments = result.adjustments
    assert adjustments.allocation == _base(equity="45", debt="45", gold="10")
    assert adjustments.expected_return_delta == Decimal("0.20")
    assert adjustments.risk_shift == "higher"
    assert result.insights == ["Increased equity by 5%."]


def test_decrease_keeps_total_at_one_hundred():
    result = run_scenario_analysis("Reduce equity by 10%", _base(equity="60", debt="40"))

    adjustments = result.adjustments
    assert sum(adjustments.allocation.values()) == Decimal("100")
    assert adjustments.expected_return_delta == Decimal("-0.30")
    assert adjustments.risk_shift == "lower"
    assert result.insights[0] == "Reduced equity by 10%."


def test_buckets_never_go_negative():
    result = run_scenario_analysis(
        "Move 30% from gold to equity", _base(equity="70", debt="20", gold="10")
    )

    assert all(weight >= 0 for weight in result.adjustments.allocation.values())
    assert sum(result.adjustments.allocation.values()) == Decimal("100")


def test_prompt_without_intents_preserves_allocation():
    base = _base(equity="60", debt="40")

    result = run_scenario_analysis("What happens if markets fall?", base)

    assert result.adjustments.allocation == base
    assert result.adjustments.expected_return_delta == Decimal("0.00")
    assert result.adjustments.risk_shift == "neutral"
    assert result.adjustments.confidence == Decimal("0.4")
    assert result.detected_intents == []
    assert result.insights == [
        "No specific allocation shifts detected. Scenario preserves current mix."
    ]


def test_unresolved_bucket_is_detected_but_not_applied():
    base = _base(equity="60", debt="40")

    result = run_scenario_analysis("Increase crypto by 5%", base)

    assert result.detected_intents == ["increase"]
    assert result.adjustments.allocation == base
    assert result.adjustments.confidence == Decimal("0.7")
