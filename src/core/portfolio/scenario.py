"""
FILE: src/core/portfolio/scenario.py
What-if allocation scenarios parsed from a free-text instruction.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Literal, Optional

from src.core.models import PortfolioScenarioResponse, ScenarioAdjustments

_KEYWORDS = {
    "equity": "equity",
    "equities": "equity",
    "stocks": "equity",
    "stock": "equity",
    "debt": "debt",
    "bonds": "debt",
    "bond": "debt",
    "fixed": "debt",
    "income": "debt",
    "hybrid": "hybrid",
    "balanced": "hybrid",
    "multi": "hybrid",
    "cash": "cash",
    "liquidity": "cash",
    "gold": "gold",
    "commodities": "gold",
    "commodity": "gold",
}

_SHIFT_RE = re.compile(
    r"(shift|move|reallocate|transfer)\s+(\d+(?:\.\d+)?)%\s+from\s+([a-zA-Z ]+)\s+to\s+([a-zA-Z ]+)",
    re.IGNORECASE,
)
_INCREASE_RE = re.compile(
    r"(increase|raise|add)\s+([a-zA-Z ]+?)\s+(?:allocation\s+)?by\s+(\d+(?:\.\d+)?)%",
    re.IGNORECASE,
)
_DECREASE_RE = re.compile(
    r"(reduce|decrease|trim|cut)\s+([a-zA-Z ]+?)\s+(?:allocation\s+)?by\s+(\d+(?:\.\d+)?)%",
    re.IGNORECASE,
)

RISK_SHIFT_THRESHOLD = Decimal("3")
_ZERO = Decimal("0")


@dataclass(frozen=True)
class ScenarioIntent:
    kind: Literal["shift", "increase", "decrease"]
    amount: Decimal
    source: Optional[str] = None
    target: Optional[str] = None


def parse_intents(prompt: str) -> List[ScenarioIntent]:
    intents = [
        ScenarioIntent(
            kind="shift",
            amount=Decimal(match.group(2)),
            source=match.group(3).strip(),
            target=match.group(4).strip(),
        )
        for match in _SHIFT_RE.finditer(prompt)
    ]
    intents.extend(
        ScenarioIntent(kind="increase", amount=Decimal(match.group(3)), target=match.group(2).strip())
        for match in _INCREASE_RE.finditer(prompt)
    )
    intents.extend(
        ScenarioIntent(kind="decrease", amount=Decimal(match.group(3)), source=match.group(2).strip())
        for match in _DECREASE_RE.finditer(prompt)
    )
    return intents


def resolve_key(allocation: Dict[str, Decimal], label: str) -> Optional[str]:
    """Maps a free-text label onto an allocation key, exact match before substring."""
    wanted = _KEYWORDS.get(label.lower(), label).lower()
    keys = list(allocation)
    exact = next((key for key in keys if key.lower() == wanted), None)
    if exact is not None:
        return exact
    return next((key for key in keys if wanted in key.lower()), None)


def _adjust(allocation: Dict[str, Decimal], key: str, delta: Decimal) -> None:
    allocation[key] = max(_ZERO, allocation.get(key, _ZERO) + delta)


def _rebalance_remainder(allocation: Dict[str, Decimal]) -> None:
    total = sum(allocation.values(), _ZERO)
    if total in (_ZERO, Decimal("100")):
        return
    anchor = max(allocation, key=lambda key: allocation[key])
    allocation[anchor] = max(_ZERO, allocation[anchor] + (Decimal("100") - total))


def _fmt(value: Decimal) -> str:
    return format(value.normalize(), "f")


def run_scenario_analysis(
    prompt: str, base_allocation: Dict[str, Decimal]
) -> PortfolioScenarioResponse:
    allocation = dict(base_allocation)
    insights: List[str] = []
    detected: List[str] = []
    return_delta = _ZERO
    risk_tendency = _ZERO

    intents = parse_intents(prompt)
    for intent in intents:
        detected.append(intent.kind)

        if intent.kind == "shift":
            from_key = resolve_key(allocation, intent.source)
            to_key = resolve_key(allocation, intent.target)
            if from_key is None or to_key is None:
                continue
            _adjust(allocation, from_key, -intent.amount)
            _adjust(allocation, to_key, intent.amount)
            insights.append(f"Shifted {_fmt(intent.amount)}% from {from_key} to {to_key}.")
        elif intent.kind == "increase":
            to_key = resolve_key(allocation, intent.target)
            if to_key is None:
                continue
            donors = [key for key in allocation if key != to_key]
            if donors:
                largest = max(donors, key=lambda key: allocation[key])
                _adjust(allocation, largest, -intent.amount)
            _adjust(allocation, to_key, intent.amount)
            insights.append(f"Increased {to_key} by {_fmt(intent.amount)}%.")
        else:
            from_key = resolve_key(allocation, intent.source)
            if from_key is None:
                continue
            _adjust(allocation, from_key, -intent.amount)
            insights.append(f"Reduced {from_key} by {_fmt(intent.amount)}%.")
            if "equity" in from_key.lower():
                return_delta -= intent.amount * Decimal("0.03")
                risk_tendency -= intent.amount
            elif "debt" in from_key.lower():
                return_delta += intent.amount * Decimal("0.015")
                risk_tendency += intent.amount * Decimal("0.5")
            continue

        receiving = to_key.lower()
        if "equity" in receiving:
            return_delta += intent.amount * Decimal("0.04")
            risk_tendency += intent.amount
        elif "debt" in receiving or "cash" in receiving:
            return_delta -= intent.amount * Decimal("0.02")
            risk_tendency -= intent.amount

    _rebalance_remainder(allocation)

    if not insights:
        insights.append("No specific allocation shifts detected. Scenario preserves current mix.")

    if risk_tendency > RISK_SHIFT_THRESHOLD:
        risk_shift = "higher"
    elif risk_tendency < -RISK_SHIFT_THRESHOLD:
        risk_shift = "lower"
    else:
        risk_shift = "neutral"

    return PortfolioScenarioResponse(
        prompt=prompt,
        summary=insights[0],
        adjustments=ScenarioAdjustments(
            allocation=allocation,
            expected_return_delta=return_delta.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            risk_shift=risk_shift,
            confidence=Decimal("0.7") if intents else Decimal("0.4"),
        ),
        insights=insights,
        detected_intents=detected,
    )
