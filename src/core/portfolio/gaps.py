"""
FILE: src/core/portfolio/gaps.py
Deviation of the current allocation from a target allocation.
"""

import re
from decimal import Decimal
from typing import Dict, List, Optional

from src.core.models import (
    ALLOCATION_BUCKETS,
    AllocationGap,
    PortfolioAllocation,
    Priority,
    TargetAllocation,
)

_CONSERVATIVE = TargetAllocation(
    equity=Decimal("35"), debt=Decimal("40"), hybrid=Decimal("20"), others=Decimal("5")
)
_MODERATE = TargetAllocation(
    equity=Decimal("50"), debt=Decimal("30"), hybrid=Decimal("15"), others=Decimal("5")
)
_MODERATELY_AGGRESSIVE = TargetAllocation(
    equity=Decimal("65"), debt=Decimal("20"), hybrid=Decimal("10"), others=Decimal("5")
)
_AGGRESSIVE = TargetAllocation(
    equity=Decimal("75"), debt=Decimal("15"), hybrid=Decimal("5"), others=Decimal("5")
)

RISK_PROFILE_TARGETS: Dict[str, TargetAllocation] = {
    "conservative": _CONSERVATIVE,
    "very conservative": _CONSERVATIVE,
    "moderate": _MODERATE,
    "moderately aggressive": _MODERATELY_AGGRESSIVE,
    "aggressive": _AGGRESSIVE,
    "very aggressive": _AGGRESSIVE,
}

HIGH_PRIORITY_GAP = Decimal("10")
MEDIUM_PRIORITY_GAP = Decimal("5")


def _normalize_profile(profile: str) -> str:
    return re.sub(r"[\s_\-]+", " ", profile.strip().lower())


def target_for_risk_profile(risk_profile: Optional[str]) -> TargetAllocation:
    """Default target mix for a risk-profile tier; unknown tiers get the moderate mix."""
    if not risk_profile:
        return _MODERATE.model_copy()
    return RISK_PROFILE_TARGETS.get(_normalize_profile(risk_profile), _MODERATE).model_copy()


def gap_priority(gap: Decimal) -> Priority:
    magnitude = abs(gap)
    if magnitude > HIGH_PRIORITY_GAP:
        return "High"
    if magnitude > MEDIUM_PRIORITY_GAP:
        return "Medium"
    return "Low"


def analyze_gaps(current: PortfolioAllocation, target: PortfolioAllocation) -> List[AllocationGap]:
    gaps: List[AllocationGap] = []
    for bucket in ALLOCATION_BUCKETS:
        current_weight = current.get(bucket)
        target_weight = target.get(bucket)
        gap = target_weight - current_weight
        verb = "Increase" if target_weight > current_weight else "Reduce"
        gaps.append(
            AllocationGap(
                category=bucket,
                current=current_weight,
                target=target_weight,
                gap=gap,
                priority=gap_priority(gap),
                recommendation=f"{verb} {bucket} allocation by {abs(gap):.1f}%",
            )
        )
    return gaps
