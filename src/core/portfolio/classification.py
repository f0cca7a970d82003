"""
Maps free-text product categories onto the four allocation buckets.
"""

from typing import Optional, Tuple

from src.core.models import AllocationBucket

_BUCKET_KEYWORDS: Tuple[Tuple[AllocationBucket, Tuple[str, ...]], ...] = (
    (
        "equity",
        ("equity", "large_cap", "mid_cap", "small_cap", "multi_cap", "thematic", "elss"),
    ),
    ("debt", ("debt", "bond", "fixed_deposit", "fd")),
    ("hybrid", ("hybrid", "balanced", "aggressive")),
)


def classify_category(category: Optional[str]) -> AllocationBucket:
    if not category:
        return "others"

    normalized = category.lower()
    # First bucket wins: "aggressive hybrid equity" is equity.
    for bucket, keywords in _BUCKET_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return bucket
    return "others"
