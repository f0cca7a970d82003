import os
from decimal import Decimal, InvalidOperation
from typing import Optional


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_decimal(name: str) -> Optional[Decimal]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() and parsed >= 0 else None
