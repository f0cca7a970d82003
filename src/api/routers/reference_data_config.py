import os
from typing import cast

from src.api.routers.runtime_utils import env_decimal, env_flag
from src.core.models import OrderEconomicsOptions
from src.core.reference_data import ReferenceDataRepository
from src.infrastructure.reference_data import (
    InMemoryReferenceDataRepository,
    PostgresReferenceDataRepository,
)

_OPTION_ENV_VARS = {
    "exit_load_rate": "REDEMPTION_EXIT_LOAD_RATE",
    "tds_rate": "REDEMPTION_TDS_RATE",
    "instant_redemption_min_amount": "INSTANT_REDEMPTION_MIN_AMOUNT",
    "instant_redemption_max_amount": "INSTANT_REDEMPTION_MAX_AMOUNT",
}


def reference_data_backend_name() -> str:
    backend = os.getenv("REFERENCE_DATA_BACKEND", "IN_MEMORY").strip().upper()
    if backend == "POSTGRES":
        return "POSTGRES"
    return "IN_MEMORY"


def reference_data_postgres_dsn() -> str:
    return os.getenv("REFERENCE_DATA_POSTGRES_DSN", "").strip()


def _postgres_connection_exception_types() -> tuple[type[BaseException], ...]:
    types: list[type[BaseException]] = [
        ConnectionError,
        OSError,
        TimeoutError,
        TypeError,
        ValueError,
    ]
    try:
        import psycopg
    except ImportError:
        pass
    else:
        types.append(psycopg.Error)
    return tuple(types)


def build_repository() -> ReferenceDataRepository:
    backend = reference_data_backend_name()
    if backend == "POSTGRES":
        dsn = reference_data_postgres_dsn()
        if not dsn:
            raise RuntimeError("REFERENCE_DATA_POSTGRES_DSN_REQUIRED")
        try:
            return cast(ReferenceDataRepository, PostgresReferenceDataRepository(dsn=dsn))
        except RuntimeError:
            raise
        except _postgres_connection_exception_types() as exc:
            raise RuntimeError("REFERENCE_DATA_POSTGRES_CONNECTION_FAILED") from exc
    return cast(ReferenceDataRepository, InMemoryReferenceDataRepository())


def build_order_economics_options() -> OrderEconomicsOptions:
    overrides = {}
    for field_name, env_name in _OPTION_ENV_VARS.items():
        value = env_decimal(env_name)
        if value is not None:
            overrides[field_name] = value
    overrides["compliance_advisors_enabled"] = env_flag(
        "ORDER_COMPLIANCE_ADVISORS_ENABLED", True
    )
    return OrderEconomicsOptions(**overrides)
