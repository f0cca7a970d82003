"""
FILE: tests/conftest.py
Shared fixtures for engine, service and API tests.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.infrastructure.reference_data import InMemoryReferenceDataRepository
from tests.factories import client_profile, product, transaction


def _has_marker(item: pytest.Item, name: str) -> bool:
    return item.get_closest_marker(name) is not None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if _has_marker(item, "unit") or _has_marker(item, "integration"):
            continue

        path = Path(str(item.fspath)).as_posix().lower()
        if "/tests/api/" in path or "_integration.py" in path:
            item.add_marker(pytest.mark.integration)
            continue
        item.add_marker(pytest.mark.unit)


FIXED_NOW = datetime(2026, 3, 16, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def catalog_products():
    return [
        product(101, "Bluechip Equity Fund", "large_cap_equity", nav="50", min_investment="5000"),
        product(
            102,
            "Emerging Midcap Fund",
            "mid_cap_equity",
            nav="80",
            min_investment="1000",
            max_investment="1000000",
            risk_level="High",
        ),
        product(201, "Corporate Bond Fund", "debt", nav="20", min_investment="1000"),
        product(301, "Balanced Advantage Fund", "hybrid", nav="40", min_investment="1000"),
        product(401, "Gold ETF FoF", "commodity", nav="15", min_investment="500"),
    ]


@pytest.fixture
def seeded_repository(catalog_products):
    repository = InMemoryReferenceDataRepository()
    for item in catalog_products:
        repository.upsert_product(item)
    repository.upsert_client(client_profile(42, risk_profile="Moderate"))
    repository.upsert_client(client_profile(7, risk_profile="Aggressive", current_value="0"))
    repository.add_transactions(
        [
            transaction(42, "Purchase", "70000", 101, "Bluechip Equity Fund", "large_cap_equity", nav="50"),
            transaction(42, "Purchase", "20000", 201, "Corporate Bond Fund", "debt", nav="20"),
            transaction(42, "Purchase", "5000", 301, "Balanced Advantage Fund", "hybrid", nav="40"),
            transaction(42, "Purchase", "5000", 401, "Gold ETF FoF", "commodity", nav="15"),
        ]
    )
    return repository
