from contextlib import closing
from decimal import Decimal
from importlib.util import find_spec
from typing import Any, Optional, Sequence

from src.core.models import ClientProfile, Product, Transaction


class PostgresReferenceDataRepository:
    """Read-only access to the client, product and transaction tables."""

    def __init__(self, *, dsn: str) -> None:
        if not dsn:
            raise RuntimeError("REFERENCE_DATA_POSTGRES_DSN_REQUIRED")
        if find_spec("psycopg") is None:
            raise RuntimeError("REFERENCE_DATA_POSTGRES_DRIVER_MISSING")
        self._dsn = dsn

    def get_client(self, *, client_id: int) -> Optional[ClientProfile]:
        query = """
            SELECT
                id,
                full_name,
                risk_profile,
                current_value
            FROM clients
            WHERE id = %s
        """
        with closing(self._connect()) as connection:
            row = connection.execute(query, (client_id,)).fetchone()
        if row is None:
            return None
        return ClientProfile(
            id=int(row["id"]),
            name=row["full_name"],
            risk_profile=row["risk_profile"],
            current_value=_optional_decimal(row["current_value"]),
        )

    def list_transactions(self, *, client_id: int) -> list[Transaction]:
        query = """
            SELECT
                t.id,
                t.client_id,
                t.transaction_type,
                t.amount,
                t.product_id,
                p.scheme_name AS product_name,
                p.category AS product_category,
                t.nav,
                t.quantity,
                t.transaction_date
            FROM transactions t
            LEFT JOIN products p ON p.id = t.product_id
            WHERE t.client_id = %s
            ORDER BY t.transaction_date ASC, t.id ASC
        """
        with closing(self._connect()) as connection:
            rows = connection.execute(query, (client_id,)).fetchall()
        return [_to_transaction(row) for row in rows]

    def get_product(self, *, product_id: int) -> Optional[Product]:
        query = f"""
            SELECT {_PRODUCT_COLUMNS}
            FROM products
            WHERE id = %s
        """
        with closing(self._connect()) as connection:
            row = connection.execute(query, (product_id,)).fetchone()
        return _to_product(row) if row is not None else None

    def list_products(self, *, product_ids: Sequence[int]) -> list[Product]:
        if not product_ids:
            return []
        query = f"""
            SELECT {_PRODUCT_COLUMNS}
            FROM products
            WHERE id = ANY(%s)
            ORDER BY id ASC
        """
        with closing(self._connect()) as connection:
            rows = connection.execute(query, (list(product_ids),)).fetchall()
        return [_to_product(row) for row in rows]

    def _connect(self):
        psycopg, dict_row = _import_psycopg()
        return psycopg.connect(self._dsn, row_factory=dict_row)


_PRODUCT_COLUMNS = """
                id,
                scheme_name,
                category,
                nav,
                min_investment,
                max_investment,
                risk_level,
                is_whitelisted
"""


def _import_psycopg():
    import psycopg
    from psycopg.rows import dict_row

    return psycopg, dict_row


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def _to_product(row: dict[str, Any]) -> Product:
    return Product(
        id=int(row["id"]),
        scheme_name=row["scheme_name"],
        category=row["category"],
        nav=_optional_decimal(row["nav"]) or Decimal("0"),
        min_investment=_optional_decimal(row["min_investment"]) or Decimal("0"),
        max_investment=_optional_decimal(row["max_investment"]),
        risk_level=row["risk_level"] or "Moderate",
        is_whitelisted=bool(row["is_whitelisted"]) if row["is_whitelisted"] is not None else True,
    )


def _to_transaction(row: dict[str, Any]) -> Transaction:
    return Transaction(
        id=row["id"],
        client_id=int(row["client_id"]),
        transaction_type=row["transaction_type"],
        amount=_optional_decimal(row["amount"]) or Decimal("0"),
        product_id=row["product_id"],
        product_name=row["product_name"],
        product_category=row["product_category"],
        nav=_optional_decimal(row["nav"]),
        quantity=_optional_decimal(row["quantity"]),
        transaction_date=row["transaction_date"],
    )
