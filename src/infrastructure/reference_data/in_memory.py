from copy import deepcopy
from threading import Lock
from typing import Iterable, Optional, Sequence

from src.core.models import ClientProfile, Product, Transaction
from src.core.reference_data import ReferenceDataRepository


class InMemoryReferenceDataRepository(ReferenceDataRepository):
    def __init__(self) -> None:
        self._lock = Lock()
        self._clients: dict[int, ClientProfile] = {}
        self._products: dict[int, Product] = {}
        self._transactions: dict[int, list[Transaction]] = {}

    def upsert_client(self, client: ClientProfile) -> None:
        with self._lock:
            self._clients[client.id] = deepcopy(client)

    def upsert_product(self, product: Product) -> None:
        with self._lock:
            self._products[product.id] = deepcopy(product)

    def add_transactions(self, transactions: Iterable[Transaction]) -> None:
        with self._lock:
            for transaction in transactions:
                self._transactions.setdefault(transaction.client_id, []).append(
                    deepcopy(transaction)
                )

    def get_client(self, *, client_id: int) -> Optional[ClientProfile]:
        with self._lock:
            client = self._clients.get(client_id)
            return deepcopy(client) if client is not None else None

    def list_transactions(self, *, client_id: int) -> list[Transaction]:
        with self._lock:
            return deepcopy(self._transactions.get(client_id, []))

    def get_product(self, *, product_id: int) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            return deepcopy(product) if product is not None else None

    def list_products(self, *, product_ids: Sequence[int]) -> list[Product]:
        with self._lock:
            return [
                deepcopy(self._products[product_id])
                for product_id in product_ids
                if product_id in self._products
            ]
