from typing import Optional, Protocol, Sequence

from src.core.models import ClientProfile, Product, Transaction


class ReferenceDataRepository(Protocol):
    def get_client(self, *, client_id: int) -> Optional[ClientProfile]: ...

    def list_transactions(self, *, client_id: int) -> list[Transaction]: ...

    def get_product(self, *, product_id: int) -> Optional[Product]: ...

    def list_products(self, *, product_ids: Sequence[int]) -> list[Product]: ...
