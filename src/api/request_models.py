from typing import List

from pydantic import BaseModel, Field

from src.core.models import CartItem


class ImpactPreviewRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "cart_items": [
                    {
                        "id": "cart-1",
                        "product_id": 101,
                        "transaction_type": "Purchase",
                        "amount": "25000",
                        "category": "large_cap_equity",
                    },
                    {
                        "id": "cart-2",
                        "product_id": 205,
                        "transaction_type": "Redemption",
                        "amount": "10000",
                    },
                ]
            }
        }
    }

    cart_items: List[CartItem] = Field(
        default_factory=list,
        description=(
            "Pending order basket. Items without a category are resolved from the product "
            "catalog; switch lines do not move the allocation."
        ),
    )
