from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from order_food.schemas.product_schemas import ProductRead

_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class OrderItem(BaseModel):
    """
    Ligne demandée. Seule la forme est vérifiée ici ; les règles
    (productId non vide, quantity >= 1) sont revérifiées par OrderService.
    """

    model_config = _CONFIG

    product_id: str = Field(..., description="ID of the product")
    quantity: int = Field(..., description="Quantity of the product")


class OrderRequest(BaseModel):
    model_config = _CONFIG

    coupon_code: Optional[str] = Field(default=None, description="Optional promo code")
    items: Tuple[OrderItem, ...]


class Order(BaseModel):
    """Commande chiffrée. `id` est attribué par le store lors de la création."""

    model_config = _CONFIG

    id: Optional[str] = None
    items: Tuple[OrderItem, ...]
    products: Tuple[ProductRead, ...]
    coupon_code: Optional[str] = None
    subtotal: Decimal
    discount: Decimal = Decimal("0.00")
    total: Decimal
    created_at: datetime
