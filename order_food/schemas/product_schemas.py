from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProductRead(BaseModel):
    """Produit du catalogue, tel que vu par le moteur de prix (lecture seule)."""

    model_config = ConfigDict(
        from_attributes=True, frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: str = Field(..., description="Unique product identifier")
    name: str
    price: Decimal = Field(..., ge=0, description="Unit price")
    category: str
