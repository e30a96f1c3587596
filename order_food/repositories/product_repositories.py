from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from order_food.models.product_models import Product
from order_food.schemas.product_schemas import ProductRead


class ProductRepository:
    """Data Access Layer du catalogue (lecture seule)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, product_id: str) -> Optional[ProductRead]:
        """Get a product by its ID, None if it is not cataloged."""
        product = await self.db.get(Product, product_id)
        return ProductRead.model_validate(product) if product else None

    async def list(self, skip: int = 0, limit: int = 100) -> List[ProductRead]:
        result = await self.db.execute(
            select(Product).order_by(Product.id).offset(skip).limit(limit)
        )
        return [ProductRead.model_validate(p) for p in result.scalars().all()]

    async def count(self) -> int:
        return int(await self.db.scalar(select(func.count()).select_from(Product)) or 0)
