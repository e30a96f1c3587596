from __future__ import annotations

import logging
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError

from order_food.core.errors import CatalogUnavailableError, ProductNotFoundError
from order_food.schemas.product_schemas import ProductRead
from order_food.services.contracts import ProductCatalog

logger = logging.getLogger(__name__)


class ProductService:
    """Lecture du catalogue (le catalogue n'est jamais modifié ici)."""

    def __init__(self, catalog: ProductCatalog):
        self.catalog = catalog

    async def get_product(self, product_id: str) -> ProductRead:
        try:
            product = await self.catalog.find_by_id(product_id)
        except SQLAlchemyError as exc:
            logger.error("[product.get] catalogue indisponible: %s", exc)
            raise CatalogUnavailableError("Failed to fetch product") from exc
        if product is None:
            raise ProductNotFoundError([product_id])
        return product

    async def list_products(self, page: int = 1, per_page: int = 10) -> Tuple[List[ProductRead], int]:
        try:
            total = await self.catalog.count()
            products = await self.catalog.list(skip=(page - 1) * per_page, limit=per_page)
        except SQLAlchemyError as exc:
            logger.error("[product.list] catalogue indisponible: %s", exc)
            raise CatalogUnavailableError("Failed to fetch products") from exc
        return products, total
