from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from order_food.core.database import get_db
from order_food.repositories.product_repositories import ProductRepository
from order_food.schemas.common_schemas import Link, Page, Resource
from order_food.schemas.product_schemas import ProductRead
from order_food.services.product_services import ProductService
from order_food.utils.pagination import (
    build_pagination_links,
    build_pagination_meta,
    parse_positive_int,
)

router = APIRouter(prefix="/api/product", tags=["product"])
logger = logging.getLogger(__name__)

BASE_PATH = "/api/product"


# ---------- Dependency injection ----------
def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(ProductRepository(db))


def _product_links(product_id: str) -> list[Link]:
    return [
        Link(href=f"{BASE_PATH}/{product_id}", rel="self"),
        Link(href=BASE_PATH, rel="collection"),
    ]


# ---------- Endpoints ----------
@router.get("", response_model=Page[ProductRead])
async def list_products(
    request: Request,
    page: Optional[str] = Query(default=None),
    per_page: Optional[str] = Query(default=None, alias="perPage"),
    svc: ProductService = Depends(get_product_service),
):
    """Lister les produits (paginé, liens HATEOAS)."""
    settings = request.app.state.settings
    page_num = parse_positive_int(page, 1)
    size = min(parse_positive_int(per_page, settings.DEFAULT_PAGE_SIZE), settings.MAX_PAGE_SIZE)

    products, total = await svc.list_products(page_num, size)
    meta = build_pagination_meta(page_num, size, total)
    return Page[ProductRead](
        data=[Resource[ProductRead](data=p, links=_product_links(p.id)) for p in products],
        pagination=meta,
        links=build_pagination_links(page_num, meta.total_pages, BASE_PATH, size),
    )


@router.get("/{product_id}", response_model=Resource[ProductRead])
async def get_product(product_id: str, svc: ProductService = Depends(get_product_service)):
    """Obtenir un produit par son ID."""
    product = await svc.get_product(product_id)
    return Resource[ProductRead](data=product, links=_product_links(product_id))
