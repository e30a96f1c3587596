from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from order_food.core.database import get_db
from order_food.core.errors import OrderFoodError
from order_food.core.metrics import ORDERS_PLACED
from order_food.repositories.coupon_repositories import CouponRepository
from order_food.repositories.order_repositories import OrderRepository
from order_food.repositories.product_repositories import ProductRepository
from order_food.schemas.common_schemas import Link, Page, Resource
from order_food.schemas.order_schemas import Order, OrderRequest
from order_food.security.security import require_api_key
from order_food.services.order_services import OrderService
from order_food.services.promo_code_services import PromoCodeService
from order_food.utils.pagination import (
    build_pagination_links,
    build_pagination_meta,
    parse_positive_int,
)

router = APIRouter(prefix="/api/order", tags=["order"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)

BASE_PATH = "/api/order"


# ---------- Dependency injection ----------
def get_order_service(request: Request, db: AsyncSession = Depends(get_db)) -> OrderService:
    """Construit un OrderService avec catalogue + validateur promo + store."""
    settings = request.app.state.settings
    promo_codes = PromoCodeService.from_settings(CouponRepository(db), settings)
    return OrderService(ProductRepository(db), promo_codes, OrderRepository(db))


def _order_links(order_id: str) -> list[Link]:
    return [
        Link(href=f"{BASE_PATH}/{order_id}", rel="self"),
        Link(href=BASE_PATH, rel="collection"),
        Link(href="/api/product", rel="products"),
    ]


# ---------- Endpoints ----------
@router.post("", response_model=Resource[Order], status_code=status.HTTP_201_CREATED)
async def place_order(
    order_in: OrderRequest,
    request: Request,
    svc: OrderService = Depends(get_order_service),
):
    """Passer une commande. Nécessite la clé API."""
    timeout = request.app.state.settings.ORDER_TIMEOUT_SECONDS
    try:
        order = await svc.place_order(order_in, timeout=timeout)
    except OrderFoodError as exc:
        ORDERS_PLACED.labels(exc.error_code).inc()
        raise
    ORDERS_PLACED.labels("success").inc()
    return Resource[Order](data=order, links=_order_links(order.id))


@router.get("", response_model=Page[Order])
async def list_orders(
    request: Request,
    page: Optional[str] = Query(default=None),
    per_page: Optional[str] = Query(default=None, alias="perPage"),
    svc: OrderService = Depends(get_order_service),
):
    """Lister les commandes, les plus récentes d'abord."""
    settings = request.app.state.settings
    page_num = parse_positive_int(page, 1)
    size = min(parse_positive_int(per_page, settings.DEFAULT_PAGE_SIZE), settings.MAX_PAGE_SIZE)

    orders, total = await svc.list_orders(page_num, size)
    meta = build_pagination_meta(page_num, size, total)
    return Page[Order](
        data=[
            Resource[Order](data=o, links=_order_links(o.id)[:2]) for o in orders
        ],
        pagination=meta,
        links=build_pagination_links(page_num, meta.total_pages, BASE_PATH, size),
    )


@router.get("/{order_id}", response_model=Resource[Order])
async def get_order(order_id: str, svc: OrderService = Depends(get_order_service)):
    """Obtenir une commande par son ID."""
    order = await svc.get_order(order_id)
    return Resource[Order](data=order, links=_order_links(order_id))
