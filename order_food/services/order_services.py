# order_food/services/order_services.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from order_food.core.errors import (
    CatalogUnavailableError,
    InvalidPromoCodeError,
    OrderFoodError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
    ValidatorUnavailableError,
)
from order_food.schemas.order_schemas import Order, OrderItem, OrderRequest
from order_food.schemas.product_schemas import ProductRead
from order_food.services.contracts import OrderStore, ProductCatalog, PromoCodeValidator
from order_food.services.pricing import compute_subtotal

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrderService:
    """
    Couche métier pour les commandes.
    - Valide la requête sans aucune I/O, puis résout les produits au catalogue.
    - Calcule le total en Decimal et applique le code promo éventuel.
    - Ne renvoie une commande qu'après son écriture par le store.
    """

    def __init__(self, catalog: ProductCatalog, promo_codes: PromoCodeValidator, store: OrderStore):
        self.catalog = catalog
        self.promo_codes = promo_codes
        self.store = store

    # ==========================================================
    # === Prise de commande ====================================
    # ==========================================================

    async def place_order(self, request: OrderRequest, timeout: Optional[float] = None) -> Order:
        """
        Valide, résout, chiffre puis persiste une commande (tout ou rien).

        `timeout` est un budget global en secondes pour l'appel ; chaque accès
        au catalogue et au validateur est borné par le temps restant ; l'écriture
        ne démarre que s'il reste du budget.
        """
        self.validate_request(request)

        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        products = await self._resolve_products(request.items, deadline)
        by_id = {product.id: product for product in products}
        subtotal = compute_subtotal(request.items, by_id)

        total = subtotal
        coupon_code = request.coupon_code or None
        if coupon_code:
            check = await self._bounded(
                deadline, ValidatorUnavailableError, "promo code validation",
                self.promo_codes.validate, coupon_code,
            )
            if not check.valid or check.effect is None:
                logger.info("[order.place] code promo refusé", extra={"coupon_code": coupon_code})
                raise InvalidPromoCodeError(coupon_code)
            total = check.effect.apply(subtotal)

        draft = Order(
            items=request.items,
            products=products,
            coupon_code=coupon_code,
            subtotal=subtotal,
            discount=subtotal - total,
            total=total,
            created_at=datetime.now(timezone.utc),
        )

        order = await self._persist(deadline, draft)
        if not order.id:
            raise PersistenceError("Order store did not assign an identifier")

        logger.info(
            "[order.place] order %s persisted",
            order.id,
            extra={"order_id": order.id, "total": str(order.total), "items": len(order.items)},
        )
        return order

    @staticmethod
    def validate_request(request: OrderRequest) -> None:
        """Règles sémantiques, revérifiées même si la couche HTTP l'a déjà fait."""
        if not request.items:
            raise ValidationError(["order must contain at least one item"])

        problems = []
        for index, item in enumerate(request.items):
            if not item.product_id or not item.product_id.strip():
                problems.append(f"items[{index}].productId must not be empty")
            if item.quantity < 1:
                problems.append(f"items[{index}].quantity must be at least 1")
        if problems:
            raise ValidationError(problems)

    async def _resolve_products(
        self, items: Tuple[OrderItem, ...], deadline: Optional[float]
    ) -> List[ProductRead]:
        # un seul lookup par produit distinct, dans l'ordre de première apparition
        wanted = list(dict.fromkeys(item.product_id for item in items))

        found: Dict[str, ProductRead] = {}
        missing: List[str] = []
        for product_id in wanted:
            product = await self._bounded(
                deadline, CatalogUnavailableError, "catalog lookup",
                self.catalog.find_by_id, product_id,
            )
            if product is None:
                missing.append(product_id)
            else:
                found[product_id] = product

        if missing:
            logger.info("[order.place] produits introuvables", extra={"missing": missing})
            raise ProductNotFoundError(missing)

        return [found[product_id] for product_id in wanted]

    async def _persist(self, deadline: Optional[float], draft: Order) -> Order:
        """
        Le budget n'est vérifié qu'avant l'écriture : un commit lancé est
        toujours attendu jusqu'au bout, puis renvoyé ou signalé en erreur.
        """
        if deadline is not None and deadline - asyncio.get_running_loop().time() <= 0:
            logger.warning("[order.place] order persistence timed out before write")
            raise PersistenceError("order persistence timed out")
        return await self._bounded(None, PersistenceError, "order persistence", self.store.create, draft)

    async def _bounded(
        self,
        deadline: Optional[float],
        error_cls: Type[OrderFoodError],
        step: str,
        func: Callable[..., Awaitable[T]],
        *args,
    ) -> T:
        """Exécute un appel collaborateur dans le budget restant ; traduit ses échecs."""
        remaining = None
        if deadline is not None:
            remaining = deadline - asyncio.get_running_loop().time()
            if remaining <= 0:
                raise error_cls(f"{step} timed out")

        try:
            return await asyncio.wait_for(func(*args), remaining)
        except asyncio.TimeoutError as exc:
            logger.warning("[order.place] %s timed out", step)
            raise error_cls(f"{step} timed out") from exc
        except OrderFoodError:
            raise
        except Exception as exc:
            logger.exception("[order.place] %s failed", step)
            raise error_cls(f"{step} failed") from exc

    # ==========================================================
    # === Lecture ==============================================
    # ==========================================================

    async def get_order(self, order_id: str) -> Order:
        try:
            order = await self.store.get(order_id)
        except OrderFoodError:
            raise
        except Exception as exc:
            raise PersistenceError("Failed to read order") from exc
        if order is None:
            logger.debug("order introuvable", extra={"order_id": order_id})
            raise OrderNotFoundError(order_id)
        return order

    async def list_orders(self, page: int = 1, per_page: int = 10) -> Tuple[List[Order], int]:
        try:
            total = await self.store.count()
            orders = await self.store.list(skip=(page - 1) * per_page, limit=per_page)
        except OrderFoodError:
            raise
        except Exception as exc:
            raise PersistenceError("Failed to fetch orders") from exc
        return orders, total
