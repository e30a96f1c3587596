import asyncio
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import OperationalError

from order_food.core.errors import (
    CatalogUnavailableError,
    InvalidPromoCodeError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
    ValidatorUnavailableError,
)
from order_food.schemas.order_schemas import OrderItem, OrderRequest
from order_food.schemas.product_schemas import ProductRead
from order_food.services.order_services import OrderService
from order_food.services.pricing import DiscountEffect, PromoCheck

pytestmark = pytest.mark.asyncio


PRODUCTS = {
    "1": ProductRead(id="1", name="Chicken Waffle", price=Decimal("9.99"), category="Waffle"),
    "2": ProductRead(id="2", name="Pancakes", price=Decimal("4.50"), category="Pancakes"),
    "3": ProductRead(id="3", name="Lemon Tart", price=Decimal("0.10"), category="Tart"),
}


def _request(*lines, coupon_code=None):
    return OrderRequest(
        coupon_code=coupon_code,
        items=[OrderItem(product_id=pid, quantity=qty) for pid, qty in lines],
    )


@pytest.fixture
def catalog():
    catalog = AsyncMock()
    catalog.find_by_id.side_effect = lambda product_id: PRODUCTS.get(product_id)
    return catalog


@pytest.fixture
def promo_codes():
    promo = AsyncMock()
    promo.validate.return_value = PromoCheck(valid=True, effect=DiscountEffect.percentage(10))
    return promo


@pytest.fixture
def store():
    store = AsyncMock()
    store.create.side_effect = lambda order: order.model_copy(update={"id": str(uuid.uuid4())})
    return store


@pytest.fixture
def service(catalog, promo_codes, store):
    return OrderService(catalog, promo_codes, store)


# ==========================================================
# place_order : succès
# ==========================================================

async def test_place_order_without_coupon(service, catalog, promo_codes, store):
    order = await service.place_order(_request(("1", 2), ("2", 1)))

    assert order.id
    assert [p.id for p in order.products] == ["1", "2"]
    assert order.subtotal == Decimal("24.48")
    assert order.discount == Decimal("0.00")
    assert order.total == Decimal("24.48")
    assert order.coupon_code is None
    promo_codes.validate.assert_not_awaited()
    store.create.assert_awaited_once()


async def test_place_order_keeps_items_and_dedups_products(service, catalog):
    order = await service.place_order(_request(("2", 1), ("1", 2), ("2", 3)))

    assert [(i.product_id, i.quantity) for i in order.items] == [("2", 1), ("1", 2), ("2", 3)]
    assert [p.id for p in order.products] == ["2", "1"]
    assert order.subtotal == Decimal("4.50") * 4 + Decimal("9.99") * 2
    # un lookup par produit distinct
    assert catalog.find_by_id.await_count == 2


async def test_place_order_exact_decimal_sum(service):
    # 0.10 x 3 vaut exactement 0.30 (0.30000000000000004 en float)
    order = await service.place_order(_request(("3", 3)))
    assert order.total == Decimal("0.30")


async def test_place_order_with_percentage_coupon(service, promo_codes):
    order = await service.place_order(_request(("1", 2), coupon_code="HAPPYHRS"))

    promo_codes.validate.assert_awaited_once_with("HAPPYHRS")
    assert order.subtotal == Decimal("19.98")
    assert order.discount == Decimal("2.00")
    assert order.total == Decimal("17.98")
    assert order.coupon_code == "HAPPYHRS"


@pytest.mark.parametrize("price, total", [
    ("0.15", "0.14"),
    ("9.15", "8.24"),
    ("4.55", "4.10"),
    ("0.05", "0.05"),
    ("19.98", "17.98"),
])
async def test_place_order_ten_percent_on_half_cents(service, catalog, price, total):
    # total = sous-total x 0.90 arrondi au centime, la remise en découle
    catalog.find_by_id.side_effect = lambda product_id: ProductRead(
        id=product_id, name="Item", price=Decimal(price), category="Misc"
    )
    order = await service.place_order(_request(("x", 1), coupon_code="HAPPYHRS"))

    assert order.total == Decimal(total)
    assert order.discount == Decimal(price) - Decimal(total)
    assert order.subtotal == order.total + order.discount


async def test_place_order_with_fixed_coupon_never_negative(service, promo_codes):
    promo_codes.validate.return_value = PromoCheck(valid=True, effect=DiscountEffect.fixed("50"))
    order = await service.place_order(_request(("2", 1), coupon_code="BIGSAVER1"))

    assert order.discount == Decimal("4.50")
    assert order.total == Decimal("0.00")


async def test_place_order_empty_coupon_is_ignored(service, promo_codes):
    order = await service.place_order(_request(("1", 1), coupon_code=""))
    promo_codes.validate.assert_not_awaited()
    assert order.coupon_code is None


async def test_placed_order_is_immutable(service):
    order = await service.place_order(_request(("1", 1)))
    with pytest.raises(PydanticValidationError):
        order.total = Decimal("0")


# ==========================================================
# place_order : validation (aucune I/O)
# ==========================================================

async def test_place_order_empty_items(service, catalog, store):
    with pytest.raises(ValidationError):
        await service.place_order(_request())

    catalog.find_by_id.assert_not_awaited()
    store.create.assert_not_awaited()


@pytest.mark.parametrize("quantity", [0, -1])
async def test_place_order_bad_quantity(service, catalog, store, quantity):
    with pytest.raises(ValidationError) as e:
        await service.place_order(_request(("1", 1), ("2", quantity)))

    assert "items[1].quantity" in e.value.message
    catalog.find_by_id.assert_not_awaited()
    store.create.assert_not_awaited()


async def test_place_order_reports_every_bad_item(service, catalog):
    with pytest.raises(ValidationError) as e:
        await service.place_order(_request(("", 1), ("2", 0)))

    assert len(e.value.problems) == 2
    catalog.find_by_id.assert_not_awaited()


# ==========================================================
# place_order : résolution / promo / persistance
# ==========================================================

async def test_place_order_unknown_product(service, store):
    with pytest.raises(ProductNotFoundError) as e:
        await service.place_order(_request(("1", 1), ("nope", 1), ("ghost", 2)))

    assert e.value.missing_ids == ["nope", "ghost"]
    store.create.assert_not_awaited()


async def test_place_order_invalid_coupon(service, promo_codes, store):
    promo_codes.validate.return_value = PromoCheck(valid=False)

    with pytest.raises(InvalidPromoCodeError) as e:
        await service.place_order(_request(("1", 1), coupon_code="SAVE10"))

    assert e.value.code == "SAVE10"
    store.create.assert_not_awaited()


async def test_place_order_validator_unavailable(service, promo_codes, store):
    promo_codes.validate.side_effect = ValidatorUnavailableError("down")

    with pytest.raises(ValidatorUnavailableError):
        await service.place_order(_request(("1", 1), coupon_code="HAPPYHRS"))
    store.create.assert_not_awaited()


async def test_place_order_validator_crash_is_unavailable(service, promo_codes):
    promo_codes.validate.side_effect = RuntimeError("boom")

    with pytest.raises(ValidatorUnavailableError):
        await service.place_order(_request(("1", 1), coupon_code="HAPPYHRS"))


async def test_place_order_catalog_failure(service, catalog, store):
    catalog.find_by_id.side_effect = OperationalError("SELECT", {}, Exception("db gone"))

    with pytest.raises(CatalogUnavailableError):
        await service.place_order(_request(("1", 1)))
    store.create.assert_not_awaited()


async def test_place_order_store_failure(service, store):
    store.create.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

    with pytest.raises(PersistenceError):
        await service.place_order(_request(("1", 1)))


async def test_place_order_store_without_id(service, store):
    store.create.side_effect = lambda order: order

    with pytest.raises(PersistenceError):
        await service.place_order(_request(("1", 1)))


# ==========================================================
# place_order : timeout
# ==========================================================

async def test_place_order_catalog_timeout(service, catalog, store):
    async def slow_lookup(product_id):
        await asyncio.sleep(1)
        return PRODUCTS[product_id]

    catalog.find_by_id.side_effect = slow_lookup

    with pytest.raises(CatalogUnavailableError):
        await service.place_order(_request(("1", 1)), timeout=0.05)
    store.create.assert_not_awaited()


async def test_place_order_late_commit_is_returned(service, store):
    committed = []

    async def commit_then_answer_late(order):
        saved = order.model_copy(update={"id": "abc"})
        committed.append(saved)
        await asyncio.sleep(0.2)
        return saved

    store.create.side_effect = commit_then_answer_late

    order = await service.place_order(_request(("1", 1)), timeout=0.05)

    # une commande écrite est toujours renvoyée à l'appelant
    assert committed == [order]


async def test_persist_with_exhausted_budget_never_writes(service, store):
    draft = (await service.place_order(_request(("1", 1)))).model_copy(update={"id": None})
    store.create.reset_mock()
    expired = asyncio.get_running_loop().time() - 1

    with pytest.raises(PersistenceError):
        await service._persist(expired, draft)
    store.create.assert_not_awaited()


async def test_place_order_cancelled_during_write(service, store):
    started = asyncio.Event()
    committed = []

    async def never_ending_create(order):
        started.set()
        await asyncio.sleep(10)
        committed.append(order)
        return order.model_copy(update={"id": "never"})

    store.create.side_effect = never_ending_create

    task = asyncio.create_task(service.place_order(_request(("1", 1)), timeout=5))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert committed == []


async def test_place_order_within_timeout(service):
    order = await service.place_order(_request(("1", 1)), timeout=5)
    assert order.id


# ==========================================================
# concurrence
# ==========================================================

async def test_concurrent_placements_get_distinct_ids(service, store):
    first, second = await asyncio.gather(
        service.place_order(_request(("1", 1))),
        service.place_order(_request(("2", 2))),
    )
    assert first.id != second.id
    assert store.create.await_count == 2


# ==========================================================
# get_order / list_orders
# ==========================================================

async def test_get_order_found(service, store):
    placed = await service.place_order(_request(("1", 1)))
    store.get.return_value = placed

    result = await service.get_order(placed.id)
    assert result is placed


async def test_get_order_not_found(service, store):
    store.get.return_value = None
    with pytest.raises(OrderNotFoundError):
        await service.get_order("missing")


async def test_list_orders_pagination(service, store):
    store.count.return_value = 25
    store.list.return_value = ["a", "b"]

    orders, total = await service.list_orders(page=3, per_page=10)

    assert orders == ["a", "b"]
    assert total == 25
    store.list.assert_awaited_once_with(skip=20, limit=10)
