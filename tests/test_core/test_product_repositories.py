from decimal import Decimal

import pytest

from order_food.repositories.coupon_repositories import CouponRepository
from order_food.repositories.product_repositories import ProductRepository

pytestmark = pytest.mark.asyncio


@pytest.fixture
def catalog(seed_product):
    seed_product("2", "Pancakes", "4.50", "Pancakes")
    seed_product("1", "Chicken Waffle", "9.99", "Waffle")
    seed_product("3", "Lemon Tart", "0.10", "Tart")


# ----- ProductRepository -----
async def test_find_by_id(db, catalog):
    product = await ProductRepository(db).find_by_id("1")

    assert product.id == "1"
    assert product.name == "Chicken Waffle"
    assert product.price == Decimal("9.99")
    assert product.category == "Waffle"


async def test_find_by_id_unknown(db, catalog):
    assert await ProductRepository(db).find_by_id("999") is None


async def test_list_ordered_by_id(db, catalog):
    repo = ProductRepository(db)

    assert [p.id for p in await repo.list()] == ["1", "2", "3"]
    assert [p.id for p in await repo.list(skip=1, limit=1)] == ["2"]
    assert await repo.count() == 3


async def test_empty_catalog(db):
    repo = ProductRepository(db)
    assert await repo.list() == []
    assert await repo.count() == 0


# ----- CouponRepository -----
async def test_count_sources_distinct_files(db, seed_coupon):
    seed_coupon("HAPPYHRS", "couponbase1", "couponbase2")
    seed_coupon("FIFTYOFF", "couponbase3")

    repo = CouponRepository(db)

    assert await repo.count_sources("HAPPYHRS") == 2
    assert await repo.count_sources("FIFTYOFF") == 1
    assert await repo.count_sources("UNKNOWN1") == 0
