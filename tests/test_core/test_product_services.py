from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from order_food.core.errors import CatalogUnavailableError, ProductNotFoundError
from order_food.schemas.product_schemas import ProductRead
from order_food.services.product_services import ProductService

pytestmark = pytest.mark.asyncio

WAFFLE = ProductRead(id="1", name="Chicken Waffle", price=Decimal("9.99"), category="Waffle")


@pytest.fixture
def catalog():
    return AsyncMock()


@pytest.fixture
def service(catalog):
    return ProductService(catalog)


async def test_get_product_found(service, catalog):
    catalog.find_by_id.return_value = WAFFLE
    assert await service.get_product("1") == WAFFLE


async def test_get_product_not_found(service, catalog):
    catalog.find_by_id.return_value = None
    with pytest.raises(ProductNotFoundError) as e:
        await service.get_product("42")
    assert e.value.missing_ids == ["42"]


async def test_get_product_db_error(service, catalog):
    catalog.find_by_id.side_effect = OperationalError("SELECT", {}, Exception("down"))
    with pytest.raises(CatalogUnavailableError):
        await service.get_product("1")


async def test_list_products_offset(service, catalog):
    catalog.count.return_value = 11
    catalog.list.return_value = [WAFFLE]

    products, total = await service.list_products(page=2, per_page=10)

    assert products == [WAFFLE]
    assert total == 11
    catalog.list.assert_awaited_once_with(skip=10, limit=10)


async def test_list_products_db_error(service, catalog):
    catalog.count.side_effect = OperationalError("SELECT", {}, Exception("down"))
    with pytest.raises(CatalogUnavailableError):
        await service.list_products()
