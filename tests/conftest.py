import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from order_food.core.config import Settings
from order_food.core.database import Base, build_engine, build_session_factory
from order_food.models.coupon_models import Coupon
from order_food.models.order_models import Order, OrderItem, OrderProduct  # noqa: F401
from order_food.models.product_models import Product


@pytest.fixture
def db_path(tmp_path):
	return tmp_path / "order_food_test.db"


@pytest.fixture
def settings(db_path):
	return Settings(
		DATABASE_URL=f"sqlite+aiosqlite:///{db_path}",
		API_KEY="test-key",
		LOG_FORMAT="text",
		LOG_LEVEL="WARNING",
	)


@pytest.fixture
def sync_engine(db_path):
	"""Engine synchrone sur le même fichier, pour préparer les données."""
	engine = create_engine(f"sqlite:///{db_path}")
	Base.metadata.create_all(bind=engine)
	yield engine
	Base.metadata.drop_all(bind=engine)
	engine.dispose()


@pytest.fixture
def seed_product(sync_engine):
	def _seed(product_id, name, price, category):
		with Session(sync_engine) as s:
			s.add(Product(id=product_id, name=name, price=Decimal(price), category=category))
			s.commit()
	return _seed


@pytest.fixture
def seed_coupon(sync_engine):
	def _seed(code, *file_names):
		with Session(sync_engine) as s:
			for file_name in file_names:
				s.add(Coupon(coupon=code, file_name=file_name))
			s.commit()
	return _seed


@pytest.fixture
async def session_factory(settings, sync_engine):
	engine = build_engine(settings)
	yield build_session_factory(engine)
	await engine.dispose()


@pytest.fixture
async def db(session_factory):
	async with session_factory() as session:
		yield session
