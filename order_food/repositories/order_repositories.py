from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from order_food.models.order_models import Order as OrderRecord
from order_food.models.order_models import OrderItem as OrderItemRecord
from order_food.models.order_models import OrderProduct as OrderProductRecord
from order_food.schemas.order_schemas import Order, OrderItem
from order_food.schemas.product_schemas import ProductRead


class OrderRepository:
    """Data Access Layer for Order, OrderItem and OrderProduct models."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ---------- CREATE ----------
    async def create(self, order: Order) -> Order:
        """
        Write the order, its items and its product snapshot in one transaction.
        The identifier is a uuid4, so concurrent creations never collide.
        """
        order_id = str(uuid.uuid4())
        record = OrderRecord(
            id=order_id,
            coupon_code=order.coupon_code,
            subtotal=order.subtotal,
            discount=order.discount,
            total=order.total,
            created_at=order.created_at,
            items=[
                OrderItemRecord(position=i, product_id=item.product_id, quantity=item.quantity)
                for i, item in enumerate(order.items)
            ],
            products=[
                OrderProductRecord(
                    position=i,
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    category=product.category,
                )
                for i, product in enumerate(order.products)
            ],
        )
        self.db.add(record)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return order.model_copy(update={"id": order_id})

    # ---------- READ ----------
    async def get(self, order_id: str) -> Optional[Order]:
        """Get an order by its ID."""
        record = await self.db.get(OrderRecord, order_id)
        return self._to_schema(record) if record else None

    async def list(self, skip: int = 0, limit: int = 100) -> List[Order]:
        """List orders, most recent first."""
        result = await self.db.execute(
            select(OrderRecord)
            .order_by(OrderRecord.created_at.desc(), OrderRecord.id)
            .offset(skip)
            .limit(limit)
        )
        return [self._to_schema(record) for record in result.scalars().all()]

    async def count(self) -> int:
        return int(await self.db.scalar(select(func.count()).select_from(OrderRecord)) or 0)

    @staticmethod
    def _to_schema(record: OrderRecord) -> Order:
        return Order(
            id=record.id,
            items=[OrderItem(product_id=i.product_id, quantity=i.quantity) for i in record.items],
            products=[
                ProductRead(id=p.product_id, name=p.name, price=p.price, category=p.category)
                for p in record.products
            ],
            coupon_code=record.coupon_code,
            subtotal=record.subtotal,
            discount=record.discount,
            total=record.total,
            created_at=record.created_at,
        )
