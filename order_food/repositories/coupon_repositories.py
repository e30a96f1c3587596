from __future__ import annotations

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from order_food.models.coupon_models import Coupon


class CouponRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_sources(self, code: str) -> int:
        """Nombre de fichiers distincts dans lesquels le code apparaît."""
        stmt = select(func.count(distinct(Coupon.file_name))).where(Coupon.coupon == code)
        return int(await self.db.scalar(stmt) or 0)
