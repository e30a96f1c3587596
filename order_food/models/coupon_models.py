from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from order_food.core.database import Base


class Coupon(Base):
    """Une ligne par (code, fichier source) : un même code peut venir de plusieurs fichiers."""

    __tablename__ = "coupons"

    coupon: Mapped[str] = mapped_column(String(255), primary_key=True)
    file_name: Mapped[str] = mapped_column(String(255), primary_key=True)
