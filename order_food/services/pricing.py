"""Arithmétique monétaire : Decimal partout, jamais de float."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

from order_food.schemas.order_schemas import OrderItem
from order_food.schemas.product_schemas import ProductRead

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

PERCENTAGE = "percentage"
FIXED = "fixed"


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price: Decimal, quantity: int) -> Decimal:
    return Decimal(price) * quantity


def compute_subtotal(items: Iterable[OrderItem], products: Mapping[str, ProductRead]) -> Decimal:
    """Somme exacte de price x quantity sur toutes les lignes demandées."""
    total = sum(
        (line_total(products[item.product_id].price, item.quantity) for item in items),
        ZERO,
    )
    return to_money(total)


@dataclass(frozen=True)
class DiscountEffect:
    """Effet d'un code promo : pourcentage (0-100) ou montant fixe retiré."""

    kind: str
    value: Decimal

    def __post_init__(self) -> None:
        if self.kind not in (PERCENTAGE, FIXED):
            raise ValueError(f"Unknown discount kind: {self.kind!r}")
        value = Decimal(self.value)
        if value < 0:
            raise ValueError("Discount value must be non-negative")
        if self.kind == PERCENTAGE and value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        object.__setattr__(self, "value", value)

    @classmethod
    def percentage(cls, value) -> "DiscountEffect":
        return cls(PERCENTAGE, Decimal(str(value)))

    @classmethod
    def fixed(cls, value) -> "DiscountEffect":
        return cls(FIXED, Decimal(str(value)))

    def apply(self, subtotal: Decimal) -> Decimal:
        """Total après remise ; c'est le total qui est arrondi, pas la remise."""
        if self.kind == PERCENTAGE:
            return to_money(subtotal * (100 - self.value) / 100)
        # jamais de total négatif
        return to_money(subtotal - min(to_money(self.value), subtotal))

    def amount_off(self, subtotal: Decimal) -> Decimal:
        return to_money(subtotal) - self.apply(subtotal)


@dataclass(frozen=True)
class PromoCheck:
    valid: bool
    effect: Optional[DiscountEffect] = None
