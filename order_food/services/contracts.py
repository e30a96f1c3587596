from __future__ import annotations

from typing import List, Optional, Protocol

from order_food.schemas.order_schemas import Order
from order_food.schemas.product_schemas import ProductRead
from order_food.services.pricing import PromoCheck


class ProductCatalog(Protocol):
    async def find_by_id(self, product_id: str) -> Optional[ProductRead]:
        """Contrat minimal du catalogue : None si le produit n'existe pas."""
        ...

    async def list(self, skip: int = 0, limit: int = 100) -> List[ProductRead]:
        ...

    async def count(self) -> int:
        ...


class OrderStore(Protocol):
    async def create(self, order: Order) -> Order:
        """Persiste la commande et la renvoie avec son identifiant attribué."""
        ...

    async def get(self, order_id: str) -> Optional[Order]:
        ...

    async def list(self, skip: int = 0, limit: int = 100) -> List[Order]:
        ...

    async def count(self) -> int:
        ...


class PromoCodeValidator(Protocol):
    async def validate(self, code: str) -> PromoCheck:
        """
        Fonction pure code -> (valide, effet). Doit lever
        ValidatorUnavailableError si la vérification est impossible.
        """
        ...


class CouponSource(Protocol):
    async def count_sources(self, code: str) -> int:
        """Nombre de fichiers sources distincts contenant le code."""
        ...
