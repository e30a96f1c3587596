"""Erreurs métier de la prise de commande.

Levées par la couche service ; la couche API les traduit en réponses HTTP
(voir `order_food.api.errors`). Chaque classe porte un `error_code` stable.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class OrderFoodError(Exception):
    """Racine de toutes les erreurs renvoyées à l'appelant."""

    error_code = "order_food_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(OrderFoodError):
    """Requête mal formée ; aucune I/O n'a été effectuée."""

    error_code = "validation_error"

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("Invalid order request: " + "; ".join(self.problems))


class ProductNotFoundError(OrderFoodError):
    """Un ou plusieurs produits demandés n'existent pas au catalogue."""

    error_code = "product_not_found"

    def __init__(self, missing_ids: Iterable[str]) -> None:
        self.missing_ids: List[str] = list(missing_ids)
        super().__init__("Product not found: " + ", ".join(self.missing_ids))


class InvalidPromoCodeError(OrderFoodError):
    """Code promo vérifié puis refusé."""

    error_code = "invalid_promo_code"

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Invalid promo code: {code}")


class ValidatorUnavailableError(OrderFoodError):
    """Le code promo n'a pas pu être vérifié (backend en erreur ou timeout)."""

    error_code = "validator_unavailable"


class CatalogUnavailableError(OrderFoodError):
    """Le catalogue n'a pas pu répondre (backend en erreur ou timeout)."""

    error_code = "catalog_unavailable"


class PersistenceError(OrderFoodError):
    """L'écriture de la commande a échoué après un calcul de prix réussi."""

    error_code = "persistence_error"


class OrderNotFoundError(OrderFoodError):
    error_code = "order_not_found"

    def __init__(self, order_id: str, message: Optional[str] = None) -> None:
        self.order_id = order_id
        super().__init__(message or f"Order {order_id} not found")
