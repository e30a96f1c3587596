from __future__ import annotations

import logging
from typing import Mapping

from sqlalchemy.exc import SQLAlchemyError

from order_food.core.config import Settings
from order_food.core.errors import ValidatorUnavailableError
from order_food.services.contracts import CouponSource
from order_food.services.pricing import DiscountEffect, PromoCheck

logger = logging.getLogger(__name__)


class PromoCodeService:
    """
    Validation des codes promo à partir des fichiers de coupons chargés en base.

    Règles :
    1. longueur comprise entre `min_length` et `max_length` (8 à 10 par défaut) ;
    2. le code apparaît dans au moins `min_sources` fichiers distincts (2 par défaut).

    Un code accepté donne droit à `effect`. Aucune dépendance au contenu de la
    commande : deux appels avec le même code renvoient le même résultat tant que
    la table des coupons ne change pas.
    """

    def __init__(
        self,
        coupons: CouponSource,
        effect: DiscountEffect,
        min_length: int = 8,
        max_length: int = 10,
        min_sources: int = 2,
    ):
        self.coupons = coupons
        self.effect = effect
        self.min_length = min_length
        self.max_length = max_length
        self.min_sources = min_sources

    @classmethod
    def from_settings(cls, coupons: CouponSource, settings: Settings) -> "PromoCodeService":
        return cls(
            coupons,
            DiscountEffect(settings.PROMO_DISCOUNT_TYPE, settings.PROMO_DISCOUNT_VALUE),
            min_length=settings.PROMO_MIN_LENGTH,
            max_length=settings.PROMO_MAX_LENGTH,
            min_sources=settings.PROMO_MIN_SOURCES,
        )

    async def validate(self, code: str) -> PromoCheck:
        if not self.min_length <= len(code) <= self.max_length:
            logger.debug("[promo] code rejeté (longueur)", extra={"length": len(code)})
            return PromoCheck(valid=False)

        try:
            sources = await self.coupons.count_sources(code)
        except SQLAlchemyError as exc:
            logger.error("[promo] vérification impossible: %s", exc)
            raise ValidatorUnavailableError("Failed to validate promo code") from exc

        if sources < self.min_sources:
            logger.info("[promo] code refusé", extra={"sources": sources})
            return PromoCheck(valid=False)

        return PromoCheck(valid=True, effect=self.effect)


class StaticPromoCodeValidator:
    """Validateur en mémoire : table fixe code -> effet (embarqué, tests)."""

    def __init__(self, codes: Mapping[str, DiscountEffect]):
        self.codes = dict(codes)

    async def validate(self, code: str) -> PromoCheck:
        effect = self.codes.get(code)
        if effect is None:
            return PromoCheck(valid=False)
        return PromoCheck(valid=True, effect=effect)
