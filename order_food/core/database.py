from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from order_food.core.config import Settings
from order_food.core.errors import OrderFoodError

logger = logging.getLogger(__name__)

# --- Base déclarative ---
Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """Crée l'engine async à partir de la configuration injectée."""
    url = make_url(str(settings.DATABASE_URL))
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        path = Path(url.database)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(
        url,
        pool_pre_ping=True,
        echo=settings.DB_ECHO,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Enregistre tous les modèles et crée les tables manquantes.
    IMPORTANT: il faut importer les modèles avant d'appeler create_all().
    """
    from order_food.models import coupon_models, order_models, product_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[order-food] DB init: tables ensured")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Fournit une session DB par requête HTTP."""
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        try:
            yield db
        except OrderFoodError:
            await db.rollback()
            raise
        except Exception:
            await db.rollback()
            logger.exception("[order-food] db session rolled back due to exception")
            raise
        finally:
            logger.debug("[order-food] db session closed")
