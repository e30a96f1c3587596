from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

from order_food.api import order_routes as order_router
from order_food.api import product_routes as product_router
from order_food.api.errors import register_error_handlers
from order_food.core.config import Settings
from order_food.core.database import build_engine, build_session_factory, init_db
from order_food.core.log import access_log_middleware, setup_logging
from order_food.core.metrics import REQUEST_COUNT, REQUEST_LATENCY

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    settings: Settings = app.state.settings
    engine = build_engine(settings)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("database connection OK")
        await init_db(engine)
    except Exception:
        logger.exception("database connectivity check failed")

    yield  # Application runs here

    # --- Shutdown ---
    await engine.dispose()
    logger.info("database engine disposed")


def _split(value: str) -> list[str]:
    return ["*"] if value == "*" else [v.strip() for v in value.split(",") if v.strip()]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    # --- Logging ---
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        root_path=os.getenv("ROOT_PATH", ""),
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
    )
    app.state.settings = settings

    if settings.ENV == "prod" and settings.API_KEY == "apitest":
        logger.warning("API_KEY uses the development default; set it in production")

    # --- Middlewares ---
    app.middleware("http")(access_log_middleware)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = time.time()
        response: Response = await call_next(request)
        duration = time.time() - start

        # route template plutôt que le chemin brut (évite une série par ID)
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)

        REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)
        return response

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=_split(settings.CORS_ALLOW_METHODS),
        allow_headers=_split(settings.CORS_ALLOW_HEADERS),
    )

    register_error_handlers(app)

    # --- Tech endpoints ---
    @app.get("/metrics", include_in_schema=False)
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "healthy"}

    @app.get("/ready", tags=["health"])
    async def ready(request: Request):
        try:
            async with request.app.state.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("readiness check failed")
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    # --- Routes ---
    app.include_router(product_router.router)
    app.include_router(order_router.router)

    return app


app = create_app()
