from __future__ import annotations

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from order_food.core.errors import (
    CatalogUnavailableError,
    InvalidPromoCodeError,
    OrderFoodError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
    ValidatorUnavailableError,
)
from order_food.schemas.common_schemas import APIResponse

logger = logging.getLogger(__name__)

# Le coeur ne connaît pas les codes HTTP : la correspondance vit ici.
STATUS_BY_ERROR: Dict[Type[OrderFoodError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ProductNotFoundError: status.HTTP_404_NOT_FOUND,
    OrderNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidPromoCodeError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ValidatorUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    CatalogUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def status_for(exc: OrderFoodError) -> int:
    for error_cls in type(exc).__mro__:
        if error_cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(code: int, error: str, message: str, **extra) -> JSONResponse:
    body = APIResponse(code=code, error=error, message=message, **extra)
    return JSONResponse(status_code=code, content=body.model_dump(by_alias=True, exclude_none=True))


async def order_food_error_handler(request: Request, exc: OrderFoodError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("[api] %s: %s", exc.error_code, exc.message, extra={"path": request.url.path})
    extra = {}
    if isinstance(exc, ProductNotFoundError):
        extra["missing_product_ids"] = exc.missing_ids
    return error_response(code, exc.error_code, exc.message, **extra)


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = error_response(
        exc.status_code, HTTP_ERROR_CODES.get(exc.status_code, "http_error"), str(exc.detail)
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderFoodError, order_food_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
