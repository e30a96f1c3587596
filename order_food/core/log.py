from __future__ import annotations

import json
import logging
import sys
import time
import uuid

from fastapi import Request, Response
from uvicorn.logging import ColourizedFormatter

from order_food.core.config import Settings

_RESERVED = (
    "message", "args", "levelname", "levelno", "name", "pathname", "filename",
    "module", "lineno", "funcName", "exc_info", "exc_text", "stack_info",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "taskName", "msg",
)


class _RequestIdLogFilter(logging.Filter):
    """Injecte le request_id dans tous les logs d'une requête."""

    def filter(self, record: logging.LogRecord) -> bool:
        # request_id est ajouté par le middleware access
        record.request_id = getattr(record, "request_id", "-")  # type: ignore
        return True


class _JsonLogFormatter(logging.Formatter):
    def __init__(self, service: str, datefmt: str | None = None) -> None:
        super().__init__(datefmt=datefmt)
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname.upper(),
            "logger": record.name,
            "msg": record.getMessage(),
            "service": self.service,
            "request_id": getattr(record, "request_id", "-"),
        }

        # Merge extras (method, path, status, latency_ms, order_id, etc.)
        for k, v in record.__dict__.items():
            if k not in log_obj and k not in _RESERVED:
                log_obj[k] = v

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False, default=str)


def setup_logging(settings: Settings) -> None:
    """Configure le logging pour l'application."""
    log_level = settings.LOG_LEVEL.upper()
    log_format = settings.LOG_FORMAT.lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.name = "order-food"

    if log_format == "json":
        formatter: logging.Formatter = _JsonLogFormatter(settings.APP_NAME, "%Y-%m-%dT%H:%M:%S%z")
    else:
        formatter = ColourizedFormatter("%(levelprefix)s %(name)s - %(message)s", use_colors=True)

    handler.setFormatter(formatter)
    handler.addFilter(_RequestIdLogFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # create_app() peut être appelé plusieurs fois (tests) : un seul handler
    for existing in list(root_logger.handlers):
        if existing.name == handler.name:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # Moins de bruit
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def access_log_middleware(request: Request, call_next) -> Response:
    """Middleware pour logguer les requêtes et réponses avec un request_id."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id

    logger = logging.getLogger("order_food.access")
    extra = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "-",
        "user_agent": request.headers.get("user-agent", "-"),
    }

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 2)

    extra["status"] = response.status_code
    extra["latency_ms"] = duration_ms

    logger.info("request", extra=extra)
    response.headers["X-Request-ID"] = request_id

    return response
