import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from order_food.core.config import Settings
from order_food.core.log import _JsonLogFormatter, access_log_middleware, setup_logging


def _record(**extra):
    record = logging.LogRecord(
        name="order_food.test", level=logging.INFO, pathname=__file__, lineno=1,
        msg="order %s persisted", args=("abc",), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extras():
    line = _JsonLogFormatter("order-food").format(_record(order_id="abc", request_id="rid-1"))
    payload = json.loads(line)

    assert payload["msg"] == "order abc persisted"
    assert payload["service"] == "order-food"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "rid-1"
    assert payload["order_id"] == "abc"
    assert "args" not in payload


def test_json_formatter_defaults_request_id():
    payload = json.loads(_JsonLogFormatter("order-food").format(_record()))
    assert payload["request_id"] == "-"


def test_setup_logging_installs_single_handler():
    settings = Settings(LOG_FORMAT="json", LOG_LEVEL="DEBUG")
    setup_logging(settings)
    setup_logging(settings)

    root = logging.getLogger()
    handlers = [h for h in root.handlers if h.name == "order-food"]
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, _JsonLogFormatter)
    assert root.level == logging.DEBUG


def _client():
    app = FastAPI()
    app.middleware("http")(access_log_middleware)

    @app.get("/ping")
    def ping():
        return {"pong": True}

    return TestClient(app)


def test_access_log_echoes_request_id(caplog):
    with caplog.at_level(logging.INFO, logger="order_food.access"):
        resp = _client().get("/ping", headers={"x-request-id": "rid-42"})

    assert resp.headers["X-Request-ID"] == "rid-42"
    record = next(r for r in caplog.records if r.name == "order_food.access")
    assert record.status == 200
    assert record.path == "/ping"


def test_access_log_generates_request_id():
    resp = _client().get("/ping")
    assert len(resp.headers["X-Request-ID"]) == 36
