"""Structured logging and request correlation."""

import json
import logging

from rentwise_backend.core.logging import (
    StructuredFormatter,
    get_logger,
    set_transaction_id,
)
from rentwise_backend.core.logging.formatter import JSON_FORMAT


def test_structured_formatter_emits_json_with_context():
    set_transaction_id("abc12345")
    record = logging.LogRecord(
        name="rentwise_backend.modules.property_management.occupancy",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Target occupied",
        args=(),
        exc_info=None,
        func="occupy",
    )
    record.unit_id = 8

    payload = json.loads(StructuredFormatter(fmt=JSON_FORMAT).format(record))

    assert payload["message"] == "Target occupied"
    assert payload["level"] == "INFO"
    assert payload["transaction_id"] == "abc12345"
    assert payload["function"] == "occupy"
    assert payload["unit_id"] == 8
    assert payload["service"]["name"] == "rentwise-backend"


def test_get_logger_uses_app_namespace():
    assert get_logger("tests.sample").name == "rentwise_backend.tests.sample"
    assert get_logger("rentwise_backend.main").name == "rentwise_backend.main"


async def test_transaction_header_is_echoed(client):
    response = await client.get(
        "/api/health", headers={"x-transaction-id": "req-0001"}
    )
    assert response.headers["x-transaction-id"] == "req-0001"

    response = await client.get("/api/health")
    assert len(response.headers["x-transaction-id"]) == 8
