"""
Structured JSON log formatting for RentWise.
"""

import logging
import traceback
from datetime import datetime
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from .context import get_transaction_id

SERVICE_NAME = "rentwise-backend"
SERVICE_VERSION = "0.1.0"

JSON_FORMAT = "%(timestamp)s %(level)s %(transaction_id)s %(message)s"
TEXT_FORMAT = (
    "%(asctime)s | %(levelname)s | %(transaction_id)s | "
    "%(name)s:%(lineno)d | %(message)s"
)


class StructuredFormatter(JsonFormatter):
    """JSON formatter that stamps every record with tracing and service fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now().astimezone().isoformat()
        log_record["transaction_id"] = getattr(
            record, "transaction_id", get_transaction_id()
        )
        log_record["level"] = record.levelname
        log_record["logger_name"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno
        log_record["service"] = {"name": SERVICE_NAME, "version": SERVICE_VERSION}

        if record.exc_info:
            log_record["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        for field in ["msg", "args", "created", "msecs", "relativeCreated", "pathname"]:
            log_record.pop(field, None)


def build_formatter(use_json_format: bool) -> logging.Formatter:
    """Return the JSON formatter or a plain text one for local development."""
    if use_json_format:
        return StructuredFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
    return logging.Formatter(TEXT_FORMAT)
