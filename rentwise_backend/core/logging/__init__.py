"""Logging infrastructure for RentWise backend."""

from .context import (
    TransactionIdFilter,
    generate_transaction_id,
    get_transaction_id,
    set_transaction_id,
)
from .formatter import StructuredFormatter
from .middleware import RequestIdMiddleware
from .setup import get_logger, setup_logging, shutdown_logging

__all__ = [
    "StructuredFormatter",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "RequestIdMiddleware",
    "TransactionIdFilter",
    "generate_transaction_id",
    "get_transaction_id",
    "set_transaction_id",
]
