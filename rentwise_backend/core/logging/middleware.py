"""
Request tracking middleware for logging correlation.
"""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import generate_transaction_id, set_transaction_id

TRANSACTION_HEADER = "x-transaction-id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Sets the transaction ID for the request and logs its completion."""

    def __init__(self, app, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("rentwise_backend.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        txn_id = request.headers.get(TRANSACTION_HEADER) or generate_transaction_id()
        set_transaction_id(txn_id)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        self.logger.info(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        )

        response.headers[TRANSACTION_HEADER] = txn_id
        return response
