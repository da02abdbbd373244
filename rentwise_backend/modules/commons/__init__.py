"""Common schemas and utilities shared across modules."""

from .schemas import BaseResponse, PaginatedResponse, RequestModel

__all__ = [
    "BaseResponse",
    "PaginatedResponse",
    "RequestModel",
]
