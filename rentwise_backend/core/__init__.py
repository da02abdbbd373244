"""Core infrastructure for RentWise backend."""

from .exceptions import (
    AuthenticationError,
    BusinessLogicError,
    InvalidStateTransitionError,
    NotFoundError,
    RentWiseException,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    TargetUnavailableError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "RentWiseException",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "ValidationError",
    "BusinessLogicError",
    "InvalidStateTransitionError",
    "TargetUnavailableError",
    "UnauthorizedError",
    "AuthenticationError",
    "NotFoundError",
]
