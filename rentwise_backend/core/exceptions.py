"""
Custom exception classes for consistent error handling across all modules.

Each class carries the HTTP status code the API layer renders it with.
"""

from typing import Any


class RentWiseException(Exception):
    """Base exception for all RentWise related errors."""

    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(RentWiseException):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(
        self,
        resource_type: str,
        identifier: Any,
        details: dict[str, Any] | None = None,
    ):
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ResourceAlreadyExistsError(RentWiseException):
    """Raised when trying to create a resource that already exists."""

    status_code = 409

    def __init__(
        self,
        resource_type: str,
        identifier: Any,
        details: dict[str, Any] | None = None,
    ):
        message = f"{resource_type} with identifier '{identifier}' already exists"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(RentWiseException):
    """Raised when data validation fails."""

    status_code = 422

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        if field:
            full_message = f"Validation error for field '{field}': {message}"
        else:
            full_message = message
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class BusinessLogicError(RentWiseException):
    """Raised when business logic constraints are violated."""

    status_code = 409


class InvalidStateTransitionError(BusinessLogicError):
    """Raised when an occupancy transition's precondition does not hold."""

    def __init__(
        self,
        target: str,
        current_state: str,
        requested_state: str,
        details: dict[str, Any] | None = None,
    ):
        message = (
            f"Cannot move {target} from '{current_state}' to '{requested_state}'"
        )
        super().__init__(message, details)
        self.target = target
        self.current_state = current_state
        self.requested_state = requested_state


class TargetUnavailableError(BusinessLogicError):
    """Raised when a property or unit can no longer be occupied.

    Covers both the pre-check (target not available when provisioning starts)
    and a lost compare-and-set against a concurrent occupant.
    """

    def __init__(self, target: str, details: dict[str, Any] | None = None):
        super().__init__(f"{target} is not available for occupation", details)
        self.target = target


class UnauthorizedError(RentWiseException):
    """Raised when user lacks the capability to perform an action."""

    status_code = 403

    def __init__(
        self, action: str, resource_type: str, details: dict[str, Any] | None = None
    ):
        message = f"Permission denied: cannot {action} {resource_type}"
        super().__init__(message, details)
        self.action = action
        self.resource_type = resource_type


class AuthenticationError(RentWiseException):
    """Raised when authentication fails."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class NotFoundError(RentWiseException):
    """Raised when a resource is not found (simplified version)."""

    status_code = 404

    def __init__(
        self, message: str = "Resource not found", details: dict[str, Any] | None = None
    ):
        super().__init__(message, details)
