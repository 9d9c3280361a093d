"""
Base exception classes for the Gatehouse backend.

Each module should define its own exceptions that inherit from these bases.
The API error translator maps the bases to HTTP status codes, so a module
exception only has to pick the right parent.
"""

from typing import Optional, Any


class GatehouseError(Exception):
    """
    Base exception for all Gatehouse errors.

    All expected, recoverable failures inherit from this class. Anything
    else reaching the API layer is treated as an internal error.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(GatehouseError):
    """Resource not found."""

    pass


class ValidationError(GatehouseError):
    """Input or business-rule validation failed."""

    pass


class ConflictError(GatehouseError):
    """Resource conflicts with an existing one (duplicate key)."""

    pass


class AuthenticationError(GatehouseError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(GatehouseError):
    """Authorization failed (insufficient permissions)."""

    pass


class ExternalServiceError(GatehouseError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
