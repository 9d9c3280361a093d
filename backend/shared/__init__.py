"""
Shared infrastructure for the Gatehouse backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Explicit Supabase client handle
- exceptions: Base exception classes mapped to HTTP status by the API
- logger: Logging setup
- models: Principal kind and the authenticated caller

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import Database
from .exceptions import (
    GatehouseError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
)
from .logger import configure_logging
from .models import AuthenticatedPrincipal, PrincipalKind

__all__ = [
    "Settings",
    "get_settings",
    "Database",
    "GatehouseError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "configure_logging",
    "AuthenticatedPrincipal",
    "PrincipalKind",
]
