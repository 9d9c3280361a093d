"""
Principals module.

Persistence and management of the two principal kinds (users, admins).

Public API:
- IPrincipalStore / IPrincipalService: Interfaces
- SupabasePrincipalRepository, InMemoryPrincipalStore: Store implementations
- Principal, PrincipalRecord: Outward and stored models
- Principal exceptions: PrincipalNotFoundError, DuplicatePrincipalError, etc.
"""

from .interfaces import IPrincipalStore, IPrincipalService
from .memory import InMemoryPrincipalStore
from .models import (
    Principal,
    PrincipalRecord,
    PrincipalStatus,
    PrincipalListResponse,
    UserRole,
)
from .exceptions import (
    PrincipalNotFoundError,
    DuplicatePrincipalError,
    InvalidPrincipalIdError,
    InvalidStatusError,
    InvalidRoleError,
    InvalidUsernameError,
)

__all__ = [
    # Interfaces
    "IPrincipalStore",
    "IPrincipalService",
    # Stores
    "InMemoryPrincipalStore",
    # Models
    "Principal",
    "PrincipalRecord",
    "PrincipalStatus",
    "PrincipalListResponse",
    "UserRole",
    # Exceptions
    "PrincipalNotFoundError",
    "DuplicatePrincipalError",
    "InvalidPrincipalIdError",
    "InvalidStatusError",
    "InvalidRoleError",
    "InvalidUsernameError",
]
