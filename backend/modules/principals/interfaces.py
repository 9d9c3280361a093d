"""
Principals module interfaces.

The auth module and the API layer depend on IPrincipalStore and
IPrincipalService, never on a concrete store. This keeps the Supabase
repository and the in-memory store interchangeable.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import PrincipalKind

from .models import (
    CreatePrincipalRequest,
    DeletionResult,
    Principal,
    PrincipalListResponse,
    PrincipalPage,
    PrincipalRecord,
    PrincipalStatus,
)


@runtime_checkable
class IPrincipalStore(Protocol):
    """
    Persistence contract for principal records.

    Implementations own per-record atomicity. Lookups return the full
    record (including secrets); callers strip it with to_public().
    """

    async def find_by_email(self, kind: PrincipalKind, email: str) -> Optional[PrincipalRecord]:
        """Exact match after lowercasing and trimming the email."""
        ...

    async def find_by_id(self, kind: PrincipalKind, principal_id: str) -> Optional[PrincipalRecord]:
        ...

    async def find_by_username(self, kind: PrincipalKind, username: str) -> Optional[PrincipalRecord]:
        ...

    async def create(self, kind: PrincipalKind, fields: dict[str, Any]) -> PrincipalRecord:
        """
        Insert a new record.

        Raises:
            DuplicatePrincipalError: If email or username is already in use
        """
        ...

    async def update(self, kind: PrincipalKind, principal_id: str, fields: dict[str, Any]) -> PrincipalRecord:
        """
        Apply an allow-listed partial update (see policy.filter_update).

        Raises:
            PrincipalNotFoundError: If the record does not exist
            DuplicatePrincipalError: If a changed email/username is taken
        """
        ...

    async def save(self, record: PrincipalRecord) -> PrincipalRecord:
        """
        Persist the full record, secrets included.

        Only the auth flows call this (audit, one-time codes, password hash).

        Raises:
            PrincipalNotFoundError: If the record was deleted meanwhile
        """
        ...

    async def list(
        self,
        kind: PrincipalKind,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[PrincipalStatus] = None,
    ) -> PrincipalPage:
        """Newest first; search is a case-insensitive username/email substring."""
        ...

    async def delete(self, kind: PrincipalKind, principal_id: str) -> None:
        """
        Raises:
            PrincipalNotFoundError: If the record does not exist
        """
        ...


@runtime_checkable
class IPrincipalService(Protocol):
    """Management operations exposed to the API layer."""

    async def create(self, kind: PrincipalKind, request: CreatePrincipalRequest) -> Principal:
        ...

    async def get(self, kind: PrincipalKind, principal_id: str) -> Principal:
        ...

    async def list(
        self,
        kind: PrincipalKind,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> PrincipalListResponse:
        ...

    async def update(self, kind: PrincipalKind, principal_id: str, data: dict[str, Any]) -> Principal:
        ...

    async def set_status(self, kind: PrincipalKind, principal_id: str, status: Any) -> Principal:
        ...

    async def delete(self, kind: PrincipalKind, principal_id: str) -> DeletionResult:
        ...
