"""
Principal management service.

Admin-facing CRUD over both principal kinds. Credential flows (login,
one-time codes, password changes) live in the auth module.
"""

import asyncio
import logging
import math
from typing import Any, Optional

from shared.models import PrincipalKind

from .exceptions import PrincipalNotFoundError
from .interfaces import IPrincipalService, IPrincipalStore
from .models import (
    DEFAULT_ROLES,
    CreatePrincipalRequest,
    DeletionResult,
    Principal,
    PrincipalListResponse,
    RegisterRequest,
)
from .policy import (
    MAX_PAGE_SIZE,
    clamp_pagination,
    validate_principal_id,
    validate_role,
    validate_status,
    validate_username,
)

logger = logging.getLogger(__name__)


class PrincipalService(IPrincipalService):
    """
    Implements IPrincipalService on top of any IPrincipalStore.

    The hasher is injected so that user creation never stores plaintext.
    """

    def __init__(self, store: IPrincipalStore, hasher: Any, max_page_size: int = MAX_PAGE_SIZE):
        self._store = store
        self._hasher = hasher
        self._max_page_size = min(max_page_size, MAX_PAGE_SIZE)

    async def create(self, kind: PrincipalKind, request: CreatePrincipalRequest) -> Principal:
        """Provision a principal. The password is hashed before storage."""
        role = validate_role(kind, request.role or DEFAULT_ROLES[kind])
        password_hash = await asyncio.to_thread(self._hasher.hash, request.password)

        fields = {
            "username": validate_username(kind, request.username),
            "email": request.email,
            "password_hash": password_hash,
            "role": role,
            "status": validate_status(request.status),
            "two_factor_enabled": request.two_factor_enabled,
            "meta": request.meta,
            "permissions": request.permissions if kind == PrincipalKind.ADMIN else [],
        }
        record = await self._store.create(kind, fields)
        logger.info("Created %s %s", kind.value, record.id)
        return record.to_public()

    async def register(self, request: RegisterRequest) -> Principal:
        """Self-registration, user kind only, always with the default role."""
        return await self.create(
            PrincipalKind.USER,
            CreatePrincipalRequest(
                username=request.username,
                email=request.email,
                password=request.password,
            ),
        )

    async def get(self, kind: PrincipalKind, principal_id: str) -> Principal:
        principal_id = validate_principal_id(kind, principal_id)
        record = await self._store.find_by_id(kind, principal_id)
        if record is None:
            raise PrincipalNotFoundError(kind.value, principal_id)
        return record.to_public()

    async def list(
        self,
        kind: PrincipalKind,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> PrincipalListResponse:
        page, page_size = clamp_pagination(page, page_size, self._max_page_size)
        status_filter = validate_status(status) if status else None

        result = await self._store.list(
            kind,
            page=page,
            page_size=page_size,
            search=search or None,
            status=status_filter,
        )

        return PrincipalListResponse(
            items=[r.to_public() for r in result.items],
            total=result.total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(result.total / page_size) if result.total else 0,
            has_more=(page * page_size) < result.total,
        )

    async def update(self, kind: PrincipalKind, principal_id: str, data: dict[str, Any]) -> Principal:
        """
        Partial update. The store drops non-allow-listed keys; values that
        survive are validated here.
        """
        principal_id = validate_principal_id(kind, principal_id)
        data = dict(data)

        if data.get("username") is not None:
            data["username"] = validate_username(kind, data["username"])
        if data.get("role") is not None:
            data["role"] = validate_role(kind, data["role"])
        if data.get("status") is not None:
            data["status"] = validate_status(data["status"])

        record = await self._store.update(kind, principal_id, data)
        return record.to_public()

    async def set_status(self, kind: PrincipalKind, principal_id: str, status: Any) -> Principal:
        principal_id = validate_principal_id(kind, principal_id)
        record = await self._store.update(kind, principal_id, {"status": validate_status(status)})
        logger.info("Set %s %s status to %s", kind.value, principal_id, record.status.value)
        return record.to_public()

    async def delete(self, kind: PrincipalKind, principal_id: str) -> DeletionResult:
        principal_id = validate_principal_id(kind, principal_id)
        await self._store.delete(kind, principal_id)
        logger.info("Deleted %s %s", kind.value, principal_id)
        return DeletionResult(deleted=True)
