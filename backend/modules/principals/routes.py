"""
Principal management API endpoints.

CRUD, status and password routes for one principal kind. Everything except
self-registration and a principal's own password change requires a
management role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_auth_service, get_principal_service
from api.middleware.auth import RoleGate, SelfOrRoleGate, management_kinds
from shared.models import AuthenticatedPrincipal, PrincipalKind
from modules.auth.interfaces import IAuthService
from modules.auth.models import ChangePasswordRequest, MessageResponse

from .interfaces import IPrincipalService
from .models import (
    CreatePrincipalRequest,
    DeletionResult,
    Principal,
    PrincipalListResponse,
    RegisterRequest,
    StatusUpdateRequest,
    UpdatePrincipalRequest,
)


def build_principal_router(kind: PrincipalKind) -> APIRouter:
    router = APIRouter()
    manager = RoleGate(kinds=management_kinds(kind))
    self_or_manager = SelfOrRoleGate(kind, kinds=management_kinds(kind))

    if kind == PrincipalKind.USER:

        @router.post("/register", response_model=Principal, status_code=201)
        async def register(
            request: RegisterRequest,
            service: IPrincipalService = Depends(get_principal_service),
        ) -> Principal:
            """Open self-registration. New users get the default role."""
            return await service.register(request)

    @router.post("", response_model=Principal, status_code=201)
    async def create_principal(
        request: CreatePrincipalRequest,
        _: AuthenticatedPrincipal = Depends(manager),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> Principal:
        return await service.create(kind, request)

    @router.get("", response_model=PrincipalListResponse)
    async def list_principals(
        page: int = Query(1, description="Page number, clamped to >= 1"),
        limit: int = Query(10, description="Page size, clamped to the configured maximum"),
        search: Optional[str] = Query(None, description="Substring match on username or email"),
        status: Optional[str] = Query(None, description="Filter by status"),
        _: AuthenticatedPrincipal = Depends(manager),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> PrincipalListResponse:
        """List principals, newest first."""
        return await service.list(kind, page=page, page_size=limit, search=search, status=status)

    @router.get("/{principal_id}", response_model=Principal)
    async def get_principal(
        principal_id: str,
        _: AuthenticatedPrincipal = Depends(manager),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> Principal:
        return await service.get(kind, principal_id)

    @router.patch("/{principal_id}", response_model=Principal)
    async def update_principal(
        principal_id: str,
        request: UpdatePrincipalRequest,
        _: AuthenticatedPrincipal = Depends(manager),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> Principal:
        """
        Partially update a principal.

        Only allow-listed fields are applied; anything else in the body,
        including password and 2FA code state, is ignored.
        """
        return await service.update(kind, principal_id, request.model_dump(exclude_unset=True))

    @router.put("/{principal_id}/status", response_model=Principal)
    async def set_status(
        principal_id: str,
        request: StatusUpdateRequest,
        _: AuthenticatedPrincipal = Depends(manager),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> Principal:
        return await service.set_status(kind, principal_id, request.status)

    @router.put("/{principal_id}/password", response_model=MessageResponse)
    async def change_password(
        principal_id: str,
        request: ChangePasswordRequest,
        _: AuthenticatedPrincipal = Depends(self_or_manager),
        service: IAuthService = Depends(get_auth_service),
    ) -> MessageResponse:
        """Change a password. The current password is required even for managers."""
        return await service.change_password(
            kind, principal_id, request.current_password, request.new_password
        )

    @router.delete("/{principal_id}", response_model=DeletionResult)
    async def delete_principal(
        principal_id: str,
        _: AuthenticatedPrincipal = Depends(manager),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> DeletionResult:
        return await service.delete(kind, principal_id)

    return router
