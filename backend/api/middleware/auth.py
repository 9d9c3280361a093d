"""
Authentication middleware for FastAPI.

Adapters from bearer credentials to the AuthorizationGate. Routes depend on
these instead of touching tokens directly.
"""

from typing import Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.models import AuthenticatedPrincipal, PrincipalKind
from modules.auth.exceptions import InsufficientPermissionsError, InvalidTokenError
from modules.auth.gate import AuthorizationGate
from modules.auth.models import PendingClaims

from ..dependencies import ServiceContainer, get_container, get_gate

# Security scheme for Swagger UI
bearer_scheme = HTTPBearer(auto_error=False)


def _token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    gate: AuthorizationGate = Depends(get_gate),
) -> AuthenticatedPrincipal:
    """
    Dependency that requires a session token.

    Usage:
        @router.get("/protected")
        async def protected(principal: AuthenticatedPrincipal = Depends(get_current_principal)):
            return {"id": principal.id}
    """
    return await gate.resolve(_token(credentials))


async def get_pending_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    gate: AuthorizationGate = Depends(get_gate),
) -> PendingClaims:
    """Dependency that requires a 2FA-pending token (and rejects session tokens)."""
    return gate.resolve_pending(_token(credentials))


class PendingFor:
    """Pending claims, restricted to one principal kind."""

    def __init__(self, kind: PrincipalKind):
        self.kind = kind

    async def __call__(self, claims: PendingClaims = Depends(get_pending_claims)) -> PendingClaims:
        if claims.kind != self.kind:
            raise InvalidTokenError()
        return claims


class SessionFor:
    """The caller, who must be of the given kind."""

    def __init__(self, kind: PrincipalKind):
        self.kind = kind

    async def __call__(
        self, principal: AuthenticatedPrincipal = Depends(get_current_principal)
    ) -> AuthenticatedPrincipal:
        if principal.kind != self.kind:
            raise InsufficientPermissionsError([], principal.role)
        return principal


class RoleGate:
    """
    Require one of the given roles.

    Without explicit roles, the configured management roles apply. kinds
    restricts which principal kinds may pass.
    """

    def __init__(
        self,
        roles: Optional[Iterable[str]] = None,
        kinds: Optional[Iterable[PrincipalKind]] = None,
    ):
        self.roles = list(roles) if roles is not None else None
        self.kinds = list(kinds) if kinds is not None else None

    async def __call__(
        self,
        principal: AuthenticatedPrincipal = Depends(get_current_principal),
        container: ServiceContainer = Depends(get_container),
    ) -> AuthenticatedPrincipal:
        roles = self.roles if self.roles is not None else container.settings.management_roles
        return AuthorizationGate.require_role(principal, roles, self.kinds)


class SelfOrRoleGate(RoleGate):
    """Allow the principal named by the principal_id path parameter, or a role."""

    def __init__(
        self,
        resource_kind: PrincipalKind,
        roles: Optional[Iterable[str]] = None,
        kinds: Optional[Iterable[PrincipalKind]] = None,
    ):
        super().__init__(roles, kinds)
        self.resource_kind = resource_kind

    async def __call__(
        self,
        principal_id: str,
        principal: AuthenticatedPrincipal = Depends(get_current_principal),
        container: ServiceContainer = Depends(get_container),
    ) -> AuthenticatedPrincipal:
        roles = self.roles if self.roles is not None else container.settings.management_roles
        return AuthorizationGate.require_self_or_role(
            principal,
            principal_id,
            roles,
            resource_kind=self.resource_kind,
            kinds=self.kinds,
        )


def management_kinds(kind: PrincipalKind) -> Optional[list[PrincipalKind]]:
    """
    Which caller kinds may manage principals of this kind.

    Admin accounts are managed by admins only; users may be managed by any
    principal holding a management role.
    """
    return [PrincipalKind.ADMIN] if kind == PrincipalKind.ADMIN else None
