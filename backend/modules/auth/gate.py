"""
Authorization gate.

Turns a session token into an AuthenticatedPrincipal and answers role and
ownership questions about it. Framework-free; the FastAPI dependencies in
api/middleware/auth.py are thin adapters over this class.
"""

from typing import Iterable, Optional

from shared.models import AuthenticatedPrincipal, PrincipalKind
from modules.principals.interfaces import IPrincipalStore

from .exceptions import InsufficientPermissionsError, InvalidTokenError, MissingTokenError
from .models import PendingClaims
from .tokens import TokenIssuer


class AuthorizationGate:
    """Resolves callers from tokens and enforces role/self checks."""

    def __init__(self, tokens: TokenIssuer, store: IPrincipalStore):
        self._tokens = tokens
        self._store = store

    async def resolve(self, token: Optional[str]) -> AuthenticatedPrincipal:
        """
        Verify a session token and load its principal.

        Raises:
            MissingTokenError: If no token was sent
            ExpiredTokenError: If the token has expired
            InvalidTokenError: If the token is invalid, is a 2FA-pending
                token, or names a principal that no longer exists
        """
        claims = self._tokens.verify_session(token or "")

        record = await self._store.find_by_id(claims.kind, claims.sub)
        if record is None:
            raise InvalidTokenError()

        return AuthenticatedPrincipal(
            id=record.id,
            kind=record.kind,
            username=record.username,
            email=record.email,
            role=record.role,
            status=record.status.value,
        )

    def resolve_pending(self, token: Optional[str]) -> PendingClaims:
        """Verify a 2FA-pending token. Session tokens are rejected."""
        return self._tokens.verify_pending(token or "")

    @staticmethod
    def require_role(
        principal: Optional[AuthenticatedPrincipal],
        allowed_roles: Iterable[str],
        kinds: Optional[Iterable[PrincipalKind]] = None,
    ) -> AuthenticatedPrincipal:
        """
        Raises:
            MissingTokenError: If there is no resolved principal
            InsufficientPermissionsError: If role (or kind, when given) is not allowed
        """
        if principal is None:
            raise MissingTokenError()

        roles = list(allowed_roles)
        if principal.role not in roles:
            raise InsufficientPermissionsError(roles, principal.role)
        if kinds is not None and principal.kind not in set(kinds):
            raise InsufficientPermissionsError(roles, principal.role)
        return principal

    @staticmethod
    def require_self_or_role(
        principal: Optional[AuthenticatedPrincipal],
        resource_id: str,
        allowed_roles: Iterable[str],
        resource_kind: Optional[PrincipalKind] = None,
        kinds: Optional[Iterable[PrincipalKind]] = None,
    ) -> AuthenticatedPrincipal:
        """
        Allow the principal addressed by resource_id, or any allowed role.

        resource_kind makes "self" also require a matching kind, so a user
        cannot pass as an admin that happens to share the ID. kinds limits
        which principal kinds the role branch applies to.
        """
        if principal is None:
            raise MissingTokenError()

        roles = list(allowed_roles)
        is_self = principal.id == str(resource_id) and (
            resource_kind is None or principal.kind == resource_kind
        )
        role_allowed = principal.role in roles and (kinds is None or principal.kind in set(kinds))

        if not is_self and not role_allowed:
            raise InsufficientPermissionsError(roles, principal.role)
        return principal
