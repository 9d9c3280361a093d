from datetime import timedelta

import pytest

from shared.models import AuthenticatedPrincipal, PrincipalKind
from modules.auth.exceptions import (
    ExpiredTokenError,
    InsufficientPermissionsError,
    InvalidTokenError,
    MissingTokenError,
)
from modules.auth.gate import AuthorizationGate
from modules.auth.models import SessionClaims

USER = PrincipalKind.USER
ADMIN = PrincipalKind.ADMIN


def principal(kind=USER, role="user", id="p-1") -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(id=id, kind=kind, username="someone", email="s@example.com", role=role)


@pytest.fixture
def gate(tokens, store) -> AuthorizationGate:
    return AuthorizationGate(tokens, store)


class TestResolve:
    @pytest.mark.asyncio
    async def test_resolves_session_token(self, gate, tokens, store, create_principal):
        created = await create_principal(ADMIN, username="root", email="root@example.com")
        record = await store.find_by_id(ADMIN, created.id)

        resolved = await gate.resolve(tokens.issue_session(record))

        assert resolved.id == created.id
        assert resolved.kind == ADMIN
        assert resolved.role == "admin"

    @pytest.mark.asyncio
    async def test_missing_token(self, gate):
        with pytest.raises(MissingTokenError):
            await gate.resolve(None)

    @pytest.mark.asyncio
    async def test_pending_token_rejected(self, gate, tokens, store, create_principal):
        created = await create_principal(USER)
        record = await store.find_by_id(USER, created.id)
        with pytest.raises(InvalidTokenError):
            await gate.resolve(tokens.issue_pending(record))

    @pytest.mark.asyncio
    async def test_expired_token(self, gate, tokens, create_principal):
        created = await create_principal(USER)
        token = tokens.issue(SessionClaims(sub=created.id, kind=USER, role="user"), timedelta(seconds=-1))
        with pytest.raises(ExpiredTokenError):
            await gate.resolve(token)

    @pytest.mark.asyncio
    async def test_deleted_principal(self, gate, tokens, store, create_principal):
        created = await create_principal(USER)
        record = await store.find_by_id(USER, created.id)
        token = tokens.issue_session(record)
        await store.delete(USER, created.id)

        with pytest.raises(InvalidTokenError):
            await gate.resolve(token)

    @pytest.mark.asyncio
    async def test_role_comes_from_store(self, gate, tokens, store, create_principal, principal_service):
        """A role change takes effect without a new token."""
        created = await create_principal(USER)
        token = tokens.issue_session(await store.find_by_id(USER, created.id))
        await principal_service.update(USER, created.id, {"role": "premium"})

        assert (await gate.resolve(token)).role == "premium"

    @pytest.mark.asyncio
    async def test_resolve_pending(self, gate, tokens, store, create_principal):
        created = await create_principal(USER)
        record = await store.find_by_id(USER, created.id)
        assert gate.resolve_pending(tokens.issue_pending(record)).sub == created.id
        with pytest.raises(InvalidTokenError):
            gate.resolve_pending(tokens.issue_session(record))


class TestRequireRole:
    def test_allowed(self):
        p = principal(role="admin")
        assert AuthorizationGate.require_role(p, ["admin"]) is p

    def test_denied(self):
        with pytest.raises(InsufficientPermissionsError) as exc_info:
            AuthorizationGate.require_role(principal(role="user"), ["admin"])
        assert exc_info.value.details == {"required_roles": ["admin"], "role": "user"}

    def test_no_principal(self):
        with pytest.raises(MissingTokenError):
            AuthorizationGate.require_role(None, ["admin"])

    def test_kind_restriction(self):
        """A user holding the admin role is not an admin-kind principal."""
        with pytest.raises(InsufficientPermissionsError):
            AuthorizationGate.require_role(principal(USER, "admin"), ["admin"], kinds=[ADMIN])
        AuthorizationGate.require_role(principal(ADMIN, "admin"), ["admin"], kinds=[ADMIN])


class TestRequireSelfOrRole:
    def test_self_allowed(self):
        p = principal(id="p-1")
        assert AuthorizationGate.require_self_or_role(p, "p-1", ["admin"]) is p

    def test_other_denied(self):
        with pytest.raises(InsufficientPermissionsError):
            AuthorizationGate.require_self_or_role(principal(id="p-1"), "p-2", ["admin"])

    def test_role_allowed_for_other(self):
        AuthorizationGate.require_self_or_role(principal(ADMIN, "admin", "p-1"), "p-2", ["admin"])

    def test_self_requires_matching_kind(self):
        with pytest.raises(InsufficientPermissionsError):
            AuthorizationGate.require_self_or_role(principal(USER, "user", "p-1"), "p-1", ["admin"], resource_kind=ADMIN)

    def test_role_branch_respects_kinds(self):
        with pytest.raises(InsufficientPermissionsError):
            AuthorizationGate.require_self_or_role(
                principal(USER, "admin", "p-1"), "p-2", ["admin"], resource_kind=ADMIN, kinds=[ADMIN]
            )

    def test_no_principal(self):
        with pytest.raises(MissingTokenError):
            AuthorizationGate.require_self_or_role(None, "p-1", ["admin"])
