"""
Write and lookup rules shared by every principal store.

UPDATABLE_FIELDS is the only place that decides which fields a generic
update may touch. Password hashes, one-time-code state and audit fields
are written exclusively through IPrincipalStore.save() by the auth flows.
"""

import uuid
from typing import Any, Optional, TYPE_CHECKING

from shared.models import PrincipalKind

from .exceptions import (
    DuplicatePrincipalError,
    InvalidPrincipalIdError,
    InvalidRoleError,
    InvalidStatusError,
    InvalidUsernameError,
)
from .models import PrincipalStatus, UserRole

if TYPE_CHECKING:
    from .interfaces import IPrincipalStore


_COMMON_UPDATABLE = frozenset(
    {"username", "email", "status", "role", "two_factor_enabled", "meta"}
)

UPDATABLE_FIELDS: dict[PrincipalKind, frozenset[str]] = {
    PrincipalKind.USER: _COMMON_UPDATABLE,
    PrincipalKind.ADMIN: _COMMON_UPDATABLE | {"permissions"},
}

MAX_PAGE_SIZE = 100

MIN_USERNAME_LENGTH: dict[PrincipalKind, int] = {
    PrincipalKind.USER: 3,
    PrincipalKind.ADMIN: 1,
}


def filter_update(kind: PrincipalKind, fields: dict[str, Any]) -> dict[str, Any]:
    """Keep only allow-listed keys with a value. Everything else is dropped."""
    allowed = UPDATABLE_FIELDS[kind]
    update = {k: v for k, v in fields.items() if k in allowed and v is not None}

    if "email" in update:
        update["email"] = normalize_email(update["email"])
    if "username" in update:
        update["username"] = str(update["username"]).strip()
    return update


def normalize_email(email: str) -> str:
    return str(email).strip().lower()


def validate_principal_id(kind: PrincipalKind, principal_id: str) -> str:
    """Reject anything that is not a UUID before it reaches the store."""
    try:
        return str(uuid.UUID(str(principal_id)))
    except (ValueError, TypeError, AttributeError):
        raise InvalidPrincipalIdError(kind.value, str(principal_id))


def validate_username(kind: PrincipalKind, username: str) -> str:
    username = str(username).strip()
    if len(username) < MIN_USERNAME_LENGTH[kind]:
        raise InvalidUsernameError(kind.value, MIN_USERNAME_LENGTH[kind])
    return username


def validate_status(status: Any) -> PrincipalStatus:
    try:
        return PrincipalStatus(status)
    except ValueError:
        raise InvalidStatusError(status)


def validate_role(kind: PrincipalKind, role: Any) -> str:
    """User roles come from a closed set; admin roles are free-form strings."""
    if kind == PrincipalKind.USER:
        try:
            return UserRole(role).value
        except ValueError:
            raise InvalidRoleError(kind.value, role)

    if not isinstance(role, str) or not role.strip():
        raise InvalidRoleError(kind.value, role)
    return role.strip()


def clamp_pagination(page: Any, page_size: Any, max_page_size: int = MAX_PAGE_SIZE) -> tuple[int, int]:
    """Coerce paging input: page >= 1, 1 <= page_size <= max_page_size."""
    page_num = _to_int(page, 1)
    size = _to_int(page_size, 10)
    return max(page_num, 1), min(max(size, 1), max_page_size)


def _to_int(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


async def ensure_unique(
    store: "IPrincipalStore",
    kind: PrincipalKind,
    email: Optional[str] = None,
    username: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> None:
    """
    Raise DuplicatePrincipalError when email or username is held by another
    principal of the same kind.
    """
    if email is not None:
        existing = await store.find_by_email(kind, email)
        if existing is not None and existing.id != exclude_id:
            raise DuplicatePrincipalError("email")

    if username is not None:
        existing = await store.find_by_username(kind, username)
        if existing is not None and existing.id != exclude_id:
            raise DuplicatePrincipalError("username")
