"""
Principals module data models.

A principal is an authenticatable account record. Users and admins share
one shape; the kind decides which table holds the record and which role
values are legal.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from shared.models import PrincipalKind


class PrincipalStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class UserRole(str, Enum):
    """Roles a user-kind principal may hold. Admin roles are free-form."""

    USER = "user"
    PREMIUM = "premium"
    BANNED = "banned"
    ADMIN = "admin"


DEFAULT_ROLES = {
    PrincipalKind.USER: UserRole.USER.value,
    PrincipalKind.ADMIN: "admin",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Principal(BaseModel):
    """
    Outward representation of a principal.

    Never carries the password hash or any one-time-code fingerprint.
    """

    id: str
    kind: PrincipalKind
    username: str
    email: str
    role: str
    status: PrincipalStatus = PrincipalStatus.ACTIVE

    last_login: Optional[datetime] = None
    login_history: list[datetime] = Field(default_factory=list)

    two_factor_enabled: bool = False

    meta: dict[str, Any] = Field(default_factory=dict)
    permissions: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class PrincipalRecord(Principal):
    """
    Stored principal, including credential and one-time-code state.

    Only the store and the auth service handle this model. Convert with
    to_public() before anything leaves the service layer.
    """

    password_hash: str

    two_factor_code_fingerprint: Optional[str] = None
    two_factor_code_expires_at: Optional[datetime] = None
    two_factor_code_used: bool = False

    reset_code_fingerprint: Optional[str] = None
    reset_code_expires_at: Optional[datetime] = None

    def to_public(self) -> Principal:
        """Strip every secret field."""
        return Principal(**self.model_dump(include=set(Principal.model_fields)))


class PrincipalPage(BaseModel):
    """One page of stored principals plus the total match count."""

    items: list[PrincipalRecord]
    total: int


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class _Identity(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("username must not be blank")
        return value


class RegisterRequest(_Identity):
    """Self-registration body. Role and status are not accepted."""

    password: str = Field(..., min_length=6, max_length=128)


class CreatePrincipalRequest(_Identity):
    """Admin-provisioning body."""

    password: str = Field(..., min_length=6, max_length=128)
    role: Optional[str] = Field(None, min_length=1, max_length=50)
    status: PrincipalStatus = PrincipalStatus.ACTIVE
    two_factor_enabled: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)
    permissions: list[str] = Field(default_factory=list)


class UpdatePrincipalRequest(BaseModel):
    """
    Partial update body.

    Unknown keys are ignored here, and the store applies its own allow-list
    on top, so a smuggled field never reaches storage.
    """

    model_config = {"extra": "ignore"}

    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    status: Optional[PrincipalStatus] = None
    role: Optional[str] = Field(None, min_length=1, max_length=50)
    two_factor_enabled: Optional[bool] = None
    meta: Optional[dict[str, Any]] = None
    permissions: Optional[list[str]] = None


class StatusUpdateRequest(BaseModel):
    """Body for the status toggle endpoint."""

    status: PrincipalStatus


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class PrincipalListResponse(BaseModel):
    """Paginated list of principals, most recent first."""

    items: list[Principal]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool


class DeletionResult(BaseModel):
    deleted: bool = True
