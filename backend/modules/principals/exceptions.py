"""
Principals module exceptions.
"""

from shared.exceptions import ConflictError, NotFoundError, ValidationError


class PrincipalNotFoundError(NotFoundError):
    """Raised when no principal with the given ID exists."""

    def __init__(self, kind: str, principal_id: str):
        super().__init__(
            f"{kind.capitalize()} not found",
            code="PRINCIPAL_NOT_FOUND",
            details={"kind": kind, "id": principal_id},
        )


class DuplicatePrincipalError(ConflictError):
    """Raised when an email or username is already taken within a kind."""

    def __init__(self, field: str):
        super().__init__(
            f"{field.capitalize()} already in use",
            code="DUPLICATE_PRINCIPAL",
            details={"field": field},
        )
        self.field = field


class InvalidPrincipalIdError(ValidationError):
    """Raised when a principal ID is not a well-formed UUID."""

    def __init__(self, kind: str, principal_id: str):
        super().__init__(
            f"Invalid {kind} ID",
            code="INVALID_ID",
            details={"id": principal_id},
        )


class InvalidStatusError(ValidationError):
    """Raised when a status value is not one of active/inactive/suspended."""

    def __init__(self, status: object):
        super().__init__(
            "Invalid status value",
            code="INVALID_STATUS",
            details={"status": str(status)},
        )


class InvalidRoleError(ValidationError):
    """Raised when a role is not legal for the principal kind."""

    def __init__(self, kind: str, role: object):
        super().__init__(
            f"Invalid role for {kind}",
            code="INVALID_ROLE",
            details={"kind": kind, "role": str(role)},
        )


class InvalidUsernameError(ValidationError):
    """Raised when a username is shorter than its kind allows."""

    def __init__(self, kind: str, minimum: int):
        super().__init__(
            f"{kind.capitalize()} username must be at least {minimum} characters",
            code="INVALID_USERNAME",
            details={"kind": kind, "min_length": minimum},
        )
