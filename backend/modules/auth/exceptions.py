"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import AuthenticationError, AuthorizationError, ValidationError


# -----------------------------------------------------------------------------
# Tokens
# -----------------------------------------------------------------------------


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, badly signed or of the wrong kind."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


# -----------------------------------------------------------------------------
# Credentials
# -----------------------------------------------------------------------------


class InvalidCredentialsError(AuthenticationError):
    """
    Raised for an unknown email or a wrong password.

    Both cases produce exactly the same message and code.
    """

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class AccountNotActiveError(AuthorizationError):
    """Raised when an inactive or suspended principal tries to log in."""

    def __init__(self, status: str):
        super().__init__(
            "Account is not active",
            code="ACCOUNT_NOT_ACTIVE",
            details={"status": status},
        )


class IncorrectPasswordError(ValidationError):
    """Raised when the current password given for a change does not match."""

    def __init__(self):
        super().__init__("Current password is incorrect", code="INCORRECT_PASSWORD")


class InsufficientPermissionsError(AuthorizationError):
    """Raised when principal lacks required permissions."""

    def __init__(self, required_roles: list[str], principal_role: str):
        super().__init__(
            "Forbidden",
            code="FORBIDDEN",
            details={"required_roles": required_roles, "role": principal_role},
        )


# -----------------------------------------------------------------------------
# One-time codes
# -----------------------------------------------------------------------------


class TwoFactorNotEnabledError(ValidationError):
    """Raised for a 2FA operation on a principal without 2FA."""

    def __init__(self):
        super().__init__("2FA is not enabled for this account", code="2FA_NOT_ENABLED")


class CodeNotRequestedError(ValidationError):
    """Raised when no code is pending for the principal."""

    def __init__(self, purpose: str = "2FA"):
        super().__init__(
            f"{purpose} code not requested",
            code="CODE_NOT_REQUESTED",
            details={"purpose": purpose},
        )


class CodeExpiredError(ValidationError):
    """Raised when the pending code is past its expiry."""

    def __init__(self, purpose: str = "2FA"):
        super().__init__(
            f"{purpose} code has expired",
            code="CODE_EXPIRED",
            details={"purpose": purpose},
        )


class CodeAlreadyUsedError(ValidationError):
    """Raised when a 2FA code has already been consumed."""

    def __init__(self):
        super().__init__("This code has already been used", code="CODE_ALREADY_USED")


class InvalidCodeError(ValidationError):
    """Raised when the submitted code does not match the pending one."""

    def __init__(self, purpose: str = "2FA"):
        super().__init__(
            f"Invalid {purpose} code",
            code="INVALID_CODE",
            details={"purpose": purpose},
        )


class InvalidResetRequestError(ValidationError):
    """Raised when a reset is attempted for an email nobody holds."""

    def __init__(self):
        super().__init__("Invalid reset request", code="INVALID_RESET_REQUEST")
