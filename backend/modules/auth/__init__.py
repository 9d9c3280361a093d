"""
Authentication module.

Handles password hashing, one-time codes, token issuance, the login and
password flows, and the authorization gate.

Public API:
- IAuthService: Interface for auth operations
- AuthService: Implementation over an IPrincipalStore
- AuthorizationGate: Token-to-principal resolution and role checks
- TokenIssuer, PasswordHasher: Credential primitives
- Auth exceptions: InvalidTokenError, InvalidCredentialsError, etc.
"""

from .interfaces import IAuthService
from .service import AuthService
from .gate import AuthorizationGate
from .hashing import PasswordHasher
from .tokens import TokenIssuer
from .models import (
    SessionClaims,
    PendingClaims,
    LoginResponse,
    TwoFactorChallenge,
)
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    InvalidCredentialsError,
    AccountNotActiveError,
    InsufficientPermissionsError,
    IncorrectPasswordError,
    TwoFactorNotEnabledError,
    CodeNotRequestedError,
    CodeExpiredError,
    CodeAlreadyUsedError,
    InvalidCodeError,
    InvalidResetRequestError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Implementations
    "AuthService",
    "AuthorizationGate",
    "PasswordHasher",
    "TokenIssuer",
    # Models
    "SessionClaims",
    "PendingClaims",
    "LoginResponse",
    "TwoFactorChallenge",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "AccountNotActiveError",
    "InsufficientPermissionsError",
    "IncorrectPasswordError",
    "TwoFactorNotEnabledError",
    "CodeNotRequestedError",
    "CodeExpiredError",
    "CodeAlreadyUsedError",
    "InvalidCodeError",
    "InvalidResetRequestError",
]
