"""
Authentication module interface.

The API layer depends on IAuthService, not the concrete implementation.
Every operation takes the principal kind, so one service covers users and
admins alike.
"""

from typing import Protocol, Union, runtime_checkable

from shared.models import PrincipalKind

from .models import (
    LoginResponse,
    MessageResponse,
    PasswordResetAcknowledgement,
    TwoFactorChallenge,
    TwoFactorCodeSent,
    TwoFactorStatus,
    TwoFactorVerification,
)


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for credential and second-factor operations.

    Implementations must provide all these methods.
    """

    async def login(
        self,
        kind: PrincipalKind,
        email: str,
        password: str,
    ) -> Union[LoginResponse, TwoFactorChallenge]:
        """
        Check credentials and either grant a session or start a 2FA challenge.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountNotActiveError: Principal is inactive or suspended
            NotificationFailedError: The 2FA code could not be emailed
        """
        ...

    async def verify_two_factor(
        self,
        kind: PrincipalKind,
        principal_id: str,
        code: str,
    ) -> TwoFactorVerification:
        """
        Consume the pending 2FA code.

        Raises:
            TwoFactorNotEnabledError, CodeAlreadyUsedError,
            CodeNotRequestedError, CodeExpiredError, InvalidCodeError
        """
        ...

    async def open_session(self, kind: PrincipalKind, principal_id: str) -> LoginResponse:
        """Issue a session token and record the login. Call after a verified code."""
        ...

    async def send_two_factor_code(self, kind: PrincipalKind, principal_id: str) -> TwoFactorCodeSent:
        """Issue a fresh 2FA code, replacing any pending one."""
        ...

    async def set_two_factor(self, kind: PrincipalKind, principal_id: str, enabled: bool) -> TwoFactorStatus:
        ...

    async def request_password_reset(self, kind: PrincipalKind, email: str) -> PasswordResetAcknowledgement:
        """Always returns the same acknowledgement, matched or not."""
        ...

    async def reset_password(
        self,
        kind: PrincipalKind,
        email: str,
        code: str,
        new_password: str,
    ) -> MessageResponse:
        """
        Raises:
            InvalidResetRequestError, CodeNotRequestedError,
            CodeExpiredError, InvalidCodeError
        """
        ...

    async def change_password(
        self,
        kind: PrincipalKind,
        principal_id: str,
        current_password: str,
        new_password: str,
    ) -> MessageResponse:
        """
        Raises:
            PrincipalNotFoundError, IncorrectPasswordError
        """
        ...
