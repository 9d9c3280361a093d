"""
Notifications module interface.

The auth module only needs two messages. Any transport that can deliver
them (SMTP, a provider API, a test double) satisfies INotifier.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class INotifier(Protocol):
    """Delivers one-time codes to a principal's email address."""

    async def send_two_factor_code(self, destination: str, code: str) -> None:
        """
        Send a login verification code.

        Raises:
            NotificationFailedError: If the message could not be sent
        """
        ...

    async def send_password_reset_code(self, destination: str, code: str) -> None:
        """
        Send a password reset code.

        Raises:
            NotificationFailedError: If the message could not be sent
        """
        ...
