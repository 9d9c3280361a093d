"""
Notifications module exceptions.
"""

from shared.exceptions import ExternalServiceError


class NotificationFailedError(ExternalServiceError):
    """Raised when an email could not be handed to the mail server."""

    def __init__(self, reason: str = "Email delivery failed"):
        super().__init__(
            "Could not send notification",
            service="email",
            code="NOTIFICATION_FAILED",
            details={"reason": reason},
        )
