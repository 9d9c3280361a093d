"""
Notifications module.

Outbound transactional email for one-time codes.

Public API:
- INotifier: Interface for code delivery
- SmtpNotifier: SMTP implementation
- NotificationFailedError: Raised when a message cannot be delivered
"""

from .interfaces import INotifier
from .smtp import SmtpNotifier
from .exceptions import NotificationFailedError

__all__ = [
    "INotifier",
    "SmtpNotifier",
    "NotificationFailedError",
]
