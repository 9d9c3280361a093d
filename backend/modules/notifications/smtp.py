"""
SMTP notifier.

Builds a multipart (plain text + HTML) message and sends it over SMTP.
smtplib is blocking, so each send runs in a worker thread.
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from shared.config import Settings

from .exceptions import NotificationFailedError
from .interfaces import INotifier

logger = logging.getLogger(__name__)


TWO_FACTOR_SUBJECT = "Your verification code"
PASSWORD_RESET_SUBJECT = "Your password reset code"


def build_text_body(code: str, purpose: str, ttl_minutes: int) -> str:
    """Plain-text fallback for clients that do not render HTML."""
    return (
        f"Your {purpose} code is:\n\n"
        f"    {code}\n\n"
        f"This code expires in {ttl_minutes} minutes.\n"
        "If you did not request it, you can ignore this message.\n"
    )


def build_html_body(code: str, purpose: str, ttl_minutes: int, app_name: str) -> str:
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8" /><title>{app_name}</title></head>
<body style="margin:0; padding:24px; background:#f4f5f7; font-family:system-ui,sans-serif;">
  <table width="520" align="center" cellpadding="0" cellspacing="0"
         style="background:#ffffff; border-radius:12px; border:1px solid #e2e4e8;">
    <tr><td style="padding:24px;">
      <p style="margin:0 0 12px; color:#111827; font-size:16px;">Your {purpose} code is:</p>
      <div style="margin:16px 0; padding:14px; text-align:center; border-radius:8px; background:#f3f4f6;">
        <span style="font-size:28px; letter-spacing:6px; font-weight:700; color:#111827;">{code}</span>
      </div>
      <p style="margin:0 0 8px; color:#4b5563; font-size:13px;">
        This code is valid for <strong>{ttl_minutes} minutes</strong>.
      </p>
      <p style="margin:0; color:#6b7280; font-size:12px;">
        Never share this code. If you did not request it, ignore this email.
      </p>
    </td></tr>
  </table>
</body>
</html>
"""


class SmtpNotifier(INotifier):
    """INotifier over a plain SMTP relay (STARTTLS by default)."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def send_two_factor_code(self, destination: str, code: str) -> None:
        await self._send(destination, TWO_FACTOR_SUBJECT, code, "verification")

    async def send_password_reset_code(self, destination: str, code: str) -> None:
        await self._send(destination, PASSWORD_RESET_SUBJECT, code, "password reset")

    async def _send(self, destination: str, subject: str, code: str, purpose: str) -> None:
        if not self._settings.smtp_host:
            logger.error("SMTP host not configured; cannot send %s code", purpose)
            raise NotificationFailedError("Email delivery is not configured")

        message = self.build_message(destination, subject, code, purpose)
        try:
            await asyncio.to_thread(self._deliver, destination, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send %s code to %s: %s", purpose, destination, e)
            raise NotificationFailedError(type(e).__name__)

        logger.info("Sent %s code to %s", purpose, destination)

    def build_message(self, destination: str, subject: str, code: str, purpose: str) -> MIMEMultipart:
        ttl = self._settings.otp_ttl_minutes

        msg = MIMEMultipart("alternative")
        msg["Subject"] = f"{subject} - {self._settings.app_name}"
        msg["From"] = self._settings.smtp_sender
        msg["To"] = destination

        msg.attach(MIMEText(build_text_body(code, purpose, ttl), "plain", "utf-8"))
        msg.attach(MIMEText(build_html_body(code, purpose, ttl, self._settings.app_name), "html", "utf-8"))
        return msg

    def _deliver(self, destination: str, message: MIMEMultipart) -> None:
        settings = self._settings
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
            if settings.smtp_starttls:
                server.starttls()
            if settings.smtp_username:
                server.login(settings.smtp_username, settings.smtp_password)
            server.sendmail(settings.smtp_sender, [destination], message.as_string())
