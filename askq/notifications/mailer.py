"""
AskQ Mail Delivery

SMTP delivery for student answers and admin notifications.
"""

from __future__ import annotations

import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from askq.config import SmtpSettings
from askq.errors import DeliveryError
from askq.observability.logging import get_logger
from askq.utils.redaction import redact

logger = get_logger(__name__)


class MailTransport(Protocol):
    def send_email(self, to_email: str, subject: str, body: str) -> None:
        """Deliver a plaintext message or raise DeliveryError."""
        ...


class SmtpMailer:
    """Plaintext SMTP delivery with STARTTLS."""

    def __init__(self, settings: SmtpSettings, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

        if not settings.enabled:
            logger.warning("SMTP not fully configured. Set SMTP_* environment variables.")
        else:
            logger.info(
                "SMTP delivery configured: %s@%s:%s",
                settings.user,
                settings.host,
                settings.port,
            )

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def build_message(self, to_email: str, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["Subject"] = subject
        msg["From"] = f"{self.settings.from_name} <{self.settings.from_email}>"
        msg["To"] = to_email
        msg["Date"] = datetime.now().strftime("%a, %d %b %Y %H:%M:%S %z")
        msg.attach(MIMEText(body, "plain", "utf-8"))
        return msg

    def send_email(self, to_email: str, subject: str, body: str) -> None:
        """
        Send one plaintext email

        Raises:
            DeliveryError: If SMTP is not configured or the server rejects the message
        """
        if not self.enabled:
            raise DeliveryError("SMTP delivery not enabled. Configure SMTP_* environment variables.")

        msg = self.build_message(to_email, subject, body)
        try:
            with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.settings.user, self.settings.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", redact(to_email), e)
            raise DeliveryError(str(e)) from e

        logger.info("Email sent to %s (subject: %s)", redact(to_email), subject)
