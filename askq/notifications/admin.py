"""Administrative notification channel.

Fire-and-forget: one fixed address, failures are logged and swallowed so a
broken mail setup never changes the outcome of the row being processed.
"""

from __future__ import annotations

from askq.notifications.mailer import MailTransport
from askq.observability.logging import get_logger
from askq.observability.telemetry import counter, log_event

logger = get_logger(__name__)

SUBJECT_PREFIX = "[AskQ]"


class AdminNotifier:
    def __init__(self, transport: MailTransport | None, admin_email: str = ""):
        self.transport = transport
        self.admin_email = admin_email

    @property
    def enabled(self) -> bool:
        return bool(self.transport and self.admin_email)

    def notify(self, subject: str, body: str) -> bool:
        """
        Send a notification to the admin address.

        Returns:
            True if delivered, False if disabled or delivery failed
        """
        if not self.enabled:
            logger.info("Admin notification skipped (no admin address): %s", subject)
            return False

        assert self.transport is not None
        try:
            self.transport.send_email(self.admin_email, f"{SUBJECT_PREFIX} {subject}", body)
        except Exception as e:
            counter("admin_notify.failed")
            logger.exception("Admin notification failed (%s): %s", subject, e)
            return False

        counter("admin_notify.sent")
        log_event("admin.notified", subject=subject)
        return True
