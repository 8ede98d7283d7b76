"""Mail delivery and admin notification."""

from __future__ import annotations

from askq.notifications.admin import AdminNotifier
from askq.notifications.mailer import MailTransport, SmtpMailer

__all__ = ["AdminNotifier", "MailTransport", "SmtpMailer"]
