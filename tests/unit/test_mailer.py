"""Tests for SMTP delivery and the admin notification channel"""

from __future__ import annotations

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from askq.config import SmtpSettings
from askq.errors import DeliveryError
from askq.notifications.admin import SUBJECT_PREFIX, AdminNotifier
from askq.notifications.mailer import SmtpMailer
from askq.observability.telemetry import get_counter

SMTP = SmtpSettings(
    host="smtp.school.test",
    port=587,
    user="askq@school.test",
    password="app-password",
    from_email="askq@school.test",
    from_name="Ms. Rivera's AskQ",
)


@pytest.fixture
def smtp_server():
    with patch("askq.notifications.mailer.smtplib.SMTP") as mock_smtp:
        server = MagicMock()
        mock_smtp.return_value.__enter__.return_value = server
        yield mock_smtp, server


def test_build_message_headers():
    msg = SmtpMailer(SMTP).build_message("kid@example.com", "Your AI Response", "Hi Ada,")

    assert msg["To"] == "kid@example.com"
    assert msg["Subject"] == "Your AI Response"
    assert msg["From"] == "Ms. Rivera's AskQ <askq@school.test>"
    assert msg.get_payload()[0].get_payload(decode=True).decode("utf-8") == "Hi Ada,"


def test_send_uses_starttls_and_login(smtp_server):
    mock_smtp, server = smtp_server

    SmtpMailer(SMTP, timeout=12).send_email("kid@example.com", "Subject", "Body")

    mock_smtp.assert_called_once_with("smtp.school.test", 587, timeout=12)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("askq@school.test", "app-password")
    server.send_message.assert_called_once()


def test_smtp_rejection_raises_delivery_error(smtp_server):
    _, server = smtp_server
    server.send_message.side_effect = smtplib.SMTPRecipientsRefused(
        {"kid@example.com": (550, b"no such user")}
    )

    with pytest.raises(DeliveryError):
        SmtpMailer(SMTP).send_email("kid@example.com", "Subject", "Body")


def test_connection_error_raises_delivery_error(smtp_server):
    mock_smtp, _ = smtp_server
    mock_smtp.side_effect = ConnectionRefusedError("refused")

    with pytest.raises(DeliveryError, match="refused"):
        SmtpMailer(SMTP).send_email("kid@example.com", "Subject", "Body")


def test_unconfigured_smtp_refuses_to_send(smtp_server):
    mock_smtp, _ = smtp_server
    mailer = SmtpMailer(SmtpSettings())

    assert not mailer.enabled
    with pytest.raises(DeliveryError):
        mailer.send_email("kid@example.com", "Subject", "Body")
    mock_smtp.assert_not_called()


def test_notifier_prefixes_subject(transport):
    notifier = AdminNotifier(transport, "admin@school.test")

    assert notifier.notify("Invalid email address", "Row 4 ...") is True

    assert transport.sent == [("admin@school.test", f"{SUBJECT_PREFIX} Invalid email address", "Row 4 ...")]
    assert get_counter("admin_notify.sent") == 1


def test_notifier_disabled_without_address(transport):
    notifier = AdminNotifier(transport, "")

    assert notifier.enabled is False
    assert notifier.notify("anything", "body") is False
    assert transport.sent == []


def test_notifier_swallows_delivery_failure(transport_factory):
    transport = transport_factory(fail_for={"admin@school.test"})
    notifier = AdminNotifier(transport, "admin@school.test")

    assert notifier.notify("AI generation failed", "body") is False
    assert get_counter("admin_notify.failed") == 1


def test_notifier_swallows_unexpected_errors():
    transport = MagicMock()
    transport.send_email.side_effect = RuntimeError("socket closed")
    notifier = AdminNotifier(transport, "admin@school.test")

    assert notifier.notify("Email send failed", "body") is False
