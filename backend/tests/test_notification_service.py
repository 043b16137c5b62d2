"""Email dispatch never fails the caller."""

from unittest.mock import MagicMock, patch

import httpx

from advocatedesk.core.config import settings
from advocatedesk.services.notification_service import (
    NotificationDispatcher,
    account_deleted_email,
    credentials_email,
)


def test_dev_provider_only_logs():
    assert NotificationDispatcher("dev").send("x@example.test", "Hi", "<p>Hi</p>") is True


def test_missing_recipient_is_skipped():
    assert NotificationDispatcher("dev").send("  ", "Hi", "<p>Hi</p>") is False


def test_smtp_without_configuration_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "")
    with patch("advocatedesk.services.notification_service.smtplib.SMTP") as smtp:
        assert NotificationDispatcher("smtp").send("x@example.test", "Hi", "<p>Hi</p>") is False
    smtp.assert_not_called()


def test_smtp_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.test")
    monkeypatch.setattr(settings, "SMTP_PORT", 587)
    monkeypatch.setattr(settings, "SMTP_USER", "mailer")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "pw")

    with patch(
        "advocatedesk.services.notification_service.smtplib.SMTP",
        side_effect=OSError("connection refused"),
    ):
        assert NotificationDispatcher("smtp").send("x@example.test", "Hi", "<p>Hi</p>") is False


def test_smtp_success_uses_starttls(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.test")
    monkeypatch.setattr(settings, "SMTP_PORT", 587)
    monkeypatch.setattr(settings, "SMTP_USER", "mailer")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "pw")
    monkeypatch.setattr(settings, "SMTP_USE_TLS", True)

    smtp_instance = MagicMock()
    with patch("advocatedesk.services.notification_service.smtplib.SMTP") as smtp:
        smtp.return_value.__enter__.return_value = smtp_instance
        assert NotificationDispatcher("smtp").send("x@example.test", "Hi", "<p>Hi</p>") is True

    smtp_instance.starttls.assert_called_once()
    smtp_instance.login.assert_called_once_with("mailer", "pw")
    smtp_instance.send_message.assert_called_once()


def test_resend_http_error_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(settings, "SMTP_FROM", "desk@example.test")

    with patch.object(httpx.Client, "post", return_value=httpx.Response(500, text="boom")):
        assert NotificationDispatcher("resend").send("x@example.test", "Hi", "<p>Hi</p>") is False


def test_unknown_provider_returns_false():
    assert NotificationDispatcher("pigeon").send("x@example.test", "Hi", "<p>Hi</p>") is False


def test_templates_escape_user_input():
    message = credentials_email("<b>Ravi</b>", "r@example.test", "pw&1", "Adv. Rao")
    assert "&lt;b&gt;Ravi&lt;/b&gt;" in message["html"]
    assert "pw&amp;1" in message["html"]
    assert message["subject"] == "Your client account"

    assert "3 associated case(s)" in account_deleted_email("Ravi", 3)["html"]
