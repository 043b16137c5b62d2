"""
Best-effort email notifications.

``send`` never raises: a missing transport configuration or a failed
delivery is logged and reported as ``False``.
"""
from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape
from typing import Any, Dict, Optional

import httpx

from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass
class _SMTPConfig:
    host: str
    port: int
    username: str
    password: str
    use_tls: bool
    from_email: str
    timeout_seconds: float


class NotificationDispatcher:
    """Email sender with a provider toggle (smtp | resend | dev)."""

    def __init__(self, provider: Optional[str] = None) -> None:
        self.provider = (provider or settings.EMAIL_PROVIDER or "dev").strip().lower()

    def _smtp_config(self) -> Optional[_SMTPConfig]:
        if not settings.smtp_configured:
            return None
        return _SMTPConfig(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            from_email=settings.SMTP_FROM or settings.SMTP_USER,
            timeout_seconds=settings.SMTP_TIMEOUT_SECONDS,
        )

    def _send_smtp(self, to: str, subject: str, html: str) -> bool:
        config = self._smtp_config()
        if config is None:
            logger.warning("Email configuration missing; notification to %s not sent", to)
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = config.from_email
        msg["To"] = to
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")

        if config.port == 465:
            with smtplib.SMTP_SSL(config.host, config.port, timeout=config.timeout_seconds) as smtp:
                smtp.login(config.username, config.password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP(config.host, config.port, timeout=config.timeout_seconds) as smtp:
                if config.use_tls:
                    smtp.starttls()
                smtp.login(config.username, config.password)
                smtp.send_message(msg)
        return True

    def _send_resend(self, to: str, subject: str, html: str) -> bool:
        api_key = (settings.RESEND_API_KEY or "").strip()
        sender = (settings.SMTP_FROM or "").strip()
        if not api_key or not sender:
            logger.warning("Resend configuration missing (RESEND_API_KEY/SMTP_FROM); notification to %s not sent", to)
            return False
        payload = {"from": sender, "to": [to], "subject": subject, "html": html}
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        with httpx.Client(timeout=20.0) as client:
            resp = client.post(RESEND_API_URL, json=payload, headers=headers)
            if resp.status_code >= 400:
                logger.error("Resend email failed: %s %s", resp.status_code, resp.text[:200])
                return False
        return True

    def send(self, to: str, subject: str, html: str, data: Optional[Dict[str, Any]] = None) -> bool:
        target = (to or "").strip()
        if not target:
            logger.warning("Notification '%s' skipped: no recipient", subject)
            return False
        try:
            if self.provider == "dev":
                logger.info("[DEV EMAIL] to=%s subject=%s data=%s", target, subject, data or {})
                return True
            if self.provider == "smtp":
                sent = self._send_smtp(target, subject, html)
            elif self.provider == "resend":
                sent = self._send_resend(target, subject, html)
            else:
                logger.warning("Unsupported EMAIL_PROVIDER: %s", self.provider)
                return False
        except Exception as e:
            logger.error("Failed to send '%s' to %s: %s", subject, target, e)
            return False
        if sent:
            logger.info("Email '%s' sent to %s", subject, target)
        return sent


# ============================================================================
# Templates
# ============================================================================

def _layout(title: str, body: str) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"<h2 style=\"color: #1e3a8a;\">{escape(title)}</h2>{body}"
        f"<p style=\"color: #6b7280; font-size: 12px;\">{escape(settings.APP_NAME)}</p></div>"
    )


def credentials_email(
    name: str, email: str, password: str, advocate_name: str, account_label: str = "client"
) -> Dict[str, str]:
    login_url = f"{settings.FRONTEND_URL.rstrip('/')}/auth/signin"
    body = (
        f"<p>Dear {escape(name)},</p>"
        f"<p>{escape(advocate_name)} has created a {escape(account_label)} account for you.</p>"
        f"<p>Email: <strong>{escape(email)}</strong><br>"
        f"Temporary password: <strong>{escape(password)}</strong></p>"
        f"<p>Sign in at <a href=\"{escape(login_url)}\">{escape(login_url)}</a> and change your password.</p>"
    )
    return {"subject": f"Your {account_label} account", "html": _layout("Welcome", body)}


def document_uploaded_email(client_name: str, case_number: str, document_name: str) -> Dict[str, str]:
    body = (
        f"<p>Dear {escape(client_name)},</p>"
        f"<p>A new document <strong>{escape(document_name)}</strong> was added to case "
        f"<strong>{escape(case_number)}</strong>.</p>"
    )
    return {"subject": f"New document for case {case_number}", "html": _layout("Document uploaded", body)}


def document_deleted_email(client_name: str, case_number: str, document_name: str) -> Dict[str, str]:
    body = (
        f"<p>Dear {escape(client_name)},</p>"
        f"<p>The document <strong>{escape(document_name)}</strong> was removed from case "
        f"<strong>{escape(case_number)}</strong>.</p>"
    )
    return {"subject": f"Document removed from case {case_number}", "html": _layout("Document deleted", body)}


def account_deleted_email(name: str, cases_deleted: int) -> Dict[str, str]:
    body = (
        f"<p>Dear {escape(name)},</p>"
        f"<p>Your client account has been deleted along with {cases_deleted} associated case(s) "
        "and their files.</p>"
    )
    return {"subject": "Your account has been deleted", "html": _layout("Account deleted", body)}


def password_reset_email(name: str, reset_url: str) -> Dict[str, str]:
    body = (
        f"<p>Dear {escape(name)},</p>"
        f"<p>Reset your password using the link below. It expires in 1 hour.</p>"
        f"<p><a href=\"{escape(reset_url)}\">{escape(reset_url)}</a></p>"
    )
    return {"subject": "Reset your password", "html": _layout("Password reset", body)}


notification_dispatcher = NotificationDispatcher()


def get_notifier() -> NotificationDispatcher:
    """FastAPI dependency returning the process-wide dispatcher."""
    return notification_dispatcher
