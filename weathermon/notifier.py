"""Alert delivery: SMTP e-mail, or the log when no mail server is configured."""
from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

from weathermon.alerts import Alert
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="notifier")


@dataclass(frozen=True)
class NotificationResult:
    ok: bool
    error: Optional[str] = None


class Notifier(Protocol):
    """Sends an alert and reports the outcome instead of raising."""

    def send(self, alert: Alert) -> NotificationResult:
        ...


class LoggingNotifier(Notifier):
    """Write alerts to the log (dev/tests, or when SMTP is unset)."""

    def send(self, alert: Alert) -> NotificationResult:
        logger.warning("%s: %s", alert.subject(), alert.message())
        return NotificationResult(ok=True)


class EmailNotifier(Notifier):
    """Send alerts as plain-text e-mail over SMTP."""

    def __init__(
        self,
        host: str,
        recipient: str,
        *,
        port: int = 587,
        sender: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.recipient = recipient
        self.sender = sender or username or recipient
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, alert: Alert) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = alert.subject()
        msg["From"] = self.sender
        msg["To"] = self.recipient
        msg.set_content(alert.message())
        return msg

    def send(self, alert: Alert) -> NotificationResult:
        msg = self.build_message(alert)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            return NotificationResult(ok=False, error=f"{type(exc).__name__}: {exc}")
        logger.info("Alert e-mail sent", extra={"location": alert.location, "recipient": self.recipient})
        return NotificationResult(ok=True)


def build_notifier(settings) -> Notifier:
    """Use e-mail when an SMTP host and recipient are configured."""
    if settings.smtp_host and settings.alert_email_to:
        logger.info("Using EmailNotifier", extra={"smtp_host": settings.smtp_host})
        return EmailNotifier(
            settings.smtp_host,
            settings.alert_email_to,
            port=settings.smtp_port,
            sender=settings.alert_email_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    logger.info("SMTP not configured; alerts will be logged only")
    return LoggingNotifier()
