import smtplib
import types
import unittest
from unittest.mock import MagicMock, patch

from weathermon.alerts import Alert
from weathermon.notifier import EmailNotifier, LoggingNotifier, NotificationResult, build_notifier


def _alert():
    return Alert(location="Delhi", temperature=36.0, threshold=35.0, required_consecutive=2)


def _settings(**overrides):
    values = dict(
        smtp_host=None,
        smtp_port=587,
        smtp_username=None,
        smtp_password=None,
        smtp_use_tls=True,
        alert_email_from=None,
        alert_email_to=None,
    )
    values.update(overrides)
    return types.SimpleNamespace(**values)


class TestEmailNotifier(unittest.TestCase):
    def test_sends_message_over_smtp(self):
        notifier = EmailNotifier(
            "smtp.example.test",
            "ops@example.test",
            port=2525,
            sender="monitor@example.test",
            username="monitor",
            password="pw",
        )
        with patch("weathermon.notifier.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            result = notifier.send(_alert())

        self.assertEqual(result, NotificationResult(ok=True))
        smtp_cls.assert_called_once_with("smtp.example.test", 2525, timeout=10.0)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("monitor", "pw")
        msg = smtp.send_message.call_args[0][0]
        self.assertEqual(msg["Subject"], "Weather Alert for Delhi")
        self.assertEqual(msg["To"], "ops@example.test")
        self.assertEqual(msg["From"], "monitor@example.test")
        self.assertIn("Current temperature: 36.0°C", msg.get_content())

    def test_no_tls_and_no_login_when_not_configured(self):
        notifier = EmailNotifier("localhost", "ops@example.test", port=25, use_tls=False)
        with patch("weathermon.notifier.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            notifier.send(_alert())
        smtp.starttls.assert_not_called()
        smtp.login.assert_not_called()
        smtp.send_message.assert_called_once()

    def test_smtp_failure_is_reported_not_raised(self):
        notifier = EmailNotifier("smtp.example.test", "ops@example.test")
        with patch("weathermon.notifier.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
            result = notifier.send(_alert())
        self.assertFalse(result.ok)
        self.assertIn("SMTPRecipientsRefused", result.error)

    def test_connection_failure_is_reported(self):
        notifier = EmailNotifier("smtp.example.test", "ops@example.test")
        with patch("weathermon.notifier.smtplib.SMTP", side_effect=OSError("connection refused")):
            result = notifier.send(_alert())
        self.assertFalse(result.ok)
        self.assertIn("connection refused", result.error)


class TestBuildNotifier(unittest.TestCase):
    def test_logging_notifier_without_smtp(self):
        notifier = build_notifier(_settings())
        self.assertIsInstance(notifier, LoggingNotifier)
        self.assertTrue(notifier.send(_alert()).ok)

    def test_email_notifier_when_configured(self):
        notifier = build_notifier(_settings(smtp_host="smtp.example.test", alert_email_to="ops@example.test"))
        self.assertIsInstance(notifier, EmailNotifier)
        self.assertEqual(notifier.recipient, "ops@example.test")

    def test_recipient_required(self):
        self.assertIsInstance(build_notifier(_settings(smtp_host="smtp.example.test")), LoggingNotifier)


if __name__ == "__main__":
    unittest.main()
