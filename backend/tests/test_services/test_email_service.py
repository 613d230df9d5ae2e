"""Tests for email providers."""

import smtplib
from email import message_from_string
from unittest.mock import MagicMock, patch

import pytest

from models.config import Settings
from services.email_service import ConsoleProvider, SMTPProvider, get_email_provider


@pytest.fixture
def smtp_settings() -> Settings:
    return Settings(
        EMAIL_PROVIDER="smtp",
        EMAIL_USER="owner@example.com",
        EMAIL_PASS="app-password",  # pragma: allowlist secret
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=587,
        SMTP_USE_TLS=True,
        SMTP_USE_SSL=False,
    )


def _mock_smtp_class():
    server = MagicMock()
    server.__enter__.return_value = server
    server.__exit__.return_value = False
    server.sendmail.return_value = {}
    smtp_class = MagicMock(return_value=server)
    return smtp_class, server


class TestSMTPProvider:
    """Tests for SMTPProvider."""

    def test_sends_with_starttls_and_login(self, smtp_settings) -> None:
        smtp_class, server = _mock_smtp_class()

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            sent = SMTPProvider(smtp_settings).send(
                "owner@example.com",
                "Subject",
                "<p>html</p>",
                "text",
                reply_to="visitor@example.com",
            )

        assert sent is True
        smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=10.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("owner@example.com", "app-password")
        from_addr, to_addrs, raw = server.sendmail.call_args.args
        assert from_addr == "owner@example.com"
        assert to_addrs == ["owner@example.com"]

        parsed = message_from_string(raw)
        assert parsed["Reply-To"] == "visitor@example.com"
        assert parsed["From"] == "owner@example.com"
        assert parsed.get_content_subtype() == "alternative"
        assert [part.get_content_type() for part in parsed.get_payload()] == [
            "text/plain",
            "text/html",
        ]

    def test_implicit_ssl(self, smtp_settings) -> None:
        smtp_settings.SMTP_USE_SSL = True
        smtp_settings.SMTP_PORT = 465
        ssl_class, server = _mock_smtp_class()

        with patch("services.email_service.smtplib.SMTP_SSL", ssl_class):
            sent = SMTPProvider(smtp_settings).send("a@b.c", "s", "h", "t")

        assert sent is True
        ssl_class.assert_called_once_with("smtp.example.com", 465, timeout=10.0)
        server.starttls.assert_not_called()

    def test_no_reply_to_header_when_absent(self, smtp_settings) -> None:
        smtp_class, server = _mock_smtp_class()

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            SMTPProvider(smtp_settings).send("a@b.c", "s", "h", "t")

        raw = server.sendmail.call_args.args[2]
        assert message_from_string(raw)["Reply-To"] is None

    def test_authentication_failure_returns_false(self, smtp_settings) -> None:
        smtp_class, server = _mock_smtp_class()
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad creds")

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            assert SMTPProvider(smtp_settings).send("a@b.c", "s", "h", "t") is False

    def test_connection_error_returns_false(self, smtp_settings) -> None:
        smtp_class = MagicMock(side_effect=OSError("connection refused"))

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            assert SMTPProvider(smtp_settings).send("a@b.c", "s", "h", "t") is False

    def test_refused_recipient_returns_false(self, smtp_settings) -> None:
        smtp_class, server = _mock_smtp_class()
        server.sendmail.return_value = {"a@b.c": (550, b"no such user")}

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            assert SMTPProvider(smtp_settings).send("a@b.c", "s", "h", "t") is False

    def test_missing_account_returns_false(self, smtp_settings) -> None:
        smtp_settings.EMAIL_USER = ""
        smtp_class, _ = _mock_smtp_class()

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            assert SMTPProvider(smtp_settings).send("a@b.c", "s", "h", "t") is False

        smtp_class.assert_not_called()

    def test_unencodable_subject_returns_false(self, smtp_settings) -> None:
        """A header that would smuggle in another header is never sent."""
        smtp_class, server = _mock_smtp_class()

        with patch("services.email_service.smtplib.SMTP", smtp_class):
            sent = SMTPProvider(smtp_settings).send(
                "owner@example.com",
                "New message: Hello\r\nBcc: victim@evil.test",
                "h",
                "t",
            )

        assert sent is False
        server.sendmail.assert_not_called()


class TestConsoleProvider:
    def test_always_succeeds(self) -> None:
        assert ConsoleProvider().send("a@b.c", "s", "<p>h</p>", "t") is True


class TestGetEmailProvider:
    """Tests for provider selection."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("smtp", SMTPProvider), ("SMTP", SMTPProvider), ("console", ConsoleProvider)],
    )
    def test_selects_configured_provider(self, name, expected) -> None:
        with patch("services.email_service.settings") as mock_settings:
            mock_settings.EMAIL_PROVIDER = name
            assert isinstance(get_email_provider(), expected)

    def test_unknown_provider_falls_back_to_console(self) -> None:
        with patch("services.email_service.settings") as mock_settings:
            mock_settings.EMAIL_PROVIDER = "carrier-pigeon"
            assert isinstance(get_email_provider(), ConsoleProvider)
