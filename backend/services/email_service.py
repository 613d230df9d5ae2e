"""Email service for relaying contact form messages.

This module provides a unified interface for sending emails through various providers.
Supports:
- console: Logs emails to console (development)
- smtp: Standard SMTP delivery (Gmail by default)

Providers report failure by returning False and log the underlying error;
callers decide how a failed delivery is surfaced to the client.
"""

import re
import smtplib
from abc import ABC, abstractmethod
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from loguru import logger

from models.config import Settings, settings


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send an email."""
        pass


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(self, config: Settings = settings) -> None:
        """Initialize SMTP provider with settings."""
        self.host = config.SMTP_HOST
        self.port = config.SMTP_PORT
        self.user = config.EMAIL_USER
        self.password = config.EMAIL_PASS
        self.from_email = config.EMAIL_USER
        self.use_tls = config.SMTP_USE_TLS
        self.use_ssl = config.SMTP_USE_SSL
        self.timeout = config.SMTP_TIMEOUT

    def _build_message(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str],
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email
        if reply_to:
            msg["Reply-To"] = reply_to

        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            # Implicit SSL (port 465) - connection is encrypted from start
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            # STARTTLS (port 587) - upgrade to TLS after connection
            server.starttls()
        return server

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send email via SMTP.

        Supports both:
        - Implicit SSL (port 465): use SMTP_USE_SSL=true
        - STARTTLS (port 587): use SMTP_USE_TLS=true
        """
        if not self.from_email:
            logger.error("SMTP: EMAIL_USER is not configured")
            return False

        try:
            logger.info(
                f"SMTP: Connecting to {self.host}:{self.port} "
                f"(SSL={self.use_ssl}, TLS={self.use_tls}, user={self.user})"
            )
            msg = self._build_message(to_email, subject, html_body, text_body, reply_to)

            with self._connect() as server:
                if self.user and self.password:
                    logger.debug("SMTP: Authenticating...")
                    server.login(self.user, self.password)

                refused = server.sendmail(self.from_email, [to_email], msg.as_string())
                if refused:
                    logger.error(f"SMTP: Recipients refused - {refused}")
                    return False

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP: Recipients refused - {e.recipients}")
            return False
        except smtplib.SMTPSenderRefused as e:
            logger.error(f"SMTP: Sender refused - {e.smtp_code}: {e.smtp_error!r}")
            return False
        except smtplib.SMTPDataError as e:
            logger.error(f"SMTP: Data error - {e.smtp_code}: {e.smtp_error!r}")
            return False
        except smtplib.SMTPAuthenticationError as e:
            logger.error(
                f"SMTP: Authentication failed - {e.smtp_code}: {e.smtp_error!r}"
            )
            return False
        except MessageError as e:
            logger.error(f"SMTP: Could not build message for {to_email}: {e!r}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_email}: {e!r}")
            return False


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Log email to console."""
        clean_html = re.sub(r"<[^>]+>", "", html_body)[:500]
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (Console Provider - Development Mode)\n"
            f"{'=' * 60}\n"
            f"To: {to_email}\n"
            f"Reply-To: {reply_to or '-'}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"PLAIN TEXT:\n{text_body}\n"
            f"{'-' * 60}\n"
            f"HTML (preview):\n{clean_html}\n"
            f"{'=' * 60}\n"
        )
        return True


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider()
    elif provider_name == "console":
        return ConsoleProvider()
    else:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()
