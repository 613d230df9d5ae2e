"""Contact form service for relaying website inquiries.

This module throttles, sanitizes and validates contact form submissions and
forwards them by email to the configured mail account.
"""

import html
from datetime import datetime, timezone

from loguru import logger

from helpers.contact_validation import validate_contact_form
from helpers.sanitization import sanitize_input
from models.config import Settings, settings
from models.exceptions import (
    ContactValidationException,
    EmailDeliveryException,
    RateLimitExceededException,
)
from models.schemas import ContactFormRequest, ContactMessage
from services.email_service import EmailProvider
from services.rate_limit_service import RateLimiter

SUCCESS_MESSAGE = "Your message has been sent successfully!"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


class ContactService:
    """Service for handling contact form submissions."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        provider: EmailProvider,
        config: Settings = settings,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.provider = provider
        self.config = config

    @staticmethod
    def _format_timestamp(received_at: datetime) -> str:
        return received_at.strftime(TIMESTAMP_FORMAT)

    @classmethod
    def build_message(
        cls, form: ContactFormRequest, client_ip: str, received_at: datetime
    ) -> ContactMessage:
        """Sanitize every field and validate the result.

        Raises:
            ContactValidationException: If any field is invalid
        """
        fields = {
            "name": sanitize_input(form.name),
            "email": sanitize_input(form.email),
            "tel": sanitize_input(form.tel),
            "subject": sanitize_input(form.subject),
            "message": sanitize_input(form.message),
        }

        errors = validate_contact_form(**fields)
        if errors:
            raise ContactValidationException(errors)

        return ContactMessage(**fields, client_ip=client_ip, received_at=received_at)

    @classmethod
    def build_email(
        cls, message: ContactMessage, subject_prefix: str
    ) -> tuple[str, str, str]:
        """Build email content for the site owner.

        All user-provided data is HTML-escaped for the HTML body.

        Returns:
            Tuple of (subject, html_body, text_body)
        """
        # Header values must stay on one line
        header_subject = " ".join(message.subject.split())
        email_subject = f"{subject_prefix} {header_subject}"
        timestamp = cls._format_timestamp(message.received_at)

        text_body = f"""Name: {message.name}
Email: {message.email}
Phone: {message.tel or "—"}
Subject: {message.subject}
Message:
{message.message}
"""

        safe_name = html.escape(message.name)
        safe_email = html.escape(message.email)
        safe_subject = html.escape(message.subject)
        safe_message = html.escape(message.message)
        safe_ip = html.escape(message.client_ip)

        phone_row = (
            f'<p><strong>Phone:</strong> {html.escape(message.tel)}</p>'
            if message.tel
            else ""
        )

        html_body = f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #0d9488;">You have received a new message</h2>
    <hr style="border: none; border-top: 2px solid #0d9488;">

    <p><strong>Name:</strong> {safe_name}</p>
    <p><strong>Email:</strong> <a href="mailto:{safe_email}">{safe_email}</a></p>
    {phone_row}
    <p><strong>Subject:</strong> {safe_subject}</p>

    <hr style="border: none; border-top: 1px solid #ddd; margin: 20px 0;">

    <p><strong>Message:</strong></p>
    <p style="white-space: pre-wrap; background: #f0f9ff; padding: 15px; border-left: 4px solid #0d9488; border-radius: 4px;">{safe_message}</p>

    <hr style="border: none; border-top: 1px solid #ddd; margin: 20px 0;">
    <p style="font-size: 12px; color: #666;">
        IP address: {safe_ip} | Time: {timestamp}
    </p>
</div>"""

        return email_subject, html_body, text_body

    def ensure_not_blocked(self, client_ip: str) -> None:
        """Reject a client that is already blocked, without counting a request.

        Raises:
            RateLimitExceededException: If the client is blocked
        """
        status = self.rate_limiter.peek(client_ip)
        if status.blocked:
            raise RateLimitExceededException(
                remaining_minutes=status.remaining_minutes or 1
            )

    def _check_rate_limit(self, client_ip: str) -> None:
        status = self.rate_limiter.check(client_ip)
        if status.blocked:
            raise RateLimitExceededException(
                remaining_minutes=status.remaining_minutes or 1
            )

    def submit_contact_form(self, form: ContactFormRequest, client_ip: str) -> str:
        """Process a contact form submission.

        Args:
            form: Raw contact form data
            client_ip: Client identifier used for rate limiting

        Returns:
            Confirmation message for the client

        Raises:
            RateLimitExceededException: If the client is currently blocked
            ContactValidationException: If a field fails validation
            EmailDeliveryException: If the provider fails to send the email
        """
        self._check_rate_limit(client_ip)

        message = self.build_message(
            form, client_ip=client_ip, received_at=datetime.now(timezone.utc)
        )
        subject, html_body, text_body = self.build_email(
            message, self.config.CONTACT_SUBJECT_PREFIX
        )
        recipient = self.config.get_contact_recipient()

        try:
            sent = self.provider.send(
                recipient, subject, html_body, text_body, reply_to=message.email
            )
        except Exception as e:
            logger.exception(f"Mail provider raised while relaying contact form: {e!r}")
            raise EmailDeliveryException() from e

        if not sent:
            logger.error(
                f"Failed to relay contact form from {message.email} (IP: {client_ip})"
            )
            raise EmailDeliveryException()

        logger.info(
            f"Contact message received | {message.email} (IP: {client_ip}) | "
            f"Time: {message.received_at.isoformat()}"
        )
        return SUCCESS_MESSAGE
