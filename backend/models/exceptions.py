"""
Custom domain exceptions for the contact relay.

These exceptions are raised by the service layer and converted to HTTP responses
by centralized exception handlers in main.py, keeping the services HTTP-agnostic.

Enhanced with correlation IDs for Sentry integration and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ContactValidationException(ValidationException):
    """A contact form field failed validation.

    Only the first error is carried; the full list stays on ``errors``.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__(errors[0])
        self.errors = errors


class RateLimitExceededException(DomainException):
    """Raised when a client has used up its contact form budget."""

    def __init__(self, remaining_minutes: int, message: str | None = None):
        super().__init__(
            message
            or f"Too many attempts. Please try again in {remaining_minutes} minutes."
        )
        self.remaining_minutes = remaining_minutes

    @property
    def retry_after(self) -> int:
        """Retry-After header value in seconds."""
        return self.remaining_minutes * 60


class EmailDeliveryException(DomainException):
    """Raised when the mail provider fails to send a message."""

    def __init__(
        self, message: str = "The message could not be sent. Please try again later."
    ):
        super().__init__(message)
