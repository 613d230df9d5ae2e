"""
Correlation ID generation and context management.

Every request gets a short ID that appears in log lines, error responses and
Sentry events, so a user report can be matched to server logs.
"""

import re
import uuid
from contextvars import ContextVar

# Context variable for request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Accepted shape for IDs supplied by the client in X-Correlation-ID
_INCOMING_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Returns:
        8-character hexadecimal string (e.g., "abc123de").
    """
    return uuid.uuid4().hex[:8]


def resolve_correlation_id(incoming: str | None) -> str:
    """
    Reuse a client-supplied correlation ID if it is well formed.

    Arbitrary header values end up in logs, so anything that is not a short
    token is replaced with a freshly generated ID.

    Args:
        incoming: Value of the X-Correlation-ID header, if any.

    Returns:
        The incoming ID or a new one.
    """
    if incoming and _INCOMING_ID_PATTERN.match(incoming):
        return incoming
    return generate_correlation_id()


def get_correlation_id() -> str:
    """Current request's correlation ID, or empty string if not set."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for current request context."""
    correlation_id_var.set(correlation_id)
