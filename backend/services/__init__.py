"""
Services layer for business logic.

This package contains service modules that encapsulate the contact relay
logic separate from the API routes.
"""

from .contact_service import ContactService
from .email_service import ConsoleProvider, EmailProvider, SMTPProvider
from .rate_limit_service import RateLimiter, RateLimitEntry, RateLimitStatus

__all__ = [
    "ContactService",
    "EmailProvider",
    "SMTPProvider",
    "ConsoleProvider",
    "RateLimiter",
    "RateLimitEntry",
    "RateLimitStatus",
]
