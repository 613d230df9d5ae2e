"""
Contact form validation helper.

Checks structural and length constraints on the five contact form fields and
returns human-readable error messages in field order.
"""

import re
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class LengthRule:
    """Trimmed length bounds for a required text field."""

    label: str
    min_length: int
    max_length: int


NAME_RULE = LengthRule("Name", 2, 100)
SUBJECT_RULE = LengthRule("Subject", 3, 200)
MESSAGE_RULE = LengthRule("Message", 10, 5000)

EMAIL_MAX_LENGTH = 254
TEL_MIN_DIGITS = 7
TEL_MAX_DIGITS = 15

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_DIGITS = re.compile(r"[^0-9]")


def _check_length(value: Optional[str], rule: LengthRule) -> Optional[str]:
    """Return the first failing check for a required text field, if any."""
    if not value:
        return f"{rule.label} is required."

    length = len(value.strip())
    if length < rule.min_length:
        return f"{rule.label} must be at least {rule.min_length} characters."
    if length > rule.max_length:
        return f"{rule.label} must not be longer than {rule.max_length} characters."
    return None


def _check_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return "Email is required."
    if not EMAIL_PATTERN.match(email.strip()):
        return "Please enter a valid email address."
    if len(email.strip()) > EMAIL_MAX_LENGTH:
        return "Email address is too long."
    return None


def _check_tel(tel: Optional[str]) -> Optional[str]:
    # Phone is optional; an empty value is never an error
    if not tel:
        return None
    digits = _NON_DIGITS.sub("", tel)
    if not TEL_MIN_DIGITS <= len(digits) <= TEL_MAX_DIGITS:
        return (
            f"Phone number must contain between {TEL_MIN_DIGITS} "
            f"and {TEL_MAX_DIGITS} digits."
        )
    return None


def validate_contact_form(
    name: Optional[str] = None,
    email: Optional[str] = None,
    tel: Optional[str] = None,
    subject: Optional[str] = None,
    message: Optional[str] = None,
) -> List[str]:
    """
    Validate contact form fields.

    Each field contributes at most one error (its first failing check), and
    errors are returned in the order name, email, tel, subject, message.

    Args:
        name: Sender name (required, 2-100 characters)
        email: Sender email (required, simple address pattern, max 254)
        tel: Phone number (optional, 7-15 digits once formatting is removed)
        subject: Message subject (required, 3-200 characters)
        message: Message body (required, 10-5000 characters)

    Returns:
        List of error messages; empty when the submission is acceptable
    """
    checks = (
        _check_length(name, NAME_RULE),
        _check_email(email),
        _check_tel(tel),
        _check_length(subject, SUBJECT_RULE),
        _check_length(message, MESSAGE_RULE),
    )
    return [error for error in checks if error is not None]
