"""
Input sanitization for contact form fields.

Markup characters are removed before validation so that nothing resembling
an HTML tag reaches the outgoing email.
"""

import re
from typing import Optional

_ANGLE_BRACKETS = re.compile(r"[<>]")


def sanitize_input(content: Optional[str]) -> str:
    """
    Trim surrounding whitespace and remove every ``<`` and ``>``.

    Missing values are treated as empty strings so every form field can be
    sanitized unconditionally.

    Args:
        content: Raw field value from the request body

    Returns:
        Sanitized string (never None)

    Examples:
        >>> sanitize_input(' <b>hi</b> ')
        'bhi/b'
        >>> sanitize_input(None)
        ''
    """
    if not content:
        return ""

    return _ANGLE_BRACKETS.sub("", content.strip())
