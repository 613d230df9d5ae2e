"""
Sentry SDK configuration with privacy-compliant settings.

Implements:
- Environment-based initialization
- PII scrubbing (contact form bodies carry names, emails and phone numbers)
- Health check filtering
- Loguru integration
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.types import Event, Hint

HEALTH_TRANSACTIONS = ("/api/health", "GET /api/health")


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII before sending to Sentry.

    - Drop the request body (the submitted contact form)
    - Anonymize IP addresses
    - Remove cookies

    Args:
        event: Sentry event.
        hint: Additional context about the event.

    Returns:
        Modified event with PII removed.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"  # Anonymized by Sentry

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("data", None)
        request.pop("cookies", None)

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health check transactions."""
    if event.get("transaction", "") in HEALTH_TRANSACTIONS:
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Sample contact submissions fully, everything else sparsely.

    Args:
        sampling_context: Context about the request being sampled.

    Returns:
        Sample rate between 0.0 and 1.0.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    path = sampling_context.get("asgi_scope", {}).get("path", "")

    # Never trace health checks
    if path == "/api/health":
        return 0.0

    # Contact submissions are low volume and the only interesting traffic
    if path.startswith("/api/contact"):
        return 1.0

    return 0.1


def init_sentry() -> bool:
    """
    Initialize Sentry SDK with FastAPI integration.

    Call this BEFORE creating the FastAPI app instance.
    Sentry is disabled if SENTRY_DSN environment variable is not set.

    Returns:
        True if Sentry was initialized.
    """
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        # Privacy: Do NOT send PII automatically
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            KeyboardInterrupt,
            SystemExit,
        ],
    )
    return True
