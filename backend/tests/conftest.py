"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path
from typing import Optional

import pytest
from fastapi.testclient import TestClient

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["CLIENT_URL"] = "http://localhost:3000"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["EMAIL_USER"] = "owner@example.com"
os.environ["EMAIL_PASS"] = "test-app-password"  # pragma: allowlist secret
os.environ.pop("SENTRY_DSN", None)

from services.email_service import EmailProvider, get_email_provider  # noqa: E402
from services.rate_limit_service import RateLimiter  # noqa: E402


class FakeClock:
    """Manually advanced clock for rate limiter tests (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingProvider(EmailProvider):
    """Email provider that records messages instead of sending them."""

    def __init__(self, succeed: bool = True, error: Optional[Exception] = None):
        self.succeed = succeed
        self.error = error
        self.sent: list[dict] = []

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append(
            {
                "to_email": to_email,
                "subject": subject,
                "html_body": html_body,
                "text_body": text_body,
                "reply_to": reply_to,
            }
        )
        return self.succeed


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    """Fresh rate limiter with default limits and a controllable clock."""
    return RateLimiter(max_requests=3, window_seconds=3600, clock=clock)


@pytest.fixture
def mail_provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def valid_form() -> dict:
    """A contact form submission that passes validation."""
    return {
        "name": "Anna Svensson",
        "email": "anna@example.com",
        "tel": "070-123 45 67",
        "subject": "Question about pricing",
        "message": "Hello! I would like to know more about your services.",
    }


@pytest.fixture(scope="function")
def client(rate_limiter: RateLimiter, mail_provider: RecordingProvider):
    """Create a test client with the rate limiter and mail provider overridden."""
    from main import app
    from routers.contact_router import get_rate_limiter

    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_email_provider] = lambda: mail_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
