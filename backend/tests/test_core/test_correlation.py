"""Tests for correlation ID generation and context management."""

import re
from concurrent.futures import ThreadPoolExecutor

from core.correlation import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from models.exceptions import EmailDeliveryException, RateLimitExceededException


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_returns_hex_string(self) -> None:
        """Correlation ID should be an 8-character hexadecimal string."""
        assert re.match(r"^[0-9a-f]{8}$", generate_correlation_id())

    def test_generates_unique_ids(self) -> None:
        ids = {generate_correlation_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestResolveCorrelationId:
    def test_keeps_well_formed_incoming_id(self) -> None:
        assert resolve_correlation_id("frontend-42_x") == "frontend-42_x"

    def test_replaces_missing_id(self) -> None:
        assert len(resolve_correlation_id(None)) == 8

    def test_replaces_suspicious_id(self) -> None:
        resolved = resolve_correlation_id("{evil}\nINJECTED LOG LINE")
        assert re.match(r"^[0-9a-f]{8}$", resolved)

    def test_replaces_overlong_id(self) -> None:
        assert resolve_correlation_id("a" * 65) != "a" * 65


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_set_and_get_correlation_id(self) -> None:
        set_correlation_id("abc12345")
        assert get_correlation_id() == "abc12345"

    def test_get_returns_empty_string_when_not_set(self) -> None:
        correlation_id_var.set("")
        assert get_correlation_id() == ""

    def test_context_isolation_between_threads(self) -> None:
        """Each thread should see only its own correlation ID."""

        def set_and_get(thread_id: int) -> str:
            set_correlation_id(f"thread{thread_id}")
            return get_correlation_id()

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(set_and_get, range(4)))

        assert results == [f"thread{i}" for i in range(4)]


class TestDomainExceptionCorrelation:
    def test_exception_uses_request_correlation_id(self) -> None:
        set_correlation_id("req00001")
        exc = EmailDeliveryException()
        assert exc.correlation_id == "req00001"

    def test_exception_generates_id_outside_request(self) -> None:
        correlation_id_var.set("")
        exc = RateLimitExceededException(remaining_minutes=5)
        assert len(exc.correlation_id) == 8
        assert exc.message == "Too many attempts. Please try again in 5 minutes."
