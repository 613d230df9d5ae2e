"""
Rate Limit Service - per-client throttling for contact form submissions.

Each client identifier (normally the remote IP address) gets a counting
window. The request that pushes the count past the limit blocks the client
for a full window.

State is held in memory by a RateLimiter instance owned by the application
(see main.lifespan) and injected into request handlers. For deployments with
several worker processes each process keeps its own counters.
"""

import math
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

DEFAULT_MAX_REQUESTS = 3  # Max submissions per window
DEFAULT_WINDOW_SECONDS = 3600  # 1 hour
DEFAULT_MAX_ENTRIES = 10000


@dataclass
class RateLimitEntry:
    """Counting window for one client identifier."""

    count: int
    first_attempt: float
    blocked_until: Optional[float] = None

    def is_blocked(self, now: float) -> bool:
        return self.blocked_until is not None and self.blocked_until > now


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of a rate limit check."""

    blocked: bool
    remaining_minutes: Optional[int] = None


class RateLimiter:
    """In-memory blocking-window rate limiter keyed by client identifier."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            max_requests: Requests allowed per window before blocking
            window_seconds: Window length, also used as the block duration
            max_entries: LRU capacity of the entry map (0 or less = unbounded)
            clock: Returns the current time in epoch seconds
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, RateLimitEntry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def window_minutes(self) -> int:
        return math.ceil(self.window_seconds / 60)

    def check(self, identifier: str) -> RateLimitStatus:
        """
        Record a request from ``identifier`` and report whether it is blocked.

        Args:
            identifier: Client identifier (IP address)

        Returns:
            RateLimitStatus; ``remaining_minutes`` is set only when blocked
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)

            if entry is None:
                self._store(identifier, RateLimitEntry(count=1, first_attempt=now))
                return RateLimitStatus(blocked=False)

            self._entries.move_to_end(identifier)

            if entry.blocked_until is not None and entry.blocked_until > now:
                remaining = math.ceil((entry.blocked_until - now) / 60)
                return RateLimitStatus(blocked=True, remaining_minutes=remaining)

            # Expiry is measured from the first attempt, not from blocked_until
            if now - entry.first_attempt > self.window_seconds:
                self._entries[identifier] = RateLimitEntry(count=1, first_attempt=now)
                return RateLimitStatus(blocked=False)

            entry.count += 1
            if entry.count > self.max_requests:
                entry.blocked_until = now + self.window_seconds
                logger.warning(
                    f"Rate limit exceeded for {identifier}: "
                    f"{entry.count} requests, blocked for {self.window_minutes} minutes"
                )
                return RateLimitStatus(
                    blocked=True, remaining_minutes=self.window_minutes
                )

            return RateLimitStatus(blocked=False)

    def peek(self, identifier: str) -> RateLimitStatus:
        """
        Report whether ``identifier`` is currently blocked without counting
        a request.

        Args:
            identifier: Client identifier (IP address)

        Returns:
            RateLimitStatus; ``remaining_minutes`` is set only when blocked
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)
            if entry is None:
                return RateLimitStatus(blocked=False)

            self._entries.move_to_end(identifier)
            if entry.blocked_until is not None and entry.blocked_until > now:
                remaining = math.ceil((entry.blocked_until - now) / 60)
                return RateLimitStatus(blocked=True, remaining_minutes=remaining)
            return RateLimitStatus(blocked=False)

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Drop entries whose window has expired and that are not blocked.

        A swept client is treated exactly as it would have been on its next
        request (the entry would be reset), so sweeping never changes
        observable behavior.

        Args:
            now: Reference time (defaults to the limiter clock)

        Returns:
            Number of entries removed
        """
        with self._lock:
            if now is None:
                now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if not entry.is_blocked(now)
                and now - entry.first_attempt > self.window_seconds
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Rate limiter sweep removed {len(expired)} expired entries")
        return len(expired)

    def get_entry(self, identifier: str) -> Optional[RateLimitEntry]:
        """Return a copy of the entry for ``identifier`` (for inspection)."""
        with self._lock:
            entry = self._entries.get(identifier)
            return replace(entry) if entry is not None else None

    def reset(self) -> None:
        """Forget every client. Useful for testing or admin operations."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _store(self, identifier: str, entry: RateLimitEntry) -> None:
        """Insert an entry, evicting least recently used ones past capacity."""
        self._entries[identifier] = entry
        self._entries.move_to_end(identifier)
        if self.max_entries <= 0:
            return
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Rate limiter at capacity; evicted {evicted}")


def create_rate_limiter(settings) -> RateLimiter:
    """Build a RateLimiter from application settings."""
    return RateLimiter(
        max_requests=settings.CONTACT_RATE_LIMIT_REQUESTS,
        window_seconds=settings.CONTACT_RATE_LIMIT_WINDOW_SECONDS,
        max_entries=settings.RATE_LIMIT_MAX_ENTRIES,
    )
