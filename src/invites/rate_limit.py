"""Per-IP throttle for invite code validation attempts.

Each client IP gets a fixed window (RATE_LIMIT_WINDOW_MS) that starts with
its first recorded attempt. Once RATE_LIMIT_MAX_ATTEMPTS attempts are
recorded inside the window, the IP is refused until the window ends.

Only failed validations are recorded by the caller. Checking and recording
are separate calls: two parallel requests from the same IP may both pass the
check before either records, so the limit can be overshot by the number of
concurrent requests. This is a heuristic brake on code guessing, not an
exact quota.

Backends:
    InMemoryRateLimiter: process-local dict, swept lazily on every call.
        Counters are lost on restart and not shared between workers.
    CacheRateLimiter: Django cache entries that expire with their window.
        Shared across processes when the configured cache is (e.g. Redis).
"""

import math
import threading
import time
import typing as t
from dataclasses import dataclass

import structlog
from django.conf import settings
from django.core.cache import cache

logger = structlog.get_logger(__name__)

CACHE_KEY_PREFIX = "invites:rate_limit"


@dataclass
class RateLimitEntry:
    """Attempt counter for one IP.

    Attributes:
        count: Attempts recorded in the current window.
        reset_at: Epoch seconds at which the window ends.
    """

    count: int
    reset_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.reset_at


class RateLimiter(t.Protocol):
    """Interface shared by the rate limiter backends."""

    def check_allowed(self, ip: str) -> bool:
        """Return whether ``ip`` may make another attempt now. Never records anything."""
        ...

    def record_attempt(self, ip: str) -> None:
        """Count one attempt for ``ip``, opening a fresh window if none is live."""
        ...

    def attempts(self, ip: str) -> int:
        """Return the attempts counted for ``ip`` in its live window (0 if none)."""
        ...

    def reset(self) -> None:
        """Forget every counter."""
        ...


class InMemoryRateLimiter:
    """Process-local rate limiter."""

    def __init__(
        self,
        max_attempts: int | None = None,
        window_ms: int | None = None,
        clock: t.Callable[[], float] | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_attempts: Attempts allowed per window. Defaults to RATE_LIMIT_MAX_ATTEMPTS.
            window_ms: Window length in milliseconds. Defaults to RATE_LIMIT_WINDOW_MS.
            clock: Callable returning epoch seconds. Defaults to time.time.
        """
        self.max_attempts = max_attempts if max_attempts is not None else settings.RATE_LIMIT_MAX_ATTEMPTS
        window_ms = window_ms if window_ms is not None else settings.RATE_LIMIT_WINDOW_MS
        self.window_seconds = window_ms / 1000
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        # Django serves sync views from a thread pool; the lock keeps each call consistent.
        self._lock = threading.Lock()

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    def _sweep(self, now: float) -> None:
        expired = [ip for ip, entry in self._entries.items() if entry.is_expired(now)]
        for ip in expired:
            del self._entries[ip]

    def check_allowed(self, ip: str) -> bool:
        """Return whether ``ip`` may attempt another validation."""
        with self._lock:
            now = self._now()
            self._sweep(now)
            entry = self._entries.get(ip)
            if entry is None:
                return True
            return entry.count < self.max_attempts

    def record_attempt(self, ip: str) -> None:
        """Record one attempt for ``ip``."""
        with self._lock:
            now = self._now()
            self._sweep(now)
            entry = self._entries.get(ip)
            if entry is None:
                self._entries[ip] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
            else:
                entry.count += 1
                if entry.count >= self.max_attempts:
                    logger.warning("rate_limit_reached", ip=ip, attempts=entry.count)

    def attempts(self, ip: str) -> int:
        """Return the attempts recorded for ``ip`` in its live window."""
        with self._lock:
            self._sweep(self._now())
            entry = self._entries.get(ip)
            return entry.count if entry else 0

    def reset(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class CacheRateLimiter:
    """Rate limiter storing its counters in the Django cache."""

    def __init__(
        self,
        max_attempts: int | None = None,
        window_ms: int | None = None,
        clock: t.Callable[[], float] | None = None,
    ) -> None:
        """Initialize the limiter. Arguments as for InMemoryRateLimiter."""
        self.max_attempts = max_attempts if max_attempts is not None else settings.RATE_LIMIT_MAX_ATTEMPTS
        window_ms = window_ms if window_ms is not None else settings.RATE_LIMIT_WINDOW_MS
        self.window_seconds = window_ms / 1000
        self._clock = clock

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    @staticmethod
    def _key(ip: str) -> str:
        return f"{CACHE_KEY_PREFIX}:{ip}"

    def _live_entry(self, ip: str, now: float) -> RateLimitEntry | None:
        data = cache.get(self._key(ip))
        if data is None:
            return None
        entry = RateLimitEntry(count=data["count"], reset_at=data["reset_at"])
        return None if entry.is_expired(now) else entry

    def check_allowed(self, ip: str) -> bool:
        """Return whether ``ip`` may attempt another validation."""
        entry = self._live_entry(ip, self._now())
        return entry is None or entry.count < self.max_attempts

    def record_attempt(self, ip: str) -> None:
        """Record one attempt for ``ip``; the cache entry expires with the window."""
        now = self._now()
        entry = self._live_entry(ip, now)
        if entry is None:
            entry = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
        else:
            entry.count += 1
            if entry.count >= self.max_attempts:
                logger.warning("rate_limit_reached", ip=ip, attempts=entry.count)
        timeout = max(1, math.ceil(entry.reset_at - now))
        cache.set(self._key(ip), {"count": entry.count, "reset_at": entry.reset_at}, timeout=timeout)

    def attempts(self, ip: str) -> int:
        """Return the attempts recorded for ``ip`` in its live window."""
        entry = self._live_entry(ip, self._now())
        return entry.count if entry else 0

    def reset(self) -> None:
        """Drop all rate limit entries from the cache."""
        delete_pattern = getattr(cache, "delete_pattern", None)
        if delete_pattern is not None:  # pragma: no cover
            delete_pattern(f"{CACHE_KEY_PREFIX}:*")
        else:
            cache.clear()


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get the process-wide rate limiter for the configured backend."""
    global _rate_limiter
    if _rate_limiter is None:
        if settings.RATE_LIMIT_BACKEND == "cache":
            _rate_limiter = CacheRateLimiter()
        else:
            _rate_limiter = InMemoryRateLimiter()
    return _rate_limiter
