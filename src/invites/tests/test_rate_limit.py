"""Tests for the invite code validation rate limiters."""

import typing as t
from datetime import datetime, timedelta

import pytest
from freezegun import freeze_time

from invites.rate_limit import CacheRateLimiter, InMemoryRateLimiter, get_rate_limiter

IP = "1.2.3.4"
START = datetime(2026, 6, 1, 12, 0, 0)
WINDOW = timedelta(minutes=15)


@pytest.fixture(params=[InMemoryRateLimiter, CacheRateLimiter], ids=["memory", "cache"])
def limiter(request: pytest.FixtureRequest) -> InMemoryRateLimiter | CacheRateLimiter:
    return request.param(max_attempts=3, window_ms=900_000)  # type: ignore[no-any-return]


class TestRateLimiter:
    def test_unknown_ip_is_allowed(self, limiter: InMemoryRateLimiter) -> None:
        assert limiter.check_allowed(IP)
        assert limiter.attempts(IP) == 0

    def test_check_allowed_is_idempotent(self, limiter: InMemoryRateLimiter) -> None:
        limiter.record_attempt(IP)
        results = {limiter.check_allowed(IP) for _ in range(20)}
        assert results == {True}
        assert limiter.attempts(IP) == 1

    def test_blocks_after_max_attempts(self, limiter: InMemoryRateLimiter) -> None:
        with freeze_time(START):
            for _ in range(2):
                limiter.record_attempt(IP)
            assert limiter.check_allowed(IP)
            limiter.record_attempt(IP)
            assert not limiter.check_allowed(IP)
            assert not limiter.check_allowed(IP)

    def test_other_ips_are_unaffected(self, limiter: InMemoryRateLimiter) -> None:
        for _ in range(3):
            limiter.record_attempt(IP)
        assert not limiter.check_allowed(IP)
        assert limiter.check_allowed("5.6.7.8")

    def test_window_expiry_resets_the_count(self, limiter: InMemoryRateLimiter) -> None:
        with freeze_time(START) as frozen:
            for _ in range(3):
                limiter.record_attempt(IP)
            assert not limiter.check_allowed(IP)

            frozen.tick(WINDOW - timedelta(seconds=1))
            assert not limiter.check_allowed(IP)

            frozen.tick(timedelta(seconds=1))
            assert limiter.check_allowed(IP)

            limiter.record_attempt(IP)
            assert limiter.attempts(IP) == 1

    def test_window_starts_at_first_attempt(self, limiter: InMemoryRateLimiter) -> None:
        with freeze_time(START) as frozen:
            limiter.record_attempt(IP)
            frozen.tick(timedelta(minutes=10))
            limiter.record_attempt(IP)
            limiter.record_attempt(IP)
            assert not limiter.check_allowed(IP)
            # The window opened at START, not at the latest attempt.
            frozen.tick(timedelta(minutes=5))
            assert limiter.check_allowed(IP)

    def test_reset_forgets_everything(self, limiter: InMemoryRateLimiter) -> None:
        for _ in range(3):
            limiter.record_attempt(IP)
        limiter.reset()
        assert limiter.check_allowed(IP)


class TestInMemorySweep:
    def test_expired_entries_are_swept_on_any_call(self) -> None:
        limiter = InMemoryRateLimiter(max_attempts=3, window_ms=60_000)
        with freeze_time(START) as frozen:
            limiter.record_attempt("10.0.0.1")
            limiter.record_attempt("10.0.0.2")
            assert len(limiter) == 2

            frozen.tick(timedelta(minutes=1))
            limiter.check_allowed("10.0.0.3")
            assert len(limiter) == 0

    def test_live_entries_survive_the_sweep(self) -> None:
        limiter = InMemoryRateLimiter(max_attempts=3, window_ms=60_000)
        with freeze_time(START) as frozen:
            limiter.record_attempt("10.0.0.1")
            frozen.tick(timedelta(seconds=30))
            limiter.record_attempt("10.0.0.2")
            frozen.tick(timedelta(seconds=30))
            limiter.check_allowed("10.0.0.3")
            assert len(limiter) == 1
            assert limiter.attempts("10.0.0.2") == 1

    def test_injected_clock(self) -> None:
        now = [1000.0]
        limiter = InMemoryRateLimiter(max_attempts=1, window_ms=2_000, clock=lambda: now[0])
        limiter.record_attempt(IP)
        assert not limiter.check_allowed(IP)
        now[0] += 2
        assert limiter.check_allowed(IP)


class TestGetRateLimiter:
    def test_defaults_to_in_memory_from_settings(self, settings: t.Any) -> None:
        settings.RATE_LIMIT_BACKEND = "memory"
        settings.RATE_LIMIT_MAX_ATTEMPTS = 10
        settings.RATE_LIMIT_WINDOW_MS = 900_000
        limiter = get_rate_limiter()
        assert isinstance(limiter, InMemoryRateLimiter)
        assert limiter.max_attempts == 10
        assert limiter.window_seconds == 900
        assert get_rate_limiter() is limiter

    def test_cache_backend(self, settings: t.Any) -> None:
        settings.RATE_LIMIT_BACKEND = "cache"
        assert isinstance(get_rate_limiter(), CacheRateLimiter)
