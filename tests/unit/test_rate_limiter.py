"""
Tests for the per-client request rate limiter.
"""
import pytest

from app.services.rate_limiter import RateLimiter
from tests.helpers import FakeClock

pytestmark = pytest.mark.unit


class TestRateLimiter:
    def test_limit_is_enforced_per_client(self):
        limiter = RateLimiter(limit=2, timer=FakeClock())
        assert limiter.hit("a")
        assert limiter.hit("a")
        assert not limiter.hit("a")
        assert limiter.hit("b")

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        limiter = RateLimiter(limit=1, window_seconds=60, timer=clock)
        assert limiter.hit("a")
        assert not limiter.hit("a")
        clock.advance(60)
        assert limiter.hit("a")

    def test_reset_clears_all_windows(self):
        limiter = RateLimiter(limit=1, timer=FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert limiter.hit("a")

    def test_zero_limit_disables(self):
        limiter = RateLimiter(limit=0, timer=FakeClock())
        assert not limiter.enabled
        assert all(limiter.hit("a") for _ in range(100))
