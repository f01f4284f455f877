"""Unit tests for the minimum-interval rate limiter."""

from __future__ import annotations

import pytest

from autologin.core.rate_limiter import RateLimiter


class TestRateLimiter:
    def test_first_request_is_not_throttled(self, clock) -> None:
        limiter = RateLimiter(5000, clock=clock, sleep=clock.sleep)
        assert limiter.wait() == 0.0
        assert clock.sleeps == []

    def test_waits_full_interval_after_mark(self, clock) -> None:
        limiter = RateLimiter(3000, clock=clock, sleep=clock.sleep)
        limiter.wait()
        limiter.mark()

        assert limiter.wait() == pytest.approx(3.0)
        assert clock.sleeps == [pytest.approx(3.0)]

    def test_waits_only_the_remainder(self, clock) -> None:
        limiter = RateLimiter(5000, clock=clock, sleep=clock.sleep)
        limiter.mark()
        clock.now += 2.0

        assert limiter.wait() == pytest.approx(3.0)

    def test_no_wait_once_interval_passed(self, clock) -> None:
        limiter = RateLimiter(1000, clock=clock, sleep=clock.sleep)
        limiter.mark()
        clock.now += 1.5

        assert limiter.wait() == 0.0
        assert clock.sleeps == []

    def test_zero_interval(self, clock) -> None:
        limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)
        limiter.mark()
        assert limiter.wait() == 0.0

    def test_status(self, clock) -> None:
        limiter = RateLimiter(2000, clock=clock, sleep=clock.sleep)
        limiter.mark()
        clock.now += 0.5

        status = limiter.status
        assert status["least_interval"] == 2.0
        assert status["last_request_time"] == clock.now - 0.5
        assert status["seconds_until_ready"] == pytest.approx(1.5)
