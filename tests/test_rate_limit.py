"""Tests for the fixed-window rate limiter."""

import pytest

from whoami_api.exceptions import RateLimitError
from whoami_api.rate_limit import WindowLimiter, _format_retry, check_rate_limit


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestWindowLimiter:
    def test_allows_up_to_limit_within_window(self):
        clock = FakeClock()
        limiter = WindowLimiter(max_requests=3, window_seconds=60, now=clock)
        assert [limiter.check("a") for _ in range(3)] == [0, 0, 0]
        clock.now = 15.2
        assert limiter.check("a") == 45

    def test_window_resets(self):
        clock = FakeClock()
        limiter = WindowLimiter(max_requests=1, window_seconds=60, now=clock)
        assert limiter.check("a") == 0
        assert limiter.check("a") > 0
        clock.now = 60.0
        assert limiter.check("a") == 0

    def test_keys_are_independent(self):
        limiter = WindowLimiter(max_requests=1, window_seconds=60, now=FakeClock())
        assert limiter.check("a") == 0
        assert limiter.check("b") == 0
        assert limiter.check("") == 0

    def test_expired_windows_are_dropped(self):
        clock = FakeClock()
        limiter = WindowLimiter(max_requests=1, window_seconds=60, now=clock)
        for key in ("a", "b", "c"):
            limiter.check(key)
        clock.now = 61.0
        assert limiter.check("d") == 0
        assert set(limiter._windows) == {"d"}


class TestCheckRateLimit:
    def test_disabled_limiter_is_noop(self):
        check_rate_limit(None, "a")

    def test_raises_with_retry_after_header(self):
        limiter = WindowLimiter(max_requests=1, window_seconds=60, now=FakeClock())
        check_rate_limit(limiter, "a")
        with pytest.raises(RateLimitError) as excinfo:
            check_rate_limit(limiter, "a")
        assert excinfo.value.status_code == 429
        assert excinfo.value.headers == {"Retry-After": "60"}
        assert "60 seconds" in excinfo.value.message

    @pytest.mark.parametrize(
        "seconds,expected",
        [(1, "1 second"), (45, "45 seconds"), (90, "2 minutes"), (60 * 60, "60 minutes")],
    )
    def test_format_retry(self, seconds, expected):
        assert _format_retry(seconds) == expected
