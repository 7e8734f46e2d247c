"""Rate limiting utilities for the API."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from whoami_api.exceptions import RateLimitError


class WindowLimiter:
    """Simple in-memory fixed-window limiter keyed by client identifier."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.max_requests = max(1, int(max_requests))
        self.window_seconds = max(1, int(window_seconds))
        self._now = now or time.monotonic
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep = self._now()

    def check(self, key: str) -> int:
        """Return retry-after seconds if the window is exhausted, otherwise 0."""
        now = self._now()
        with self._lock:
            if (now - self._last_sweep) >= self.window_seconds:
                self._sweep(now)
            started, hits = self._windows.get(key, (now, 0))
            if (now - started) >= self.window_seconds:
                started, hits = now, 0
            if hits >= self.max_requests:
                remaining = self.window_seconds - (now - started)
                return max(1, int(math.ceil(remaining)))
            self._windows[key] = (started, hits + 1)
            return 0

    def _sweep(self, now: float) -> None:
        """Drop windows that have expired. Caller holds the lock."""
        expired = [
            key
            for key, (started, _) in self._windows.items()
            if (now - started) >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now


def _format_retry(retry_after: int) -> str:
    if retry_after < 90:
        unit = "second" if retry_after == 1 else "seconds"
        return f"{retry_after} {unit}"
    minutes = int((retry_after + 59) // 60)
    unit = "minute" if minutes == 1 else "minutes"
    return f"{minutes} {unit}"


def check_rate_limit(limiter: WindowLimiter | None, key: str) -> None:
    if limiter is None:
        return
    retry_after = limiter.check(key)
    if retry_after:
        message = f"Rate limit exceeded. Try again in {_format_retry(retry_after)}."
        raise RateLimitError(message=message, retry_after=retry_after)
