"""Process-local reachability state for the Redis store."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class StoreHealth:
    """Tracks whether the preferred store is currently reachable.

    Starts out not ready; the Redis connection monitor flips it once the
    first PING succeeds.
    """

    def __init__(self, now: Callable[[], float] | None = None) -> None:
        self._now = now or time.monotonic
        self._lock = threading.Lock()
        self._ready = False
        self._last_error: Optional[str] = None
        self._changed_at = self._now()

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def changed_at(self) -> float:
        return self._changed_at

    def mark_ready(self) -> None:
        with self._lock:
            changed = not self._ready
            self._ready = True
            self._last_error = None
            if changed:
                self._changed_at = self._now()
        if changed:
            logger.info("Redis ready")

    def mark_unavailable(self, reason: str) -> None:
        with self._lock:
            changed = self._ready
            self._ready = False
            self._last_error = reason
            if changed:
                self._changed_at = self._now()
        if changed:
            logger.warning(f"Redis unavailable: {reason}")
