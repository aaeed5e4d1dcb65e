# app/utils/rate_limiter.py
"""
In-memory sliding-window rate limiter (per process).
Each key keeps a deque of request timestamps inside the window. Keys whose
newest timestamp has left the window are swept at most once per window, so
the map only holds keys that were active recently.
"""

import threading
import time
from collections import deque
from typing import Callable

from app.exceptions import RateLimitExceededError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def hit(self, key: str):
        """Record one request for key, or raise RateLimitExceededError if the window is full."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()

            if len(hits) >= self.max_requests:
                retry_after = max(1, int(hits[0] + self.window_seconds - now) + 1)
                logger.warning(f"Rate limit exceeded for {key} - retry in {retry_after}s")
                raise RateLimitExceededError(
                    "Too many description requests. Please try again later.",
                    retry_after=retry_after,
                )
            hits.append(now)

    def _sweep(self, now: float):
        cutoff = now - self.window_seconds
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]
        self._last_sweep = now
        if idle:
            logger.debug(f"Rate limiter dropped {len(idle)} idle keys")

    def reset(self):
        with self._lock:
            self._hits.clear()
            self._last_sweep = self._clock()
