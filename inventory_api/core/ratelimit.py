from __future__ import annotations

import threading
import time
from collections import defaultdict, deque
from typing import Callable, Optional


class SlidingWindowLimiter:
    """
    In-memory per-key request limiter.

    Every call to ``hit`` counts, accepted or not, so a client that keeps
    hammering an endpoint stays blocked until its oldest hit leaves the window.
    State is per process; multiple workers each keep their own counts.
    """

    def __init__(self, name: str, clock: Callable[[], float] = time.monotonic):
        self.name = name
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: float) -> Optional[float]:
        """Record a request; return seconds until retry when over ``limit``, else None."""
        now = self._clock()
        cutoff = now - window_seconds
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            hits.append(now)
            if len(hits) <= limit:
                return None
            return max(hits[0] + window_seconds - now, 0.0)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


api_limiter = SlidingWindowLimiter("api")
auth_limiter = SlidingWindowLimiter("auth")


__all__ = ["SlidingWindowLimiter", "api_limiter", "auth_limiter"]
