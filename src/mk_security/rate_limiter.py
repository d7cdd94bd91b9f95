"""Sliding-window rate limiter keyed by operation identifier.

Each key keeps the timestamps of admitted calls inside the current window.
Expired entries are pruned lazily on every check. State lives for the
process lifetime; nothing is persisted.
"""
import math
import threading
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass

from src.mk_common.datetime_utils import monotonic_ms


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    reset_time_seconds: int | None = None


class SlidingWindowRateLimiter:
    """Admission gate: at most `max_requests` admitted calls per rolling window.

    The read-check-append on a key's history runs under one lock, so
    concurrent checks against the same key share a single counter.
    """

    def __init__(self, clock: Callable[[], float] = monotonic_ms) -> None:
        self._clock = clock
        self._history: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def check_and_admit(self, key: str, max_requests: int, window_ms: int) -> RateLimitDecision:
        with self._lock:
            now = self._clock()
            window_start = now - window_ms
            history = self._history[key]
            while history and history[0] <= window_start:
                history.popleft()

            if len(history) >= max_requests:
                if not history:
                    # max_requests <= 0: nothing can ever be admitted
                    return RateLimitDecision(allowed=False, reset_time_seconds=math.ceil(window_ms / 1000))
                reset_ms = history[0] + window_ms - now
                return RateLimitDecision(allowed=False, reset_time_seconds=math.ceil(reset_ms / 1000))

            history.append(now)
            return RateLimitDecision(allowed=True)

    def pending(self, key: str) -> int:
        """Number of timestamps currently retained for `key` (not pruned)."""
        with self._lock:
            return len(self._history.get(key, ()))
