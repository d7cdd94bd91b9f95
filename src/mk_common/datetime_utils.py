"""Clock utilities: UTC timestamps for results, monotonic time for windows and TTLs."""

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def monotonic_ms() -> float:
    """Milliseconds from a monotonic clock; only differences are meaningful."""
    return time.monotonic() * 1000
