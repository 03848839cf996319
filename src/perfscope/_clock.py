"""Monotonic clock helpers."""

import time


def now() -> float:
    return time.perf_counter()


def ms_since(start: float) -> float:
    """Milliseconds elapsed between ``start`` (a value from ``now()``) and now."""
    return (time.perf_counter() - start) * 1000.0
