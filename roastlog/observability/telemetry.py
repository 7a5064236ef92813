"""
Minimal in-process telemetry for the annotation pipeline.

Nothing is shipped externally; counters and latencies live in memory so the
status surface and tests can assert instrumentation.
"""

from __future__ import annotations

import contextlib
import threading
import time
from collections import deque
from collections.abc import Iterator
from typing import Any

from roastlog.observability.logging import get_logger

logger = get_logger("roastlog.telemetry")

# Samples kept per latency metric
LATENCY_WINDOW = 1000

_COUNTERS: dict[str, int] = {}
_LATENCIES: dict[str, deque[float]] = {}
_LOCK = threading.Lock()


def _normalize_latency_name(metric_name: str) -> str:
    if metric_name.endswith("_ms"):
        return metric_name
    if metric_name.endswith(".latency"):
        return f"{metric_name}_ms"
    return metric_name


def log_event(event_name: str, **fields: Any) -> None:
    """
    Structured log event. Caller must ensure logged content is already sanitized.

    Side Effects:
        - Writes to logger (debug level)
    """
    logger.debug("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """
    Increment an in-memory counter and emit a debug log.

    Side Effects:
        - Modifies _COUNTERS dict (in-memory state)
        - Writes to logger (debug level)
    """
    with _LOCK:
        value = _COUNTERS.get(name, 0) + increment
        _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counter(name: str) -> int:
    """Read a counter without incrementing it."""
    with _LOCK:
        return _COUNTERS.get(name, 0)


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Context manager for timing code blocks.

    Side Effects:
        - Appends to the bounded _LATENCIES window (in-memory state)
        - Writes to logger (debug level) with timing
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        normalized = _normalize_latency_name(metric_name)
        logger.debug("timing=%s seconds=%.6f", normalized, elapsed)

        with _LOCK:
            _LATENCIES.setdefault(normalized, deque(maxlen=LATENCY_WINDOW)).append(elapsed)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """
    Get latency statistics (min, max, avg, p50, p95) over the most recent
    LATENCY_WINDOW samples of a metric.
    """
    normalized = _normalize_latency_name(metric_name)
    with _LOCK:
        samples = list(_LATENCIES.get(normalized, ()))
    if not samples:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0}

    sorted_samples = sorted(samples)
    count = len(sorted_samples)

    return {
        "count": count,
        "min": sorted_samples[0],
        "max": sorted_samples[-1],
        "avg": sum(sorted_samples) / count,
        "p50": sorted_samples[int(count * 0.50)],
        "p95": sorted_samples[min(int(count * 0.95), count - 1)],
    }


def reset() -> None:
    """
    Clear all counters and latencies (useful for tests).

    Side Effects:
        - Clears _COUNTERS and _LATENCIES (in-memory state)
    """
    with _LOCK:
        _COUNTERS.clear()
        _LATENCIES.clear()
