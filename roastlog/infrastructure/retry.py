"""
Circuit breaker and rate-limit window for the remote generation client.

Breaker state is a tagged variant: exactly one of Closed, Open or HalfOpen,
each carrying only the fields meaningful in that state. Transitions replace
the state object instead of mutating counters in place.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

from roastlog.infrastructure.settings import (
    CIRCUIT_FAIL_MAX,
    CIRCUIT_RESET_TIMEOUT_SECONDS,
    RATE_LIMIT_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
)
from roastlog.observability.telemetry import counter, log_event

Clock = Callable[[], float]


@dataclass(frozen=True)
class Closed:
    failure_count: int = 0
    last_failure_at: float | None = None

    name = "closed"


@dataclass(frozen=True)
class Open:
    failure_count: int
    last_failure_at: float

    name = "open"


@dataclass(frozen=True)
class HalfOpen:
    failure_count: int
    last_failure_at: float

    name = "half-open"


BreakerState = Union[Closed, Open, HalfOpen]


@dataclass
class CircuitBreaker:
    """
    Failure-accounting state machine guarding remote calls.

    closed -> open after fail_max consecutive failures.
    open -> half-open once reset_timeout has elapsed since the last failure.
    half-open -> closed on success; a half-open failure increments the count
    again and re-opens with a fresh cooldown.
    """

    stage: str
    fail_max: int = CIRCUIT_FAIL_MAX
    reset_timeout: float = CIRCUIT_RESET_TIMEOUT_SECONDS
    clock: Clock = time.time
    _state: BreakerState = field(default_factory=Closed, init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    @property
    def state(self) -> BreakerState:
        with self._lock:
            return self._state

    def allow_request(self) -> bool:
        """Return False while open and cooling down; promote to half-open after."""
        with self._lock:
            state = self._state
            if not isinstance(state, Open):
                return True
            if self.clock() - state.last_failure_at >= self.reset_timeout:
                self._state = HalfOpen(state.failure_count, state.last_failure_at)
                log_event("circuit.half_open", stage=self.stage, failures=state.failure_count)
                return True
            counter("remote.short_circuit")
            log_event("circuit.open", stage=self.stage)
            return False

    def record_success(self) -> None:
        with self._lock:
            if not isinstance(self._state, Closed) or self._state.failure_count:
                log_event("circuit.closed", stage=self.stage)
            self._state = Closed()

    def record_failure(self) -> None:
        with self._lock:
            failures = self._state.failure_count + 1
            now = self.clock()
            if failures >= self.fail_max:
                self._state = Open(failures, now)
                counter("circuit.opened")
                log_event("circuit.opened", stage=self.stage, failures=failures)
            else:
                self._state = Closed(failures, now)

    def reset(self) -> None:
        with self._lock:
            self._state = Closed()

    def status(self) -> dict[str, object]:
        with self._lock:
            state = self._state
            return {
                "state": state.name,
                "failure_count": state.failure_count,
                "last_failure_time": state.last_failure_at,
            }


@dataclass
class RateLimitWindow:
    """Fixed request quota that refills once the window has passed."""

    limit: int = RATE_LIMIT_REQUESTS
    window_seconds: float = RATE_LIMIT_WINDOW_SECONDS
    clock: Clock = time.time
    remaining: int = field(init=False)
    reset_at: float = field(init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.remaining = self.limit
        self.reset_at = self.clock() + self.window_seconds

    def _refill_if_due(self) -> None:
        now = self.clock()
        if now >= self.reset_at:
            self.remaining = self.limit
            self.reset_at = now + self.window_seconds

    def is_exhausted(self) -> bool:
        with self._lock:
            self._refill_if_due()
            return self.remaining <= 0

    def consume(self) -> None:
        """Account for one outbound attempt."""
        with self._lock:
            self._refill_if_due()
            self.remaining = max(0, self.remaining - 1)

    def reset(self) -> None:
        with self._lock:
            self.remaining = self.limit
            self.reset_at = self.clock() + self.window_seconds

    def status(self) -> dict[str, object]:
        with self._lock:
            self._refill_if_due()
            return {"remaining": self.remaining, "reset_at": self.reset_at}
