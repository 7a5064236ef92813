"""
Frequency gate deciding which print calls get an annotation attempt.

The gate is a deterministic rolling counter, not random sampling: call n is
admitted when n % 100 < frequency. Frequency 0 never admits and 100 always
does, and the same call sequence is always gated the same way.

Usage:
    gate = FrequencyGate(frequency=50)
    if gate.should_annotate():
        ...
"""

from __future__ import annotations

import threading

GATE_PERIOD = 100


class FrequencyGate:
    def __init__(self, frequency: int = 50) -> None:
        self._frequency = frequency
        self._count = 0
        self._lock = threading.Lock()

    @property
    def frequency(self) -> int:
        return self._frequency

    def set_frequency(self, frequency: int) -> None:
        """
        Change the admitted share without resetting the counter.

        Side Effects:
            - Modifies gate state (in-memory)
        """
        with self._lock:
            self._frequency = frequency

    def should_annotate(self) -> bool:
        with self._lock:
            self._count += 1
            return self._count % GATE_PERIOD < self._frequency

    def reset(self) -> None:
        with self._lock:
            self._count = 0
