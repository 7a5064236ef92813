"""
Tests for in-process telemetry.

Tests:
- Counters increment and read back
- Latency names are normalized to a _ms suffix
- Latency samples are kept in a bounded window
"""

from __future__ import annotations

from roastlog.observability import telemetry
from roastlog.observability.telemetry import counter, get_counter, get_latency_stats, time_block


def test_counter_increments():
    counter("x.calls")
    counter("x.calls", 2)

    assert get_counter("x.calls") == 3


def test_latency_name_is_normalized():
    with time_block("x.latency"):
        pass

    assert get_latency_stats("x.latency_ms")["count"] == 1


def test_empty_metric_stats():
    assert get_latency_stats("never.latency")["count"] == 0


class TestLatencyWindow:
    def test_samples_are_capped(self):
        for _ in range(telemetry.LATENCY_WINDOW + 5):
            with time_block("x.latency"):
                pass

        assert get_latency_stats("x.latency")["count"] == telemetry.LATENCY_WINDOW

    def test_window_size_is_read_when_a_metric_starts(self, monkeypatch):
        monkeypatch.setattr(telemetry, "LATENCY_WINDOW", 3)

        for _ in range(4):
            with time_block("x.latency"):
                pass

        assert get_latency_stats("x.latency")["count"] == 3
