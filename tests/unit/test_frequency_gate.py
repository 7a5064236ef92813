"""
Tests for the deterministic frequency gate.
"""

from __future__ import annotations

import pytest

from roastlog.runtime.gates import FrequencyGate


@pytest.mark.parametrize(("frequency", "admitted"), [(0, 0), (1, 1), (50, 50), (100, 100)])
def test_admits_frequency_per_hundred_calls(frequency, admitted):
    gate = FrequencyGate(frequency)

    assert sum(gate.should_annotate() for _ in range(100)) == admitted


def test_same_sequence_is_gated_the_same_way():
    first = FrequencyGate(30)
    second = FrequencyGate(30)

    assert [first.should_annotate() for _ in range(250)] == [second.should_annotate() for _ in range(250)]


def test_set_frequency_keeps_counter():
    gate = FrequencyGate(100)
    for _ in range(99):
        gate.should_annotate()

    gate.set_frequency(1)

    # call 100 lands on 100 % 100 == 0
    assert gate.should_annotate() is True
    assert gate.should_annotate() is False
    assert gate.frequency == 1


def test_reset_restarts_sequence():
    gate = FrequencyGate(1)
    gate.should_annotate()
    gate.should_annotate()

    gate.reset()

    assert [gate.should_annotate() for _ in range(100)].count(True) == 1
