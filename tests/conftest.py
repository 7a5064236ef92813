"""
Pytest configuration for roastlog tests

Provides offline fakes shared across test files:
- ManualClock: injectable wall clock advanced by hand
- FakeTransport: scripted remote transport recording every prompt
- no_sleep: async sleep that records delays instead of waiting
"""

from __future__ import annotations

import builtins
from collections.abc import Iterable

import pytest

from roastlog.observability import telemetry


class ManualClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """
    Replays scripted outcomes in order; the last outcome repeats.

    Strings are returned as generated text, exceptions are raised.
    """

    def __init__(self, outcomes: Iterable[str | BaseException]) -> None:
        self.outcomes = list(outcomes)
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def reset_telemetry():
    telemetry.reset()
    yield
    telemetry.reset()


@pytest.fixture(autouse=True)
def restore_print():
    """Never leak an installed print wrapper into other tests."""
    original = builtins.print
    yield
    builtins.print = original


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def no_sleep(sleeps):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep
