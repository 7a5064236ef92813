"""
Tests for the print interception handle.

Tests:
- The original line is printed first, the annotation second
- install()/uninstall() are idempotent and restore the original print
- A newer replacement installed by someone else is left in place
- Disabled, gated and empty print calls skip annotation
- Printing from inside classification does not recurse
"""

from __future__ import annotations

import builtins
import io
import random

import pytest

from roastlog.config import RoastConfig
from roastlog.humor.engine import HumorEngine
from roastlog.interceptor import PrintInterceptor
from roastlog.observability.telemetry import get_counter
from roastlog.runtime.gates import FrequencyGate
from roastlog.runtime.loop import BackgroundLoop


@pytest.fixture
def loop():
    background = BackgroundLoop(name="roastlog-test-loop")
    yield background
    background.stop()


@pytest.fixture
def build(loop):
    handles = []

    def _build(frequency: int = 100, **config) -> PrintInterceptor:
        engine = HumorEngine(RoastConfig(**config), rng=random.Random(5))
        interceptor = PrintInterceptor(engine, loop, FrequencyGate(frequency))
        handles.append(interceptor)
        return interceptor

    yield _build
    for handle in handles:
        handle.uninstall()


class TestAnnotation:
    def test_original_line_then_annotation(self, build):
        interceptor = build()
        interceptor.install()
        buf = io.StringIO()

        result = print("Error: db down", file=buf)
        assert interceptor.wait_pending(timeout=5) is True

        lines = buf.getvalue().splitlines()
        assert result is None
        assert lines[0] == "Error: db down"
        assert lines[1].startswith("🤔 ")
        assert len(lines[1]) > 2
        assert interceptor.total_logs == 1

    def test_wrapper_returns_none_like_print(self, build):
        interceptor = build()
        interceptor.install()

        assert print("hello", file=io.StringIO()) is None
        assert interceptor.wait_pending(timeout=5) is True
        assert get_counter("interceptor.annotated") == 1

    def test_wait_pending(self, build):
        interceptor = build()
        interceptor.install()
        buf = io.StringIO()

        for i in range(3):
            print("line", i, file=buf)

        assert interceptor.wait_pending(timeout=5) is True
        assert len(buf.getvalue().splitlines()) == 6
        assert get_counter("interceptor.annotated") == 3

    def test_disabled_config_prints_only_original(self, build):
        interceptor = build(enabled=False)
        interceptor.install()
        buf = io.StringIO()

        assert print("hello", file=buf) is None
        assert buf.getvalue() == "hello\n"
        assert interceptor.total_logs == 1

    def test_gated_call_is_skipped(self, build):
        interceptor = build(frequency=0)
        interceptor.install()
        buf = io.StringIO()

        assert print("hello", file=buf) is None
        assert buf.getvalue() == "hello\n"
        assert get_counter("interceptor.gated") == 1

    def test_empty_print_is_not_annotated(self, build):
        interceptor = build()
        interceptor.install()
        buf = io.StringIO()

        assert print(file=buf) is None
        assert buf.getvalue() == "\n"

    def test_print_inside_classification_does_not_recurse(self, build):
        class Noisy:
            def __str__(self):
                print("inner", file=io.StringIO())
                return "noisy value"

        interceptor = build()
        interceptor.install()
        buf = io.StringIO()

        print(Noisy(), file=buf)

        assert interceptor.wait_pending(timeout=5) is True
        lines = buf.getvalue().splitlines()
        assert lines[0] == "noisy value"
        assert lines[1].startswith("🤔 ")


class TestInstallation:
    def test_install_is_idempotent(self, build):
        original = builtins.print
        interceptor = build()

        interceptor.install()
        interceptor.install()

        assert builtins.print is interceptor.current
        assert interceptor.original is original
        assert builtins.print.__wrapped__ is original

    def test_uninstall_restores_original(self, build):
        original = builtins.print
        interceptor = build()
        interceptor.install()

        interceptor.uninstall()
        interceptor.uninstall()

        assert builtins.print is original
        assert interceptor.installed is False

    def test_newer_replacement_is_left_in_place(self, build):
        interceptor = build()
        interceptor.install()

        def replacement(*args, **kwargs):
            return None

        builtins.print = replacement
        interceptor.uninstall()

        assert builtins.print is replacement
        assert interceptor.installed is False

    def test_reset_stats(self, build):
        interceptor = build(enabled=False)
        interceptor.install()
        print("x", file=io.StringIO())

        interceptor.reset_stats()

        assert interceptor.total_logs == 0
