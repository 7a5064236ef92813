"""
End-to-end tests of the RoastLog facade with a real background loop.

Tests:
- Local pipeline annotates print() output and caches repeats
- Remote pipeline through a scripted transport
- Breaker state surfaces in status()
- configure() applies level, frequency and enabled changes in place
- Invalid configuration is rejected without side effects
- cleanup() restores print and blocks further use
"""

from __future__ import annotations

import builtins
import io
import random

import pytest

from roastlog import ConfigurationError, NotInitializedError, RoastConfig, RoastLog
from roastlog.humor.models import HumorLevel
from roastlog.observability.telemetry import get_counter

API_KEY = "sk-ant-test-key"


@pytest.fixture
def roasts():
    created = []

    def _make(*args, **kwargs) -> RoastLog:
        kwargs.setdefault("rng", random.Random(11))
        roast = RoastLog(*args, **kwargs)
        created.append(roast)
        return roast

    yield _make
    for roast in created:
        roast.cleanup()


def local_config(**changes) -> RoastConfig:
    return RoastConfig(frequency=100, **changes)


class TestLocalPipeline:
    def test_print_is_annotated(self, roasts):
        roast = roasts(local_config())
        buf = io.StringIO()

        assert print("Error: db down", file=buf) is None
        assert roast.flush(timeout=5) is True

        lines = buf.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0] == "Error: db down"
        assert lines[1].startswith("🤔 ")
        assert get_counter("engine.remote") == 0
        assert roast.is_enabled is True

    def test_repeat_line_is_served_from_cache(self, roasts):
        roast = roasts(local_config())
        buf = io.StringIO()

        print("same line", file=buf)
        roast.flush(timeout=5)
        print("same line", file=buf)
        roast.flush(timeout=5)

        lines = buf.getvalue().splitlines()
        assert lines[1] == lines[3]
        metrics = roast.metrics()
        assert metrics.total_logs == 2
        assert metrics.cache_hits == 1
        assert metrics.api_calls == 0
        assert metrics.memory_usage > 0

    def test_status_without_credentials(self, roasts):
        roast = roasts(local_config())

        status = roast.status()

        assert status.remote_available is False
        assert status.rate_limit_remaining == 100
        assert status.circuit_breaker.state == "closed"
        assert status.cache.size == 0


class TestRemotePipeline:
    def test_remote_annotation(self, roasts, transport_factory, no_sleep):
        transport = transport_factory(["  'Nice one!'  "])
        roast = roasts(local_config(api_key=API_KEY), transport=transport, sleep=no_sleep)
        buf = io.StringIO()

        print("deploy finished", file=buf)
        assert roast.flush(timeout=5) is True

        assert buf.getvalue().splitlines() == ["deploy finished", "🤔 Nice one!"]
        assert get_counter("engine.remote") == 1
        assert roast.metrics().api_calls == 1
        assert roast.status().rate_limit_remaining == 99

    def test_breaker_opens_and_local_takes_over(self, roasts, transport_factory, no_sleep, clock):
        transport = transport_factory([ConnectionError("down")])
        roast = roasts(
            local_config(api_key=API_KEY), transport=transport, sleep=no_sleep, clock=clock
        )
        buf = io.StringIO()

        for i in range(6):
            print("failure", i, file=buf)
            assert roast.flush(timeout=5) is True

        assert len(buf.getvalue().splitlines()) == 12
        assert get_counter("engine.remote") == 0
        breaker = roast.status().circuit_breaker
        assert breaker.state == "open"
        assert breaker.failure_count == 5
        assert breaker.last_failure_time == clock()
        assert transport.calls == 15


class TestConfigure:
    def test_level_change_applies_to_next_print(self, roasts):
        roast = roasts(local_config())
        buf = io.StringIO()

        roast.configure(humor_level="savage")
        print("hello", file=buf)
        roast.flush(timeout=5)

        assert roast.get_config().humor_level is HumorLevel.SAVAGE
        assert buf.getvalue().splitlines()[1].startswith("🔥 ")

    def test_invalid_change_is_rejected_atomically(self, roasts):
        roast = roasts(local_config())

        with pytest.raises(ConfigurationError):
            roast.configure(humor_level="savage", frequency=500)

        assert roast.get_config().humor_level is HumorLevel.MEDIUM
        assert roast.get_config().frequency == 100

    def test_disable_and_reenable(self, roasts):
        original = builtins.print
        roast = roasts(local_config())

        roast.configure(enabled=False)
        assert builtins.print is original
        assert roast.is_enabled is False

        roast.configure(enabled=True)
        assert builtins.print is roast.interceptor.current

    def test_frequency_zero_skips_annotation(self, roasts):
        roast = roasts(local_config())
        buf = io.StringIO()

        roast.configure(frequency=0)

        assert print("hello", file=buf) is None
        assert buf.getvalue() == "hello\n"

    def test_overrides_apply_over_explicit_config(self, roasts):
        roast = roasts(local_config(), humor_level="mild", cache_size=3)

        assert roast.get_config().humor_level is HumorLevel.MILD
        assert roast.engine.cache.max_size == 3

    def test_reset_stats(self, roasts):
        roast = roasts(local_config())
        print("x", file=io.StringIO())
        roast.flush(timeout=5)

        roast.reset_stats()

        assert roast.metrics().total_logs == 0


class TestLifecycle:
    def test_disabled_config_does_not_install(self, roasts):
        original = builtins.print

        roast = roasts(local_config(enabled=False))

        assert builtins.print is original
        assert roast.is_enabled is False

    def test_cleanup_restores_print_and_blocks_use(self, roasts):
        original = builtins.print
        roast = roasts(local_config())
        print("x", file=io.StringIO())
        roast.flush(timeout=5)

        roast.cleanup()
        roast.cleanup()

        assert builtins.print is original
        assert roast.status().cache.size == 0
        with pytest.raises(NotInitializedError):
            roast.enable()
        with pytest.raises(NotInitializedError):
            roast.configure(frequency=10)

    def test_context_manager(self):
        original = builtins.print

        with RoastLog(local_config(), rng=random.Random(2)) as roast:
            assert builtins.print is roast.interceptor.current
            print("inside", file=io.StringIO())
            assert roast.flush(timeout=5) is True

        assert builtins.print is original
