"""
RoastLog facade: builds the pipeline, owns the print interception handle and
exposes configuration, status and metrics.

Usage:
    from roastlog import RoastLog

    roast = RoastLog(humor_level="savage", frequency=100)
    print("Error: db down")   # original line, then a 🔥 annotation
    roast.cleanup()
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from roastlog.config import ConfigurationManager, RoastConfig
from roastlog.humor.engine import HumorEngine
from roastlog.humor.phrases import PhraseTable
from roastlog.interceptor import PrintInterceptor
from roastlog.llm.client import AsyncSleep, RemoteAnnotationClient, Transport
from roastlog.observability.logging import get_logger
from roastlog.runtime.gates import FrequencyGate
from roastlog.runtime.loop import BackgroundLoop
from roastlog.storage.cache import ResponseCache

logger = get_logger(__name__)


class NotInitializedError(RuntimeError):
    """Raised when the facade is used after cleanup()."""


class CacheStatus(BaseModel):
    size: int
    hit_rate: float


class BreakerStatus(BaseModel):
    state: str
    failure_count: int
    last_failure_time: float | None = None


class StatusSnapshot(BaseModel):
    """Read-only view of pipeline health."""

    cache: CacheStatus
    remote_available: bool
    rate_limit_remaining: int
    circuit_breaker: BreakerStatus


class PerformanceMetrics(BaseModel):
    total_logs: int = Field(default=0, description="Print calls seen while enabled")
    api_calls: int = Field(default=0, description="Remote requests that reached the network")
    cache_hits: int = 0
    average_response_time_ms: float = 0.0
    memory_usage: int = Field(default=0, description="Estimated cache footprint in bytes")


class RoastLog:
    """
    One running roastlog instance.

    Builds every component from the effective configuration and installs the
    print interception when `enabled` is set.
    """

    def __init__(
        self,
        config: RoastConfig | None = None,
        *,
        transport: Transport | None = None,
        sleep: AsyncSleep = asyncio.sleep,
        clock: Callable[[], float] | None = None,
        rng: random.Random | None = None,
        cwd: Path | None = None,
        **overrides: Any,
    ) -> None:
        self._manager = ConfigurationManager(overrides, cwd=cwd, base=config)
        cfg = self._manager.get_config()

        clock_kwargs = {"clock": clock} if clock is not None else {}
        self._cache = ResponseCache(cfg.cache_size, **clock_kwargs)
        self._client = RemoteAnnotationClient(cfg, transport=transport, sleep=sleep, **clock_kwargs)
        self._engine = HumorEngine(
            cfg,
            cache=self._cache,
            phrases=PhraseTable(rng=rng),
            client=self._client,
            rng=rng,
        )
        self._gate = FrequencyGate(cfg.frequency)
        self._loop = BackgroundLoop()
        self._interceptor = PrintInterceptor(self._engine, self._loop, self._gate)
        self._initialized = True

        if cfg.enabled:
            self.enable()

    @property
    def engine(self) -> HumorEngine:
        return self._engine

    @property
    def interceptor(self) -> PrintInterceptor:
        return self._interceptor

    @property
    def is_enabled(self) -> bool:
        return self._interceptor.installed

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError("RoastLog has been cleaned up; create a new instance")

    def enable(self) -> None:
        self._ensure_initialized()
        self._interceptor.install()

    def disable(self) -> None:
        self._interceptor.uninstall()

    def configure(self, **changes: Any) -> RoastConfig:
        """
        Apply configuration changes to every component in place.

        Raises:
            ConfigurationError: If the changes are invalid (nothing is applied)
            NotInitializedError: After cleanup()
        """
        self._ensure_initialized()
        cfg = self._manager.update_config(**changes)
        self._engine.update_config(cfg)
        self._gate.set_frequency(cfg.frequency)

        if "enabled" in changes:
            if cfg.enabled:
                self.enable()
            else:
                self.disable()
        return cfg

    def get_config(self) -> RoastConfig:
        return self._manager.get_config()

    def status(self) -> StatusSnapshot:
        stats = self._cache.stats()
        return StatusSnapshot(
            cache=CacheStatus(size=stats.size, hit_rate=stats.hit_rate),
            remote_available=self._client.is_available(),
            rate_limit_remaining=self._client.rate_limit_status()["remaining"],
            circuit_breaker=BreakerStatus(**self._client.circuit_breaker_status()),
        )

    def metrics(self) -> PerformanceMetrics:
        detailed = self._cache.detailed_stats()
        return PerformanceMetrics(
            total_logs=self._interceptor.total_logs,
            api_calls=self._client.api_calls,
            cache_hits=detailed["hits"],
            average_response_time_ms=self._client.average_response_time_ms,
            memory_usage=detailed["memory_usage"],
        )

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for annotations still in flight."""
        return self._interceptor.wait_pending(timeout)

    def clear_cache(self) -> None:
        self._engine.clear_cache()

    def reset_stats(self) -> None:
        self._interceptor.reset_stats()
        self._client.reset_stats()
        self._gate.reset()

    def cleanup(self) -> None:
        """Restore print, stop the background loop and release the remote handle."""
        if not self._initialized:
            return
        self.disable()
        if self._loop.is_running:
            try:
                self._loop.run(self._client.aclose(), timeout=5.0)
            except Exception as e:
                logger.warning("Failed to close remote client: %s", type(e).__name__)
        self._loop.stop()
        self._cache.clear()
        self._initialized = False

    def __enter__(self) -> RoastLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()
