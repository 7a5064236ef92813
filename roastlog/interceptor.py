"""
Print interception handle.

PrintInterceptor owns the original and the wrapped `builtins.print`. The
wrapped print always emits the original line first, then (when the frequency
gate admits the call) classifies the values on the caller's thread and hands
the annotation pipeline to the background loop. The annotation is printed as
a second line once it resolves. Pipeline failures never reach the caller.

Like print, the wrapper returns None; wait_pending() waits for annotations
still in flight.
"""

from __future__ import annotations

import builtins
import threading
from collections.abc import Callable
from concurrent.futures import Future, wait
from typing import Any

from roastlog.classification.analyzer import classify
from roastlog.classification.models import ClassificationResult
from roastlog.humor.engine import HumorEngine
from roastlog.humor.models import AnnotationResult
from roastlog.observability.logging import get_logger
from roastlog.observability.telemetry import counter
from roastlog.runtime.gates import FrequencyGate
from roastlog.runtime.loop import BackgroundLoop

logger = get_logger(__name__)

PrintFn = Callable[..., Any]


class PrintInterceptor:
    """Explicit handle over the process-wide print function."""

    def __init__(
        self,
        engine: HumorEngine,
        loop: BackgroundLoop,
        gate: FrequencyGate,
    ) -> None:
        self._engine = engine
        self._loop = loop
        self._gate = gate
        self._original: PrintFn | None = None
        self._current: PrintFn | None = None
        self._guard = threading.local()
        self._pending: set[Future[AnnotationResult | None]] = set()
        self._pending_lock = threading.Lock()
        self._total_logs = 0

    @property
    def installed(self) -> bool:
        return self._current is not None

    @property
    def original(self) -> PrintFn | None:
        return self._original

    @property
    def current(self) -> PrintFn | None:
        return self._current

    @property
    def total_logs(self) -> int:
        return self._total_logs

    def install(self) -> None:
        if self.installed:
            return
        original = builtins.print
        wrapped = self._wrap(original)
        self._original = original
        self._current = wrapped
        builtins.print = wrapped
        counter("interceptor.installed")

    def uninstall(self) -> None:
        if not self.installed:
            return
        if builtins.print is self._current:
            builtins.print = self._original
        else:
            logger.warning("print was replaced after install; leaving the newer function in place")
        self._original = None
        self._current = None
        counter("interceptor.uninstalled")

    def wait_pending(self, timeout: float | None = None) -> bool:
        """Wait for outstanding annotations. Returns True if all finished."""
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def reset_stats(self) -> None:
        self._total_logs = 0

    def _wrap(self, original: PrintFn) -> PrintFn:
        def roasted_print(*values: Any, **kwargs: Any) -> None:
            original(*values, **kwargs)
            self._after_print(original, values, kwargs.get("file"))

        roasted_print.__wrapped__ = original  # type: ignore[attr-defined]
        return roasted_print

    def _after_print(
        self,
        original: PrintFn,
        values: tuple[Any, ...],
        file: Any,
    ) -> Future[AnnotationResult | None] | None:
        # Printing from inside classification (e.g. a noisy __str__) must not recurse
        if getattr(self._guard, "active", False):
            return None

        self._guard.active = True
        try:
            with self._pending_lock:
                self._total_logs += 1
            if not values or not self._engine.config.enabled:
                return None
            if not self._gate.should_annotate():
                counter("interceptor.gated")
                return None

            classification = classify(values)
            future = self._loop.submit(self._annotate(original, values, classification, file))
        except Exception as e:
            logger.warning("Failed to schedule annotation: %s", e)
            counter("interceptor.schedule_error")
            return None
        finally:
            self._guard.active = False

        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        counter("interceptor.scheduled")
        return future

    def _discard(self, future: Future[AnnotationResult | None]) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    async def _annotate(
        self,
        original: PrintFn,
        values: tuple[Any, ...],
        classification: ClassificationResult,
        file: Any,
    ) -> AnnotationResult | None:
        try:
            annotation = await self._engine.produce_annotation(values, classification)
            if annotation.text:
                original(self._engine.format_response(annotation.text), file=file)
                counter("interceptor.annotated")
            return annotation
        except Exception as e:
            logger.warning("Annotation failed: %s", e)
            counter("interceptor.annotation_error")
            return None
