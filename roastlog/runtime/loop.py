"""
Background event loop running the annotation pipeline.

The intercepted print runs on arbitrary caller threads and must never block,
so pipeline coroutines are handed to one daemon thread that owns an asyncio
loop. Callers get a concurrent.futures.Future back.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Coroutine
from concurrent.futures import Future
from typing import Any, TypeVar

from roastlog.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BackgroundLoop:
    """Lazily started asyncio loop on a daemon thread."""

    def __init__(self, name: str = "roastlog-loop") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is not None and self.is_running:
                return self._loop

            loop = asyncio.new_event_loop()
            ready = threading.Event()

            def run() -> None:
                asyncio.set_event_loop(loop)
                loop.call_soon(ready.set)
                loop.run_forever()

            thread = threading.Thread(target=run, name=self._name, daemon=True)
            thread.start()
            ready.wait()

            self._loop = loop
            self._thread = thread
            logger.debug("Started background loop thread %s", self._name)
            return loop

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Schedule a coroutine on the loop thread."""
        loop = self.start()
        return asyncio.run_coroutine_threadsafe(coro, loop)

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run a coroutine on the loop thread and wait for its result."""
        return self.submit(coro).result(timeout=timeout)

    def stop(self, timeout: float = 5.0) -> None:
        """Cancel pending work, stop the loop and join the thread."""
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None

        if loop is None or thread is None:
            return

        async def _cancel_pending() -> None:
            current = asyncio.current_task()
            pending = [t for t in asyncio.all_tasks() if t is not current]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if thread.is_alive():
            try:
                asyncio.run_coroutine_threadsafe(_cancel_pending(), loop).result(timeout=timeout)
            except Exception as e:
                logger.warning("Background loop did not drain cleanly: %s", type(e).__name__)
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout=timeout)

        if not thread.is_alive():
            loop.close()
