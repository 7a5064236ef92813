"""
Remote annotation client with timeout, bounded retry, circuit breaker and
rate-limit window.

Safety features:
- Never raises out of request_annotation(); every failure is a RemoteResult
- Short-circuits without a network call while the breaker is open, when no
  API key is configured, or when the rate-limit window is exhausted
- Retries up to 3 attempts with exponential backoff (1s, 2s)
- Each attempt races a configurable timeout
- Transport is injectable (for testing)
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import anthropic
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from roastlog.classification.models import ClassificationResult
from roastlog.config import RoastConfig
from roastlog.infrastructure.retry import CircuitBreaker, RateLimitWindow
from roastlog.infrastructure.settings import (
    ANTHROPIC_MAX_TOKENS,
    ANTHROPIC_MODEL,
    MAX_ANNOTATION_CHARS,
    REMOTE_BASE_DELAY_SECONDS,
    REMOTE_MAX_ATTEMPTS,
    REMOTE_MAX_DELAY_SECONDS,
)
from roastlog.llm.prompts import build_annotation_prompt
from roastlog.observability.logging import get_logger
from roastlog.observability.telemetry import counter, log_event

logger = get_logger(__name__)

Transport = Callable[[str], Awaitable[str]]
AsyncSleep = Callable[[float], Awaitable[None]]

CIRCUIT_OPEN_MESSAGE = "Circuit breaker is open - remote generation temporarily unavailable"
NOT_AVAILABLE_MESSAGE = "Remote client not available - missing API key"
RATE_LIMITED_MESSAGE = "Rate limit exceeded"

_QUOTES = "\"'"


class RemoteGenerationError(RuntimeError):
    """Raised inside the client when a generation attempt fails."""


class EmptyGenerationError(RemoteGenerationError):
    """Raised when the generated text is empty after trimming."""


@dataclass(frozen=True)
class RemoteResult:
    succeeded: bool
    text: str | None = None
    error: str | None = None
    response_time_ms: float = 0.0

    @classmethod
    def success(cls, text: str, response_time_ms: float) -> RemoteResult:
        return cls(succeeded=True, text=text, response_time_ms=response_time_ms)

    @classmethod
    def failure(cls, error: str, response_time_ms: float = 0.0) -> RemoteResult:
        return cls(succeeded=False, error=error, response_time_ms=response_time_ms)


def validate_generated_text(raw: str) -> str:
    """
    Trim and bound generated text.

    Strips whitespace, one wrapping quote on each side, then whitespace again.
    Text longer than the annotation limit is cut with an ellipsis.

    Raises:
        EmptyGenerationError: If nothing is left after trimming
    """
    text = raw.strip()
    if text and text[0] in _QUOTES:
        text = text[1:]
    if text and text[-1] in _QUOTES:
        text = text[:-1]
    text = text.strip()

    if len(text) > MAX_ANNOTATION_CHARS:
        text = text[: MAX_ANNOTATION_CHARS - 3] + "..."

    if not text:
        raise EmptyGenerationError("Empty generation result")
    return text


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class RemoteAnnotationClient:
    """
    Requests annotations from the Anthropic Messages API.

    Owns its circuit breaker and rate-limit window; nothing is shared across
    instances.
    """

    def __init__(
        self,
        config: RoastConfig,
        transport: Transport | None = None,
        sleep: AsyncSleep = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._injected_transport = transport
        self._sleep = sleep
        self._clock = clock
        self._breaker = CircuitBreaker(stage="remote_annotation", clock=clock)
        self._rate_window = RateLimitWindow(clock=clock)
        self._sdk_client: anthropic.AsyncAnthropic | None = None
        self._stats_lock = threading.Lock()
        self._api_calls = 0
        self._total_response_time_ms = 0.0

        if config.api_key:
            self._sdk_client = self._build_sdk_client(config.api_key)

    def _build_sdk_client(self, api_key: str) -> anthropic.AsyncAnthropic | None:
        if self._injected_transport is not None:
            return None
        try:
            # Retries are handled here, not by the SDK
            return anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        except Exception as e:
            logger.warning("Failed to initialize Anthropic client: %s", type(e).__name__)
            counter("remote.init_failed")
            return None

    @property
    def api_calls(self) -> int:
        with self._stats_lock:
            return self._api_calls

    @property
    def average_response_time_ms(self) -> float:
        with self._stats_lock:
            if not self._api_calls:
                return 0.0
            return self._total_response_time_ms / self._api_calls

    def is_available(self) -> bool:
        if not self._config.api_key:
            return False
        return self._injected_transport is not None or self._sdk_client is not None

    def rate_limit_status(self) -> dict[str, object]:
        return self._rate_window.status()

    def circuit_breaker_status(self) -> dict[str, object]:
        return self._breaker.status()

    def update_config(self, config: RoastConfig) -> None:
        """
        Apply a new configuration without rebuilding the client.

        A changed key re-establishes the SDK handle; a cleared key drops it.
        """
        old_key = self._config.api_key
        self._config = config

        if config.api_key and config.api_key != old_key:
            self._sdk_client = self._build_sdk_client(config.api_key)
            log_event("remote.reconfigured", has_client=self.is_available())
        elif not config.api_key:
            self._sdk_client = None

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._api_calls = 0
            self._total_response_time_ms = 0.0

    def _record_call(self, response_time_ms: float) -> None:
        with self._stats_lock:
            self._api_calls += 1
            self._total_response_time_ms += response_time_ms

    async def request_annotation(
        self, sanitized_text: str, classification: ClassificationResult
    ) -> RemoteResult:
        """
        Generate one annotation. Never raises.

        Args:
            sanitized_text: Secret-redacted logged text
            classification: Classification of the same print call

        Returns:
            RemoteResult with text on success, or the failure reason
        """
        start = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000

        if not self._breaker.allow_request():
            return RemoteResult.failure(CIRCUIT_OPEN_MESSAGE, elapsed_ms())

        if not self.is_available():
            counter("remote.unavailable")
            return RemoteResult.failure(NOT_AVAILABLE_MESSAGE, elapsed_ms())

        if self._rate_window.is_exhausted():
            counter("remote.rate_limited")
            return RemoteResult.failure(RATE_LIMITED_MESSAGE, elapsed_ms())

        try:
            prompt = build_annotation_prompt(sanitized_text, classification, self._config.humor_level)
            text = await self._generate_with_retry(prompt)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._breaker.record_failure()
            self._record_call(elapsed_ms())
            counter("remote.failure")
            logger.warning("Remote annotation failed after retries: %s", _error_message(e))
            return RemoteResult.failure(_error_message(e), elapsed_ms())

        self._breaker.record_success()
        self._record_call(elapsed_ms())
        counter("remote.success")
        return RemoteResult.success(text, elapsed_ms())

    async def _generate_with_retry(self, prompt: str) -> str:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(REMOTE_MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=REMOTE_BASE_DELAY_SECONDS, max=REMOTE_MAX_DELAY_SECONDS),
            retry=retry_if_exception_type(Exception),
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._attempt(prompt)
        raise RemoteGenerationError("Retry loop exited without a result")

    async def _attempt(self, prompt: str) -> str:
        self._rate_window.consume()
        timeout_ms = self._config.api_timeout
        transport = self._injected_transport or self._anthropic_transport
        try:
            raw = await asyncio.wait_for(transport(prompt), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            counter("remote.timeout")
            raise TimeoutError(f"API request timeout after {timeout_ms}ms") from e
        return validate_generated_text(raw)

    async def _anthropic_transport(self, prompt: str) -> str:
        client = self._sdk_client
        if client is None:
            raise RemoteGenerationError("Anthropic client not initialized")

        try:
            response = await client.messages.create(
                model=ANTHROPIC_MODEL,
                max_tokens=ANTHROPIC_MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError as e:
            raise TimeoutError(f"Anthropic request timed out: {e}") from e
        except anthropic.RateLimitError as e:
            counter("remote.provider_rate_limited")
            raise OSError(f"Anthropic rate limited: {e}") from e
        except anthropic.AuthenticationError as e:
            logger.warning("Anthropic rejected the API key")
            raise ConnectionError(f"Anthropic authentication failed: {e}") from e
        except anthropic.APIError as e:
            raise ConnectionError(f"Anthropic API error: {e}") from e

        if not response.content:
            raise EmptyGenerationError("Empty response from API")

        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text
        raise RemoteGenerationError("No text content in API response")

    async def aclose(self) -> None:
        client, self._sdk_client = self._sdk_client, None
        if client is not None:
            await client.close()
