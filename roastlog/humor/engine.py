"""
Annotation orchestrator: cache check, remote attempt, local fallback and
cache write-back.

Every step is individually fault tolerant. A failing step is logged, counted
and skipped, so produce_annotation() always returns a non-empty annotation.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

from roastlog.classification.analyzer import classify
from roastlog.classification.models import ClassificationResult, Sentiment
from roastlog.config import RoastConfig
from roastlog.humor.models import AnnotationResult, HumorLevel, PhraseCategory
from roastlog.humor.phrase_bank import BACKSTOP_PHRASES
from roastlog.humor.phrases import PhraseTable
from roastlog.llm.client import RemoteAnnotationClient
from roastlog.observability.logging import get_logger
from roastlog.observability.telemetry import counter, log_event, time_block
from roastlog.storage.cache import ResponseCache

logger = get_logger(__name__)

LEVEL_PREFIXES: dict[HumorLevel, str] = {
    HumorLevel.MILD: "💭",
    HumorLevel.MEDIUM: "🤔",
    HumorLevel.SAVAGE: "🔥",
}


def select_category(classification: ClassificationResult) -> PhraseCategory:
    """Fallback category: error/negative > positive > has data types > general."""
    if classification.is_error or classification.sentiment is Sentiment.NEGATIVE:
        return PhraseCategory.ERROR
    if classification.sentiment is Sentiment.POSITIVE:
        return PhraseCategory.SUCCESS
    if classification.has_data_types:
        return PhraseCategory.DATA
    return PhraseCategory.GENERAL


class HumorEngine:
    """
    Produces one annotation per print call.

    Owns nothing it is handed: the cache, phrase table and remote client are
    shared with whoever built the engine, so status surfaces can read them.
    """

    def __init__(
        self,
        config: RoastConfig,
        cache: ResponseCache | None = None,
        phrases: PhraseTable | None = None,
        client: RemoteAnnotationClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._rng = rng or random.Random()
        self.cache = cache if cache is not None else ResponseCache(config.cache_size)
        self.phrases = phrases if phrases is not None else PhraseTable(rng=self._rng)
        self.client = client if client is not None else RemoteAnnotationClient(config)

    @property
    def config(self) -> RoastConfig:
        return self._config

    async def produce_annotation(
        self,
        values: Sequence[Any],
        classification: ClassificationResult | None = None,
    ) -> AnnotationResult:
        """
        Produce an annotation for the values of one print call. Never raises.

        Args:
            values: Positional arguments of the print call
            classification: Precomputed classification of `values` (computed here if None)

        Returns:
            AnnotationResult with non-empty text
        """
        if classification is None:
            classification = classify(values)
        level = self._config.humor_level

        cache_key = self._lookup_key(classification, level)
        if cache_key is not None:
            try:
                entry = self.cache.get(cache_key)
                if entry is not None:
                    return entry.annotation.from_cache()
            except Exception as e:
                logger.warning("Cache lookup failed, caching disabled for this call: %s", e)
                counter("engine.cache_error")
                cache_key = None

        if self._should_use_remote():
            annotation = await self._from_remote(classification)
            if annotation is not None:
                self._store(cache_key, annotation)
                return annotation

        annotation = AnnotationResult.local(self._from_local(classification, level))
        self._store(cache_key, annotation)
        return annotation

    def cache_key_for(self, classification: ClassificationResult, level: HumorLevel) -> str:
        """
        Orchestrator-level cache key.

        The level and classification fields lead the key text so that
        normalization's length cap can only ever drop logged text.
        """
        key_text = "|".join([level.value, *classification.fingerprint_fields(), classification.sanitized_text])
        return self.cache.make_key(key_text)

    def _lookup_key(self, classification: ClassificationResult, level: HumorLevel) -> str | None:
        try:
            return self.cache_key_for(classification, level)
        except Exception as e:
            logger.warning("Cache key derivation failed, caching disabled for this call: %s", e)
            counter("engine.cache_error")
            return None

    def _store(self, cache_key: str | None, annotation: AnnotationResult) -> None:
        if cache_key is None:
            return
        try:
            self.cache.put(cache_key, annotation)
        except Exception as e:
            logger.warning("Cache write failed: %s", e)
            counter("engine.cache_error")

    def _should_use_remote(self) -> bool:
        # fallback_to_local=False is the explicit opt-out of remote generation
        return (
            self._config.api_key is not None
            and self.client.is_available()
            and self._config.fallback_to_local
        )

    async def _from_remote(self, classification: ClassificationResult) -> AnnotationResult | None:
        try:
            with time_block("engine.remote.latency"):
                result = await self.client.request_annotation(
                    classification.sanitized_text, classification
                )
        except Exception as e:
            logger.warning("Remote annotation raised unexpectedly: %s", e)
            counter("engine.remote_error")
            return None

        if result.succeeded and result.text:
            counter("engine.remote")
            return AnnotationResult.remote(result.text)

        log_event("engine.remote_fallback", reason=result.error)
        return None

    def _from_local(self, classification: ClassificationResult, level: HumorLevel) -> str:
        try:
            matching = self.phrases.lookup_by_triggers(classification, level)
            if matching:
                counter("engine.local.matched")
                return self.phrases.pick(matching)

            phrase = self.phrases.random_from_category(select_category(classification), level)
            if phrase:
                counter("engine.local.category")
                return phrase

            phrase = self.phrases.random_from_category(PhraseCategory.GENERAL, level)
            if phrase:
                counter("engine.local.general")
                return phrase
        except Exception as e:
            logger.warning("Phrase table selection failed: %s", e)
            counter("engine.local.error")

        counter("engine.local.backstop")
        return self._rng.choice(BACKSTOP_PHRASES[level])

    def select_category(self, classification: ClassificationResult) -> PhraseCategory:
        return select_category(classification)

    def format_response(self, text: str, original: str = "") -> str:
        """
        Render an annotation with the current level's prefix.

        Without `original` this is the annotation line the interceptor prints
        under the logged line; with it, both share a single line.
        """
        prefix = LEVEL_PREFIXES.get(self._config.humor_level, "•")
        line = f"{prefix} {text}"
        return f"{original} {line}" if original else line

    def update_config(self, config: RoastConfig) -> None:
        """
        Apply a new configuration to the engine and its collaborators.

        Cached annotations are dropped when remote eligibility changes, since
        keys do not record where an annotation came from.
        """
        was_remote = self._should_use_remote()
        self._config = config
        self.client.update_config(config)
        self.cache.set_capacity(config.cache_size)

        if self._should_use_remote() != was_remote:
            log_event("engine.remote_eligibility_changed", remote=not was_remote)
            self.cache.clear()

    def metrics(self) -> dict[str, Any]:
        stats = self.cache.stats()
        return {
            "cache_stats": {"size": stats.size, "hit_rate": stats.hit_rate},
            "api_status": {
                "available": self.client.is_available(),
                "rate_limit_remaining": self.client.rate_limit_status()["remaining"],
            },
        }

    def clear_cache(self) -> None:
        self.cache.clear()
