"""
Bounded LRU cache of produced annotations.

Keys are short digests of normalized text, so near-identical print calls
(differing only in case, whitespace or punctuation) share one entry.

Recency is tracked by cachetools.LRUCache. Reads and writes both refresh
recency; inserting past capacity evicts the least recently used entry. All
operations hold one re-entrant lock because configuration and status calls
can arrive from a different thread than the pipeline.
"""

from __future__ import annotations

import hashlib
import json
import re
import threading
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass

from cachetools import LRUCache

from roastlog.humor.models import AnnotationResult
from roastlog.infrastructure.settings import (
    CACHE_DEFAULT_MAX_AGE_SECONDS,
    CACHE_KEY_LENGTH,
    CACHE_NORMALIZED_MAX_CHARS,
)
from roastlog.observability.logging import get_logger
from roastlog.observability.telemetry import counter

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")


@dataclass
class CacheEntry:
    annotation: AnnotationResult
    timestamp: float
    access_count: int = 0


@dataclass(frozen=True)
class CacheStats:
    size: int
    hit_rate: float


def normalize_text(text: str) -> str:
    # Punctuation goes first so its removal cannot leave doubled spaces
    text = _PUNCTUATION.sub("", text.lower())
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:CACHE_NORMALIZED_MAX_CHARS]


class ResponseCache:
    """
    Fixed-capacity LRU map from fingerprint to annotation.

    A capacity of 0 disables storage: put() is a no-op and every get() misses.
    """

    def __init__(self, max_size: int = 100, clock: Callable[[], float] = time.time) -> None:
        if max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")
        self._max_size = max_size
        self._clock = clock
        self._store: LRUCache[str, CacheEntry] = LRUCache(maxsize=max_size)
        self._hits = 0
        self._misses = 0
        self._lock = threading.RLock()

    @property
    def max_size(self) -> int:
        return self._max_size

    @staticmethod
    def make_key(raw_text: str) -> str:
        """
        Derive a fixed-length key from text.

        Normalization lowercases, collapses whitespace, strips punctuation and
        truncates before hashing, so equivalent inputs map to the same key.
        """
        normalized = normalize_text(raw_text)
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:CACHE_KEY_LENGTH]

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            if key not in self._store:
                self._misses += 1
                counter("cache.miss")
                return None

            # Subscript access refreshes recency
            entry = self._store[key]
            entry.access_count += 1
            entry.timestamp = self._clock()
            self._hits += 1
            counter("cache.hit")
            return entry

    def put(self, key: str, annotation: AnnotationResult) -> None:
        with self._lock:
            if self._max_size == 0:
                return

            if key in self._store:
                entry = self._store[key]
                entry.annotation = annotation
                entry.timestamp = self._clock()
                return

            if len(self._store) >= self._max_size:
                counter("cache.eviction")
            self._store[key] = CacheEntry(annotation=annotation, timestamp=self._clock())

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return [key for key, _ in self._snapshot()]

    def set_capacity(self, max_size: int) -> None:
        """Change capacity, evicting least recently used entries to fit."""
        if max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")
        with self._lock:
            items = self._drain()
            overflow = max(0, len(items) - max_size)
            if overflow:
                counter("cache.eviction", overflow)
            self._max_size = max_size
            self._store = LRUCache(maxsize=max_size)
            for key, entry in items[overflow:]:
                self._store[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            hit_rate = self._hits / total if total else 0.0
            return CacheStats(size=len(self._store), hit_rate=round(hit_rate, 2))

    def detailed_stats(self) -> dict[str, float | int]:
        with self._lock:
            stats = self.stats()
            return {
                "size": stats.size,
                "hit_rate": stats.hit_rate,
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "memory_usage": self._estimate_memory_usage(),
            }

    def cleanup(self, max_age_seconds: float = CACHE_DEFAULT_MAX_AGE_SECONDS) -> int:
        """
        Remove entries not written or read within max_age_seconds.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            items = self._drain()
            kept = [(k, e) for k, e in items if now - e.timestamp <= max_age_seconds]
            for key, entry in kept:
                self._store[key] = entry
            removed = len(items) - len(kept)

        if removed:
            logger.info("Cache cleanup removed %d stale entries", removed)
        return removed

    def _drain(self) -> list[tuple[str, CacheEntry]]:
        """Empty the store, returning its items from least to most recently used."""
        items = []
        while self._store:
            items.append(self._store.popitem())
        return items

    def _snapshot(self) -> list[tuple[str, CacheEntry]]:
        # Reading LRUCache values through the mapping API refreshes recency,
        # so walk it by draining and refilling in the same order.
        with self._lock:
            items = self._drain()
            for key, entry in items:
                self._store[key] = entry
            return items

    def _estimate_memory_usage(self) -> int:
        total = 0
        for key, entry in self._snapshot():
            payload = asdict(entry)
            total += len(key) * 2
            total += len(json.dumps(payload, default=str)) * 2
        return total
