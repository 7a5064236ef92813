"""
Classification models for logged content.

A ClassificationResult is produced once per print call and consumed
immediately by the annotation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Complexity(str, Enum):
    """Complexity tier of the logged values."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class Sentiment(str, Enum):
    """Error-vs-success polarity of the logged text."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class ClassificationResult:
    """Structured view of one print call's values."""

    data_types: frozenset[str] = field(default_factory=frozenset)
    complexity: Complexity = Complexity.SIMPLE
    is_error: bool = False
    sentiment: Sentiment = Sentiment.NEUTRAL
    patterns: frozenset[str] = field(default_factory=frozenset)
    sanitized_text: str = ""

    @property
    def has_data_types(self) -> bool:
        return bool(self.data_types)

    def fingerprint_fields(self) -> list[str]:
        """Deterministic rendering of the classification for cache keys."""
        return [
            ",".join(sorted(self.data_types)),
            self.complexity.value,
            str(self.is_error).lower(),
            self.sentiment.value,
            ",".join(sorted(self.patterns)),
        ]
