"""
Content analyzer - turns the values passed to one print call into a
ClassificationResult.

Stage 1 of the annotation pipeline. Pure: no shared mutable state, no I/O.
Never raises; unexpected value shapes degrade to string coercion.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from numbers import Number
from typing import Any

from roastlog.classification.models import ClassificationResult, Complexity, Sentiment
from roastlog.classification.patterns import (
    DEVELOPER_PATTERNS,
    ERROR_PATTERNS,
    FAMILY_WEIGHT,
    NEGATIVE_WORDS,
    POSITIVE_WORDS,
    SHAPE_PATTERNS,
    SUCCESS_PATTERNS,
    WORD_WEIGHT,
    matches_any,
)
from roastlog.infrastructure.settings import MAX_OBJECT_DEPTH, MAX_SERIALIZED_NODES
from roastlog.observability.logging import get_logger
from roastlog.observability.telemetry import counter
from roastlog.utils.redaction import redact_secrets

logger = get_logger(__name__)

UNSERIALIZABLE_PLACEHOLDER = "[object]"
_CIRCULAR = "[Circular]"
_TRUNCATED = "[...]"

_WORD_REGEXES = {
    word: re.compile(rf"\b{word}\b") for word in (*POSITIVE_WORDS, *NEGATIVE_WORDS)
}


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return f"<{type(value).__name__}>"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (Sequence, set, frozenset)) and not isinstance(
        value, (str, bytes, bytearray)
    )


def _is_plain_object(value: Any) -> bool:
    """Arbitrary instances whose attributes are worth walking."""
    return (
        hasattr(value, "__dict__")
        and not callable(value)
        and not isinstance(value, (BaseException, type))
    )


def _is_structured(value: Any) -> bool:
    return isinstance(value, Mapping) or _is_sequence(value) or _is_plain_object(value)


def _children(value: Any) -> list[Any]:
    if isinstance(value, Mapping):
        return list(value.values())
    if _is_sequence(value):
        return list(value)
    if _is_plain_object(value):
        return list(vars(value).values())
    return []


def _describe_exception(exc: BaseException) -> str:
    message = _safe_str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


class _NodeBudget:
    """Caps how many structured nodes one serialization may expand."""

    def __init__(self, limit: int = MAX_SERIALIZED_NODES) -> None:
        self.remaining = limit

    def spend(self) -> bool:
        self.remaining -= 1
        return self.remaining >= 0


def _to_plain(
    value: Any,
    depth: int = 0,
    ancestors: frozenset[int] = frozenset(),
    budget: _NodeBudget | None = None,
) -> Any:
    """Depth- and size-limited conversion of arbitrary values into JSON-encodable data."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, BaseException):
        return _describe_exception(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if not _is_structured(value):
        return _safe_str(value)

    if id(value) in ancestors:
        return _CIRCULAR
    if budget is None:
        budget = _NodeBudget()
    # Shared sub-objects are expanded once per reference, so fan-out is bounded here
    if depth >= MAX_OBJECT_DEPTH or not budget.spend():
        return _TRUNCATED

    inner = ancestors | {id(value)}
    if isinstance(value, Mapping):
        return {_safe_str(k): _to_plain(v, depth + 1, inner, budget) for k, v in value.items()}
    if _is_sequence(value):
        return [_to_plain(item, depth + 1, inner, budget) for item in value]
    return {k: _to_plain(v, depth + 1, inner, budget) for k, v in vars(value).items()}


def serialize_item(item: Any) -> str:
    """Render one logged value as text."""
    if isinstance(item, str):
        return item
    if isinstance(item, BaseException):
        return _describe_exception(item)
    if isinstance(item, (datetime, date, time)):
        return item.isoformat()
    if _is_structured(item):
        try:
            return json.dumps(_to_plain(item), indent=2, default=str, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError):
            return UNSERIALIZABLE_PLACEHOLDER
    return _safe_str(item)


def serialize_values(values: Sequence[Any]) -> str:
    return " ".join(serialize_item(item) for item in values)


def data_type_of(item: Any) -> str:
    if item is None:
        return "null"
    if isinstance(item, bool):
        return "boolean"
    if isinstance(item, Number):
        return "number"
    if isinstance(item, str):
        return "string"
    if isinstance(item, BaseException):
        return "error"
    if isinstance(item, (datetime, date, time)):
        return "date"
    if _is_sequence(item):
        return "array"
    if callable(item):
        return "function"
    return "object"


def object_depth(value: Any) -> int:
    """
    Nesting depth of a structured value, capped at MAX_OBJECT_DEPTH + 1.

    Back-references to an enclosing value end that path. Each (object, depth)
    pair is walked once, so shared and self-referencing children cost linear
    time instead of one walk per path.
    """
    memo: dict[tuple[int, int], int] = {}

    def walk(node: Any, depth: int, ancestors: frozenset[int]) -> int:
        if depth > MAX_OBJECT_DEPTH or not _is_structured(node) or id(node) in ancestors:
            return depth
        key = (id(node), depth)
        if key not in memo:
            inner = ancestors | {id(node)}
            memo[key] = max(
                (walk(child, depth + 1, inner) for child in _children(node)),
                default=depth,
            )
        return memo[key]

    return walk(value, 0, frozenset())


class ContentAnalyzer:
    """
    Classifies the values of one print call.

    Produces the data types present, a complexity tier, error/sentiment
    signals, structural pattern tags and a secret-redacted text form.
    """

    def analyze(self, values: Sequence[Any]) -> ClassificationResult:
        """
        Classify logged values. Never raises.

        Args:
            values: Positional arguments of the print call

        Returns:
            ClassificationResult for the values
        """
        try:
            values = list(values)
            text = serialize_values(values)
            data_types = frozenset(data_type_of(item) for item in values)
            max_depth = max(
                (object_depth(item) for item in values if _is_structured(item)),
                default=0,
            )
            return self._build(text, len(values), max_depth, data_types)
        except Exception as e:
            counter("classification.degraded")
            logger.warning("Content analysis degraded to string coercion: %s", type(e).__name__)
            return self._degraded(values)

    def sanitize(self, text: str) -> str:
        return redact_secrets(text)

    def _build(
        self,
        text: str,
        arg_count: int,
        max_depth: int,
        data_types: frozenset[str],
    ) -> ClassificationResult:
        is_error = detect_error(text)
        return ClassificationResult(
            data_types=data_types,
            complexity=assess_complexity(text, arg_count, max_depth, is_error),
            is_error=is_error,
            sentiment=analyze_sentiment(text),
            patterns=detect_patterns(text),
            sanitized_text=self.sanitize(text),
        )

    def _degraded(self, values: Any) -> ClassificationResult:
        try:
            items = list(values)
        except Exception:
            items = [values]
        text = " ".join(_safe_str(item) for item in items)
        return self._build(text, len(items), 0, frozenset({"unknown"}))


def detect_error(text: str) -> bool:
    return matches_any(ERROR_PATTERNS, text)


def assess_complexity(text: str, arg_count: int, max_depth: int, is_error: bool) -> Complexity:
    score = 0

    if len(text) > 5000:
        score += 3
    elif len(text) > 1000:
        score += 2
    elif len(text) > 50:
        score += 1

    if arg_count > 8:
        score += 3
    elif arg_count > 5:
        score += 2
    elif arg_count > 3:
        score += 1

    if max_depth > 4:
        score += 3
    elif max_depth > 3:
        score += 2
    elif max_depth > 1:
        score += 1

    if is_error:
        score += 1

    if score >= 4:
        return Complexity.COMPLEX
    if score >= 1:
        return Complexity.MEDIUM
    return Complexity.SIMPLE


def analyze_sentiment(text: str) -> Sentiment:
    positive = 0
    negative = 0

    if matches_any(SUCCESS_PATTERNS, text):
        positive += FAMILY_WEIGHT
    if matches_any(ERROR_PATTERNS, text):
        negative += FAMILY_WEIGHT

    lowered = text.lower()
    positive += WORD_WEIGHT * sum(1 for w in POSITIVE_WORDS if _WORD_REGEXES[w].search(lowered))
    negative += WORD_WEIGHT * sum(1 for w in NEGATIVE_WORDS if _WORD_REGEXES[w].search(lowered))

    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def detect_patterns(text: str) -> frozenset[str]:
    tags: set[str] = set()

    if matches_any(ERROR_PATTERNS, text):
        tags.add("error")
    if matches_any(SUCCESS_PATTERNS, text):
        tags.add("success")
    if matches_any(DEVELOPER_PATTERNS, text):
        tags.add("developer")

    for tag, pattern in SHAPE_PATTERNS.items():
        if pattern.search(text):
            tags.add(tag)

    return frozenset(tags)


_DEFAULT_ANALYZER = ContentAnalyzer()


def classify(values: Sequence[Any]) -> ClassificationResult:
    """
    Convenience function using a shared analyzer.

    The analyzer holds no state, so sharing it across callers is safe.
    """
    return _DEFAULT_ANALYZER.analyze(values)
