"""
Tests for the content analyzer.

Tests:
- Error and success detection (log lines that read as failures or wins)
- Data type tags, serialization and depth
- Complexity tiers
- Sentiment lexicon and ties
- Structural pattern tags
- Termination on self-referential and deeply nested values
- Degradation instead of raising
"""

from __future__ import annotations

import threading
from datetime import date

from roastlog.classification.analyzer import ContentAnalyzer, classify, object_depth
from roastlog.classification.models import Complexity, Sentiment
from roastlog.observability.telemetry import get_counter


class TestErrorAndSuccess:
    def test_error_line_is_negative(self):
        result = classify(["Error: db down"])

        assert result.is_error is True
        assert result.sentiment is Sentiment.NEGATIVE
        assert "error" in result.patterns

    def test_success_line_is_positive(self):
        result = classify(["Success: saved"])

        assert result.sentiment is Sentiment.POSITIVE
        assert "success" in result.patterns
        assert result.is_error is False

    def test_python_traceback_shape_is_error(self):
        result = classify(['File "app.py", line 12, in main'])

        assert result.is_error is True

    def test_plain_text_is_neutral(self):
        result = classify(["hello"])

        assert result.is_error is False
        assert result.sentiment is Sentiment.NEUTRAL


class TestDataTypes:
    def test_type_labels(self):
        values = ["x", 1, 2.5, True, None, [1], {"a": 1}, ValueError("bad"), date(2024, 1, 2), len]

        result = classify(values)

        assert result.data_types == {
            "string",
            "number",
            "boolean",
            "null",
            "array",
            "object",
            "error",
            "date",
            "function",
        }

    def test_bool_is_not_number(self):
        assert classify([True]).data_types == {"boolean"}

    def test_no_values_has_no_types(self):
        result = classify([])

        assert result.data_types == frozenset()
        assert result.has_data_types is False


class TestSerialization:
    def test_mapping_is_indented_json(self):
        assert classify([{"a": 1}]).sanitized_text == '{\n  "a": 1\n}'

    def test_exception_renders_class_and_message(self):
        assert classify([ValueError("bad input")]).sanitized_text == "ValueError: bad input"

    def test_date_renders_isoformat(self):
        assert classify([date(2024, 1, 2)]).sanitized_text == "2024-01-02"

    def test_items_joined_with_single_space(self):
        assert classify(["count:", 3, None]).sanitized_text == "count: 3 None"

    def test_secrets_are_redacted_in_sanitized_text(self):
        result = classify(["login", {"password": "x"}, "password=hunter2"])

        assert "hunter2" not in result.sanitized_text

    def test_object_attributes_are_serialized(self):
        class Point:
            def __init__(self):
                self.x = 1
                self.y = 2

        assert classify([Point()]).sanitized_text == '{\n  "x": 1,\n  "y": 2\n}'


class TestDepthAndTermination:
    def test_object_depth(self):
        assert object_depth({}) == 0
        assert object_depth({"a": 1}) == 1
        assert object_depth([[1]]) == 2
        assert object_depth("abc") == 0

    def test_self_referential_mapping_terminates(self):
        node: dict = {"name": "loop"}
        node["self"] = node

        result = classify([node])

        assert "[Circular]" in result.sanitized_text

    def test_self_referential_fan_out_terminates(self):
        node: dict = {}
        for i in range(12):
            node[i] = node
        results = []

        worker = threading.Thread(target=lambda: results.append(classify([node])), daemon=True)
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert results[0].sanitized_text.count("[Circular]") == 12
        assert object_depth(node) == 1

    def test_shared_children_are_bounded(self):
        shared: list = [1]
        for _ in range(8):
            shared = [shared] * 12
        results = []

        worker = threading.Thread(target=lambda: results.append(classify([shared])), daemon=True)
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert "[...]" in results[0].sanitized_text
        assert object_depth(shared) == 9

    def test_deep_nesting_is_truncated(self):
        nested: dict = {}
        current = nested
        for _ in range(30):
            current["child"] = {}
            current = current["child"]

        result = classify([nested])

        assert "[...]" in result.sanitized_text
        assert result.complexity is not Complexity.SIMPLE


class TestComplexity:
    def test_short_single_value_is_simple(self):
        assert classify(["hi"]).complexity is Complexity.SIMPLE

    def test_many_arguments_is_medium(self):
        assert classify(["x"] * 9).complexity is Complexity.MEDIUM

    def test_many_arguments_plus_error_is_complex(self):
        assert classify(["error"] + ["x"] * 8).complexity is Complexity.COMPLEX

    def test_long_text_is_medium(self):
        assert classify(["a" * 60]).complexity is Complexity.MEDIUM


class TestSentimentLexicon:
    def test_positive_words(self):
        assert classify(["everything is great and working"]).sentiment is Sentiment.POSITIVE

    def test_negative_words(self):
        assert classify(["this is broken, bad issue"]).sentiment is Sentiment.NEGATIVE

    def test_tie_is_neutral(self):
        assert classify(["good but bad"]).sentiment is Sentiment.NEUTRAL

    def test_words_match_whole_words_only(self):
        assert classify(["debug output"]).sentiment is Sentiment.NEUTRAL


class TestPatterns:
    def test_url(self):
        result = classify(["see https://example.com"])

        assert "url" in result.patterns
        assert "developer" in result.patterns

    def test_numeric(self):
        assert "numeric" in classify(["order 98765"]).patterns

    def test_code(self):
        assert "code" in classify(["def handler(): pass"]).patterns

    def test_array_and_json_shapes(self):
        result = classify([[1, 2], {"k": "v"}])

        assert {"array", "json"} <= result.patterns

    def test_iso_date(self):
        assert "date" in classify(["deploy on 2024-05-01"]).patterns


class TestDegradation:
    def test_unprintable_value_uses_placeholder(self):
        class BadStr:
            __slots__ = ()

            def __str__(self):
                raise RuntimeError("no")

        assert classify([BadStr()]).sanitized_text == "<BadStr>"

    def test_internal_failure_degrades_to_string_coercion(self):
        class Exploding(dict):
            def items(self):
                raise RuntimeError("boom")

            def values(self):
                raise RuntimeError("boom")

        result = ContentAnalyzer().analyze(["before", Exploding(a=1)])

        assert result.data_types == {"unknown"}
        assert result.sanitized_text.startswith("before")
        assert get_counter("classification.degraded") == 1

    def test_classification_is_pure(self):
        values = ["Error: db down", {"a": [1, 2]}]

        assert classify(values) == classify(values)
