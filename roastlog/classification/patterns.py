"""
Lexical pattern families used to classify logged text.

This is the one home for the regexes behind error/success detection, pattern
tags and the sentiment lexicon. Everything here is pure data.
"""

from __future__ import annotations

import re

ERROR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"error", re.IGNORECASE),
    re.compile(r"exception", re.IGNORECASE),
    re.compile(r"fail", re.IGNORECASE),
    re.compile(r"crash", re.IGNORECASE),
    re.compile(r"fatal", re.IGNORECASE),
    re.compile(r"critical", re.IGNORECASE),
    re.compile(r"\bwarn", re.IGNORECASE),
    re.compile(r"stack trace", re.IGNORECASE),
    re.compile(r"traceback \(most recent call last\)", re.IGNORECASE),
    # Stack-trace line shapes: "at fn (file.js:10:5)" and 'File "x.py", line 3'
    re.compile(r"\bat\s+\S+.*:\d+:\d+"),
    re.compile(r"File \"[^\"]+\", line \d+"),
)

SUCCESS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"success", re.IGNORECASE),
    re.compile(r"complete", re.IGNORECASE),
    re.compile(r"finished", re.IGNORECASE),
    re.compile(r"\bdone\b", re.IGNORECASE),
    re.compile(r"\bok\b", re.IGNORECASE),
    re.compile(r"passed", re.IGNORECASE),
    re.compile(r"resolved", re.IGNORECASE),
    re.compile(r"connected", re.IGNORECASE),
    re.compile(r"\bsaved\b", re.IGNORECASE),
)

DEVELOPER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"console\.log", re.IGNORECASE),
    re.compile(r"\bprint\(", re.IGNORECASE),
    re.compile(r"debug", re.IGNORECASE),
    re.compile(r"trace", re.IGNORECASE),
    re.compile(r"\binfo\b", re.IGNORECASE),
    re.compile(r"\blog", re.IGNORECASE),
    re.compile(r"\bapi\b", re.IGNORECASE),
    re.compile(r"\bhttps?\b", re.IGNORECASE),
    re.compile(r"\b(?:get|post|put|patch|delete)\b", re.IGNORECASE),
    re.compile(r"\bjson\b", re.IGNORECASE),
    re.compile(r"\bsql\b", re.IGNORECASE),
    re.compile(r"\b(?:database|db|query)\b", re.IGNORECASE),
    re.compile(r"\b(?:request|response|status)\b", re.IGNORECASE),
    re.compile(r"\bcode\b", re.IGNORECASE),
)

# Structural tags: each matched independently on the serialized text
SHAPE_PATTERNS: dict[str, re.Pattern[str]] = {
    "json": re.compile(r"\{.*\}", re.DOTALL),
    "array": re.compile(r"\[.*\]", re.DOTALL),
    "numeric": re.compile(r"\d{3,}"),
    "url": re.compile(r"https?://"),
    "date": re.compile(r"\b\d{4}-\d{2}-\d{2}"),
    "code": re.compile(r"\bdef\b|\blambda\b|\bclass\b|\bfunction\b|=>"),
}

POSITIVE_WORDS: tuple[str, ...] = ("good", "great", "awesome", "perfect", "working", "fixed")
NEGATIVE_WORDS: tuple[str, ...] = ("bad", "terrible", "broken", "issue", "problem", "bug")

# Weight of a whole pattern family vs. a single lexicon word
FAMILY_WEIGHT = 2
WORD_WEIGHT = 1


def matches_any(patterns: tuple[re.Pattern[str], ...], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)
