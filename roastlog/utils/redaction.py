"""
Redaction helpers applied to logged content before it is cached, logged or sent
to the remote model.

Provides:
- redact_secrets(): Mask credentials and personal data with asterisk runs
- redact(): Hash sensitive strings for correlation without exposure
- sanitize_for_prompt(): Remove potential prompt injection patterns
"""

from __future__ import annotations

import re
from hashlib import sha256

_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"

# Order matters: key/value detectors run before the generic digit detectors so a
# credential is masked as one run instead of piecemeal.
SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    # API keys and tokens
    re.compile(r"api[_-]?key[_-]?[=:]\s*['\"]*([A-Za-z0-9\-._~+/]{10,})['\"]*\b", re.IGNORECASE),
    re.compile(r"token[_-]?[=:]\s*['\"]*([A-Za-z0-9\-._~+/]{10,})['\"]*\b", re.IGNORECASE),
    re.compile(r"bearer\s+([A-Za-z0-9\-._~+/]{10,})", re.IGNORECASE),
    re.compile(r"\bsk-[A-Za-z0-9\-_]{10,}", re.IGNORECASE),
    # Passwords
    re.compile(r"password[_-]?[=:]\s*['\"]*([^'\"\s]+)['\"]*\b", re.IGNORECASE),
    re.compile(r"pwd[_-]?[=:]\s*['\"]*([^'\"\s]+)['\"]*\b", re.IGNORECASE),
    re.compile(r"pass[_-]?[=:]\s*['\"]*([^'\"\s]+)['\"]*\b", re.IGNORECASE),
    # Email addresses
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
    # Credit card numbers
    re.compile(r"\b(?:\d{4}[-\s]?){3}\d{4}\b"),
    # Social security numbers
    re.compile(r"\b\d{3}-?\d{2}-?\d{4}\b"),
    # Phone numbers
    re.compile(r"(?:\+?1[-.\s]?)?\(?\b[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}\b"),
    # Private IP ranges
    re.compile(rf"\b10\.{_OCTET}\.{_OCTET}\.{_OCTET}\b"),
    re.compile(rf"\b172\.(?:1[6-9]|2[0-9]|3[0-1])\.{_OCTET}\.{_OCTET}\b"),
    re.compile(rf"\b192\.168\.{_OCTET}\.{_OCTET}\b"),
]

MASK_MAX_LENGTH = 8

# Patterns that could be used for prompt injection
INJECTION_PATTERNS = [
    r"ignore\s+(previous|above|all)\s+instructions?",
    r"disregard\s+(previous|above|all)\s+instructions?",
    r"forget\s+(previous|above|all)\s+instructions?",
    r"new\s+instructions?:",
    r"system\s*:",
    r"assistant\s*:",
    r"\[INST\]",
    r"\[/INST\]",
    r"<\|im_start\|>",
    r"<\|im_end\|>",
]
INJECTION_REGEX = re.compile("|".join(INJECTION_PATTERNS), re.IGNORECASE)


def _mask(match: re.Match[str]) -> str:
    return "*" * min(len(match.group(0)), MASK_MAX_LENGTH)


def _redact_once(text: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        text = pattern.sub(_mask, text)
    return text


def redact_secrets(text: str | None) -> str:
    """
    Mask credentials, tokens and personal data in free text.

    Each detector match becomes a run of asterisks as long as the match, capped
    at eight characters. Detectors are re-applied until the text is stable, so
    redacting already-redacted text is a no-op. Every detector consumes at least
    one alphanumeric character, which bounds the number of passes.

    Example:
        "password=hunter2 contact me@x.com" -> "******** contact ********"
    """
    if not text:
        return ""

    previous = None
    while previous != text:
        previous = text
        text = _redact_once(text)
    return text


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def sanitize_for_prompt(text: str, max_length: int = 1000) -> str:
    """
    Sanitize logged text before including it in the remote prompt.

    Mitigates prompt injection by:
    1. Truncating to a bounded length
    2. Removing known injection patterns
    3. Dropping characters that could break the prompt's quoting

    Args:
        text: Already secret-redacted logged text
        max_length: Maximum allowed length

    Returns:
        Sanitized text safe for prompt inclusion
    """
    if not text:
        return ""

    text = text[:max_length]
    text = INJECTION_REGEX.sub("[REDACTED]", text)
    text = re.sub(r"[<>|\\\"]", "", text)

    return text.strip()
