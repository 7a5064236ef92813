"""
Prompt construction for remote annotation requests.

The template is a module constant so prompt changes show up in one place.
"""

from __future__ import annotations

from roastlog.classification.models import ClassificationResult, Complexity, Sentiment
from roastlog.humor.models import HumorLevel
from roastlog.utils.redaction import sanitize_for_prompt

LEVEL_INSTRUCTIONS: dict[HumorLevel, str] = {
    HumorLevel.MILD: "Be gentle and encouraging, like a supportive colleague.",
    HumorLevel.MEDIUM: "Be witty and playful, with light teasing.",
    HumorLevel.SAVAGE: "Be sarcastic and brutally honest, but still professional.",
}

GENERAL_CONTEXT = "General logging"

ANNOTATION_PROMPT = """You are a witty programming assistant that adds humorous comments to print() output.

Humor Level: {level} - {instruction}

Context: {context}

Logged Content: "{content}"

Generate a brief, humorous comment (max 100 characters) that a developer would find amusing. The comment should be:
- In English
- Professional but entertaining
- Contextually relevant to what was logged
- Appropriate for a work environment

Respond with ONLY the humorous comment, no explanations or quotes."""


def build_context_line(classification: ClassificationResult) -> str:
    """Compact rendering of the classification signals worth mentioning."""
    parts: list[str] = []

    if classification.is_error:
        parts.append("This appears to be an error or exception")
    if classification.data_types:
        parts.append(f"Data types: {', '.join(sorted(classification.data_types))}")
    if classification.complexity is not Complexity.SIMPLE:
        parts.append(f"Complexity: {classification.complexity.value}")
    if classification.sentiment is not Sentiment.NEUTRAL:
        parts.append(f"Sentiment: {classification.sentiment.value}")
    if classification.patterns:
        parts.append(f"Patterns: {', '.join(sorted(classification.patterns))}")

    return ", ".join(parts) if parts else GENERAL_CONTEXT


def build_annotation_prompt(
    sanitized_text: str,
    classification: ClassificationResult,
    level: HumorLevel,
) -> str:
    return ANNOTATION_PROMPT.format(
        level=level.value,
        instruction=LEVEL_INSTRUCTIONS[level],
        context=build_context_line(classification),
        content=sanitize_for_prompt(sanitized_text),
    )
