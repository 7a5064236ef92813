"""
Humor domain models: levels, phrase categories, provenance and results.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from pydantic import BaseModel, Field, field_validator

REMOTE_CONFIDENCE = 0.9
LOCAL_CONFIDENCE = 0.7


class HumorLevel(str, Enum):
    MILD = "mild"
    MEDIUM = "medium"
    SAVAGE = "savage"


class PhraseCategory(str, Enum):
    ERROR = "error"
    SUCCESS = "success"
    DATA = "data"
    GENERAL = "general"


class Origin(str, Enum):
    """Where an annotation came from."""

    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class AnnotationResult:
    """
    One annotation produced for a print call.

    Confidence is fixed per origin: it signals provenance trust, not a
    measured quality score.
    """

    text: str
    confidence: float
    origin: Origin
    cached: bool = False

    @classmethod
    def remote(cls, text: str) -> AnnotationResult:
        return cls(text=text, confidence=REMOTE_CONFIDENCE, origin=Origin.REMOTE)

    @classmethod
    def local(cls, text: str) -> AnnotationResult:
        return cls(text=text, confidence=LOCAL_CONFIDENCE, origin=Origin.LOCAL)

    def from_cache(self) -> AnnotationResult:
        return replace(self, cached=True)


class PhraseEntry(BaseModel):
    """A leveled, categorized group of canned annotations."""

    triggers: list[str] = Field(default_factory=list)
    phrases: list[str]
    level: HumorLevel
    category: PhraseCategory

    @field_validator("phrases")
    @classmethod
    def validate_phrases(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("phrases must not be empty")
        return v
