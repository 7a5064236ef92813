"""
Local phrase table: the no-network source of annotations.

Selection is uniformly random. The random source is injectable so callers can
make choices reproducible without changing the selection algorithm.
"""

from __future__ import annotations

import random
from collections.abc import Iterable

from roastlog.classification.models import ClassificationResult, Sentiment
from roastlog.humor.models import HumorLevel, PhraseCategory, PhraseEntry
from roastlog.humor.phrase_bank import default_entries


def category_matches(category: PhraseCategory, classification: ClassificationResult) -> bool:
    if category is PhraseCategory.ERROR:
        return classification.is_error or classification.sentiment is Sentiment.NEGATIVE
    if category is PhraseCategory.SUCCESS:
        return classification.sentiment is Sentiment.POSITIVE
    if category is PhraseCategory.DATA:
        return classification.has_data_types
    return category is PhraseCategory.GENERAL


def triggers_match(triggers: Iterable[str], classification: ClassificationResult) -> bool:
    haystacks = [
        *(t.lower() for t in classification.data_types),
        *(p.lower() for p in classification.patterns),
        classification.sanitized_text.lower(),
    ]
    for trigger in triggers:
        needle = trigger.lower()
        if any(needle in haystack for haystack in haystacks):
            return True
    return False


class PhraseTable:
    """Categorized, leveled phrase entries with random selection."""

    def __init__(
        self,
        entries: Iterable[PhraseEntry] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._entries: list[PhraseEntry] = list(default_entries() if entries is None else entries)
        self._rng = rng or random.Random()

    @property
    def entries(self) -> tuple[PhraseEntry, ...]:
        return tuple(self._entries)

    def add(self, entry: PhraseEntry) -> None:
        self._entries.append(entry)

    def lookup_by_triggers(
        self, classification: ClassificationResult, level: HumorLevel
    ) -> list[PhraseEntry]:
        """
        Entries at `level` whose triggers or category match the classification.

        A trigger matches when it appears (case-insensitively) inside any data
        type tag, pattern tag or the sanitized text.
        """
        return [
            entry
            for entry in self._entries
            if entry.level == level
            and (
                triggers_match(entry.triggers, classification)
                or category_matches(entry.category, classification)
            )
        ]

    def random_from_category(self, category: PhraseCategory, level: HumorLevel) -> str | None:
        matching = [e for e in self._entries if e.category == category and e.level == level]
        if not matching:
            return None
        return self.pick(matching)

    def pick(self, entries: list[PhraseEntry]) -> str:
        """One entry uniformly at random, then one of its phrases."""
        entry = self._rng.choice(entries)
        return self._rng.choice(entry.phrases)
