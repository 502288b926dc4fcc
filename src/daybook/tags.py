"""Tag occurrence counts across entries."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from .models import TagCount


class TagCounter:
    """Counts, per tag, the number of entries carrying it."""

    def __init__(self):
        self._counts: Counter[str] = Counter()

    def add(self, tags: Iterable[str]) -> None:
        """Add one entry's tags. Repeats within the entry count once."""
        self._counts.update(set(tags))

    def counts(self) -> list[TagCount]:
        """Counts sorted by tag name."""
        return [TagCount(name=name, count=self._counts[name]) for name in sorted(self._counts)]

    def __len__(self) -> int:
        return len(self._counts)
