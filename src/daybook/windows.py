"""Windows over the ascending entry sequence.

Two policies that must stay separate:

* page windows (listing pages): symmetric, up to 4 on each side of the
  focus, clipped at the sequence ends; without a focus, the latest 9
  newest-first.
* related prev/next lists: up to 4 on each side, both listed by
  descending date.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence, TypeVar

from .links import LinkGraph
from .models import RelatedRecord

T = TypeVar("T")

PAGE_RADIUS = 4
PAGE_SIZE = 2 * PAGE_RADIUS + 1
RELATED_LIMIT = 4


def _check_focus(entries: Sequence, focus: int) -> None:
    if not 0 <= focus < len(entries):
        raise IndexError(f"focus {focus} out of range for {len(entries)} entries")


def page_window(entries: Sequence[T], focus: Optional[int] = None) -> list[T]:
    """Entries shown on a listing page.

    With ``focus``, returns ``entries[focus-4 : focus+5]`` clipped to the
    sequence bounds, in ascending order. Without it, returns the last 9
    entries newest-first.
    """
    if focus is None:
        return list(reversed(entries[-PAGE_SIZE:]))
    _check_focus(entries, focus)
    start = max(0, focus - PAGE_RADIUS)
    return list(entries[start:focus + PAGE_RADIUS + 1])


def related_window(entries: Sequence[T], focus: int) -> tuple[list[T], list[T]]:
    """Return ``(prev, next)`` around ``focus``.

    ``prev`` is the nearest preceding entries, nearest first. ``next`` is the
    nearest following entries, farthest first. Both are in descending order.
    """
    _check_focus(entries, focus)
    prev = list(reversed(entries[max(0, focus - RELATED_LIMIT):focus]))
    next_ = list(reversed(entries[focus + 1:focus + 1 + RELATED_LIMIT]))
    return prev, next_


class SameDayIndex:
    """Groups dates by (month, day) across years."""

    def __init__(self, dates: Iterable[date]):
        self._groups: dict[tuple[int, int], set[date]] = defaultdict(set)
        for d in dates:
            self._groups[(d.month, d.day)].add(d)

    def peers(self, d: date) -> list[date]:
        """Other dates with the same month and day, ascending."""
        return sorted(p for p in self._groups.get((d.month, d.day), ()) if p != d)


def build_related(dates: Sequence[date], graph: LinkGraph) -> dict[date, RelatedRecord]:
    """Compute the related record of every date in an ascending sequence."""
    same_days = SameDayIndex(dates)
    related = {}
    for i, d in enumerate(dates):
        prev, next_ = related_window(dates, i)
        related[d] = RelatedRecord(
            inbound=graph.inbound_of(d),
            next=next_,
            outbound=graph.outbound_of(d),
            prev=prev,
            same=same_days.peers(d),
        )
    return related
