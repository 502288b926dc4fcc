"""Cross-reference graph built from ``[YYYY-MM-DD]`` tokens in entry bodies.

An entry links to another date by using it as a markdown reference label:

    See [2021-02-03] for details.

    [2021-02-03]: https://example.net/2021/02/03/

Targets are not checked against the entry set, so the inbound side may hold
dates that have no entry.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .errors import MalformedReferenceError
from .models import EntryRecord, format_date

logger = logging.getLogger(__name__)

REFERENCE_PATTERN = re.compile(r"\[([0-9]{4}-[0-1][0-9]-[0-3][0-9])\]")


def parse_links(markdown: str, strict: bool = True) -> list[date]:
    """Extract referenced dates from markdown, sorted and deduplicated.

    Args:
        markdown: Entry body
        strict: Raise on a token that is not a real calendar date
            (e.g. ``[2021-02-30]``) instead of skipping it

    Raises:
        MalformedReferenceError: If ``strict`` and a token is malformed.
    """
    found = set()
    for match in REFERENCE_PATTERN.finditer(markdown):
        token = match.group(1)
        try:
            found.add(date.fromisoformat(token))
        except ValueError as e:
            if strict:
                raise MalformedReferenceError(f"Malformed reference token: [{token}]") from e
            logger.warning("Skipping malformed reference token [%s]", token)
    return sorted(found)


@dataclass
class LinkGraph:
    """Outbound and inbound references between dates.

    ``B in outbound[A]`` holds exactly when ``A in inbound[B]``.
    """
    outbound: dict[date, tuple[date, ...]] = field(default_factory=dict)
    inbound: dict[date, set[date]] = field(default_factory=lambda: defaultdict(set))

    def add(self, source: date, targets: Iterable[date]) -> None:
        """Record every reference from ``source``.

        Raises:
            ValueError: If ``source`` was already added.
        """
        if source in self.outbound:
            raise ValueError(f"Links from {format_date(source)} already recorded")
        ordered = tuple(sorted(set(targets)))
        self.outbound[source] = ordered
        for target in ordered:
            self.inbound[target].add(source)

    def outbound_of(self, source: date) -> list[date]:
        return list(self.outbound.get(source, ()))

    def inbound_of(self, target: date) -> list[date]:
        return sorted(self.inbound.get(target, ()))

    def backlinks(self) -> dict[str, list[str]]:
        """Inbound map keyed by date string, ascending, for serialization."""
        return {
            format_date(target): [format_date(s) for s in sorted(sources)]
            for target, sources in sorted(self.inbound.items())
            if sources
        }


class LinkGraphBuilder:
    """Feeds entry bodies into a LinkGraph one entry at a time."""

    def __init__(self, strict: bool = True):
        self.strict = strict
        self._graph = LinkGraph()

    def feed(self, source: date, markdown: str) -> list[date]:
        """Scan one entry body and record its references.

        Returns:
            The referenced dates, sorted.
        """
        try:
            targets = parse_links(markdown, strict=self.strict)
        except MalformedReferenceError as e:
            raise MalformedReferenceError(f"{format_date(source)}: {e}") from e
        self._graph.add(source, targets)
        return targets

    def build(self) -> LinkGraph:
        return self._graph


def build_link_graph(records: Iterable[EntryRecord], strict: bool = True) -> LinkGraph:
    """Build the graph for a set of entries, processed in ascending date order."""
    builder = LinkGraphBuilder(strict=strict)
    for record in sorted(records, key=lambda r: r.key):
        builder.feed(record.date, record.body)
    return builder.build()
