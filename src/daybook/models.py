"""Data models for journal entries and the records derived from them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .errors import MetaError
from .timestamps import DateTime, DateTimeError

DEFAULT_SLUG = "diary"

_KEY_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})(?:-(.+))?")


def format_date(d: date) -> str:
    """Format a calendar date as YYYY-MM-DD."""
    return d.isoformat()


def parse_date(s: str) -> date:
    """Parse a YYYY-MM-DD calendar date."""
    if not re.fullmatch(r"[0-9]{4}-[0-9]{2}-[0-9]{2}", s):
        raise ValueError(f"Invalid date: {s!r}")
    return date.fromisoformat(s)


@dataclass(frozen=True, order=True)
class EntryKey:
    """Identity of one entry: a calendar date plus an optional slug.

    The slug only selects alternate output paths; equality, hashing and
    ordering use the date alone.
    """
    date: date
    slug: Optional[str] = field(default=None, compare=False)

    @classmethod
    def parse(cls, stem: str) -> "EntryKey":
        """Parse a file stem like ``2021-02-03`` or ``2021-02-03-title``."""
        match = _KEY_PATTERN.fullmatch(stem)
        if match is None:
            raise ValueError(f"Invalid entry key: {stem!r}")
        year, month, day = (int(g) for g in match.groups()[:3])
        return cls(date(year, month, day), match.group(4))

    @property
    def stem(self) -> str:
        """File stem this key is stored under."""
        if self.slug:
            return f"{format_date(self.date)}-{self.slug}"
        return format_date(self.date)

    def path_parts(self) -> tuple[str, str, str]:
        """Return ("YYYY", "MM", "DD")."""
        return (f"{self.date.year:04d}", f"{self.date.month:02d}", f"{self.date.day:02d}")

    def __str__(self) -> str:
        return format_date(self.date)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates."""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Empty date range: {self}")

    @classmethod
    def parse(cls, s: str) -> "DateRange":
        """Parse ``YYYY-MM-DD/YYYY-MM-DD``."""
        parts = s.split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid date range: {s!r}")
        return cls(parse_date(parts[0]), parse_date(parts[1]))

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def __str__(self) -> str:
        return f"{format_date(self.start)}/{format_date(self.end)}"


DateRange.ALL = DateRange(date(1970, 1, 1), date(9999, 12, 31))


@dataclass
class EntryMeta:
    """Metadata stored alongside an entry's body."""
    minutes: int
    pubdate: DateTime
    title: str
    tags: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.minutes < 0:
            raise MetaError(f"minutes must be non-negative, got {self.minutes}")
        # Deduplicate, keeping first occurrence order
        self.tags = list(dict.fromkeys(self.tags))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntryMeta":
        """Build from the stored JSON object.

        Raises:
            MetaError: If a field is missing or has the wrong type.
        """
        missing = [k for k in ("minutes", "pubdate", "title") if k not in data]
        if missing:
            raise MetaError(f"Missing meta fields: {missing}")
        minutes = data["minutes"]
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise MetaError(f"minutes must be an integer, got {minutes!r}")
        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise MetaError(f"tags must be a list of strings, got {tags!r}")
        try:
            pubdate = DateTime.parse(data["pubdate"])
        except (DateTimeError, TypeError) as e:
            raise MetaError(f"Invalid pubdate {data['pubdate']!r}: {e}") from e
        title = data["title"]
        if not isinstance(title, str):
            raise MetaError(f"title must be a string, got {title!r}")
        return cls(
            minutes=minutes,
            pubdate=pubdate,
            title=title,
            tags=tags,
        )

    def to_dict(self) -> dict:
        return {
            "minutes": self.minutes,
            "pubdate": str(self.pubdate),
            "tags": list(self.tags),
            "title": self.title,
        }


@dataclass
class EntryRecord:
    """One loaded entry: key, metadata and markdown body."""
    key: EntryKey
    meta: EntryMeta
    body: str

    @property
    def date(self) -> date:
        return self.key.date


# ========== Derived records ==========


@dataclass
class EntrySummary:
    """One item of the all-entries list."""
    date: date
    minutes: int
    pubdate: DateTime
    tags: list[str]
    title: str

    @classmethod
    def from_record(cls, record: EntryRecord) -> "EntrySummary":
        return cls(
            date=record.date,
            minutes=record.meta.minutes,
            pubdate=record.meta.pubdate,
            tags=list(record.meta.tags),
            title=record.meta.title,
        )

    def to_dict(self) -> dict:
        return {
            "date": format_date(self.date),
            "minutes": self.minutes,
            "pubdate": str(self.pubdate),
            "tags": list(self.tags),
            "title": self.title,
        }


@dataclass
class EntryDetail:
    """Full record of one entry, written under every path alias."""
    key: EntryKey
    data: str
    html: str
    minutes: int
    pubdate: DateTime
    tags: list[str]
    title: str

    @classmethod
    def from_record(cls, record: EntryRecord, html: str) -> "EntryDetail":
        return cls(
            key=record.key,
            data=record.body,
            html=html,
            minutes=record.meta.minutes,
            pubdate=record.meta.pubdate,
            tags=list(record.meta.tags),
            title=record.meta.title,
        )

    @property
    def date(self) -> date:
        return self.key.date

    def to_dict(self) -> dict:
        return {
            "data": self.data,
            "date": format_date(self.key.date),
            "html": self.html,
            "minutes": self.minutes,
            "pubdate": str(self.pubdate),
            "tags": list(self.tags),
            "title": self.title,
        }


@dataclass
class RelatedRecord:
    """Dates related to one entry. Every list holds calendar dates."""
    inbound: list[date] = field(default_factory=list)
    next: list[date] = field(default_factory=list)
    outbound: list[date] = field(default_factory=list)
    prev: list[date] = field(default_factory=list)
    same: list[date] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "inbound": [format_date(d) for d in self.inbound],
            "next": [format_date(d) for d in self.next],
            "outbound": [format_date(d) for d in self.outbound],
            "prev": [format_date(d) for d in self.prev],
            "same": [format_date(d) for d in self.same],
        }


@dataclass
class TagCount:
    """Number of entries carrying a tag."""
    name: str
    count: int

    def to_dict(self) -> dict:
        return {"name": self.name, "count": self.count}
