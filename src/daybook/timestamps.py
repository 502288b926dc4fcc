"""Strict UTC date-time values with second or millisecond precision.

Both variants store an integer count since the Unix epoch and accept only
the exact textual shape of their precision:

    DateTime        2021-02-03T16:17:18Z
    MillisDateTime  2021-02-03T16:17:18.500Z

Offsets (``+09:00``) are accepted on input and normalized to UTC; the
original offset is not kept.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from functools import total_ordering
from typing import Optional, TypeVar

_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()
_SECONDS_PER_DAY = 86_400

# YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)
_DATE_TIME_PATTERN = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})"
    r"T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:\.([0-9]+))?"
    r"(Z|[+-][0-9]{2}:[0-9]{2})"
)

T = TypeVar("T", bound="StrictDateTime")


class DateTimeError(ValueError):
    """Base exception for date-time parsing and arithmetic."""
    pass


class FormatError(DateTimeError):
    """Raised when text does not match the exact date-time grammar."""
    pass


class RangeError(DateTimeError):
    """Raised when a value falls outside 1970-01-01 .. 9999-12-31."""
    pass


class PrecisionError(DateTimeError):
    """Raised when a duration is finer than the value's precision."""
    pass


def _parse_offset(suffix: str) -> int:
    """Return the UTC offset of a ``Z`` or ``+HH:MM`` suffix in seconds."""
    if suffix == "Z":
        return 0
    hours, minutes = int(suffix[1:3]), int(suffix[4:6])
    if hours > 23 or minutes > 59:
        raise FormatError(f"Invalid UTC offset: {suffix}")
    offset = hours * 3600 + minutes * 60
    return -offset if suffix[0] == "-" else offset


@total_ordering
class StrictDateTime:
    """An instant in UTC stored as an integer count of ``UNITS_PER_SECOND``.

    Subclasses choose the precision. Values are immutable and only compare
    with values of the same class.
    """

    UNITS_PER_SECOND: int = 1
    FRACTION_DIGITS: int = 0
    MIN_TIMESTAMP: int = 0
    MAX_TIMESTAMP: int = 253_402_300_799

    __slots__ = ("_timestamp",)

    def __init__(self, timestamp: int):
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise TypeError(f"timestamp must be int, not {type(timestamp).__name__}")
        if not self.MIN_TIMESTAMP <= timestamp <= self.MAX_TIMESTAMP:
            raise RangeError(
                f"Timestamp {timestamp} out of range "
                f"[{self.MIN_TIMESTAMP}, {self.MAX_TIMESTAMP}]"
            )
        object.__setattr__(self, "_timestamp", timestamp)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_timestamp(cls: type[T], timestamp: int) -> T:
        """Create a value from a count of units since the epoch."""
        return cls(timestamp)

    @classmethod
    def parse(cls: type[T], text: str) -> T:
        """Parse the exact textual form of this precision.

        Raises:
            FormatError: If the text does not match the grammar or names
                an impossible calendar date or clock time.
            RangeError: If the instant is outside the supported range.
        """
        match = _DATE_TIME_PATTERN.fullmatch(text)
        if match is None:
            raise FormatError(f"Invalid date-time format: {text!r}")

        year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
        fraction: Optional[str] = match.group(7)
        suffix = match.group(8)

        if cls.FRACTION_DIGITS == 0:
            if fraction is not None:
                raise FormatError(f"Fractional seconds not allowed: {text!r}")
        elif fraction is None or len(fraction) != cls.FRACTION_DIGITS:
            raise FormatError(
                f"Expected exactly {cls.FRACTION_DIGITS} fractional digits: {text!r}"
            )

        if hour > 23 or minute > 59 or second > 59:
            raise FormatError(f"Invalid time of day: {text!r}")
        if year == 0:
            raise RangeError(f"Date-time out of range: {text!r}")
        try:
            ordinal = date(year, month, day).toordinal()
        except ValueError as e:
            raise FormatError(f"Invalid calendar date: {text!r}") from e

        offset = _parse_offset(suffix)
        seconds = (
            (ordinal - _EPOCH_ORDINAL) * _SECONDS_PER_DAY
            + hour * 3600 + minute * 60 + second
            - offset
        )
        timestamp = seconds * cls.UNITS_PER_SECOND + (int(fraction) if fraction else 0)
        if not cls.MIN_TIMESTAMP <= timestamp <= cls.MAX_TIMESTAMP:
            raise RangeError(f"Date-time out of range: {text!r}")
        return cls(timestamp)

    @property
    def timestamp(self) -> int:
        """Units since the epoch."""
        return self._timestamp

    def to_datetime(self) -> datetime:
        """Return an aware ``datetime`` in UTC."""
        seconds, units = divmod(self._timestamp, self.UNITS_PER_SECOND)
        micros = units * (1_000_000 // self.UNITS_PER_SECOND)
        return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(
            seconds=seconds, microseconds=micros
        )

    def format(self) -> str:
        """Render in UTC with a trailing ``Z``."""
        dt = self.to_datetime()
        text = (
            f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
            f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
        )
        if self.FRACTION_DIGITS:
            units = self._timestamp % self.UNITS_PER_SECOND
            text += f".{units:0{self.FRACTION_DIGITS}d}"
        return text + "Z"

    def _units_of(self, duration: timedelta) -> int:
        """Convert a duration to whole units, refusing any remainder."""
        micros_per_unit = 1_000_000 // self.UNITS_PER_SECOND
        if duration.microseconds % micros_per_unit != 0:
            raise PrecisionError(
                f"Duration {duration!r} is not a whole number of "
                f"{type(self).__name__} units"
            )
        whole_seconds = duration.days * _SECONDS_PER_DAY + duration.seconds
        return whole_seconds * self.UNITS_PER_SECOND + duration.microseconds // micros_per_unit

    def add(self: T, duration: timedelta) -> T:
        """Return this value moved forward by ``duration``.

        Raises:
            PrecisionError: If ``duration`` has a sub-precision component.
            RangeError: If the result is out of range.
        """
        return type(self)(self._timestamp + self._units_of(duration))

    def subtract(self: T, duration: timedelta) -> T:
        """Return this value moved back by ``duration``."""
        return type(self)(self._timestamp - self._units_of(duration))

    def __add__(self, other):
        if not isinstance(other, timedelta):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, timedelta):
            return NotImplemented
        return self.subtract(other)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._timestamp == other._timestamp

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._timestamp < other._timestamp

    def __hash__(self):
        return hash((type(self).__name__, self._timestamp))

    def __str__(self):
        return self.format()

    def __repr__(self):
        return f"{type(self).__name__}({self.format()!r})"

    def __reduce__(self):
        return (type(self), (self._timestamp,))


class DateTime(StrictDateTime):
    """Second-precision date-time, e.g. ``2021-02-03T16:17:18Z``."""

    __slots__ = ()

    UNITS_PER_SECOND = 1
    FRACTION_DIGITS = 0
    MAX_TIMESTAMP = 253_402_300_799


class MillisDateTime(StrictDateTime):
    """Millisecond-precision date-time, e.g. ``2021-02-03T16:17:18.500Z``."""

    __slots__ = ()

    UNITS_PER_SECOND = 1000
    FRACTION_DIGITS = 3
    MAX_TIMESTAMP = 253_402_300_799_999
