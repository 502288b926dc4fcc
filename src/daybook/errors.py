"""Exceptions raised by the build pipeline."""

from __future__ import annotations


class DaybookError(Exception):
    """Base exception for journal build operations."""
    pass


class EntryNotFoundError(DaybookError):
    """Raised when a listed entry has no meta or body record."""
    pass


class DuplicateEntryError(DaybookError):
    """Raised when two entry files claim the same date."""
    pass


class MetaError(DaybookError):
    """Raised when an entry's metadata is missing fields or malformed."""
    pass


class MalformedReferenceError(DaybookError):
    """Raised when a reference token does not name a calendar date."""
    pass
