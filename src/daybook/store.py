"""Entry storage: the EntryStore protocol and its directory implementation.

Entries live under the data directory as a pair of files:

    data_dir/2021/02/2021-02-03.json          metadata
    data_dir/2021/02/2021-02-03.md            markdown body
    data_dir/2021/02/2021-02-04-title.json    with a slug
    data_dir/2021/02/2021-02-04-title.md
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .errors import DuplicateEntryError, EntryNotFoundError, MetaError
from .models import DateRange, EntryKey, EntryMeta, format_date

logger = logging.getLogger(__name__)

META_SUFFIX = ".json"
BODY_SUFFIX = ".md"


@runtime_checkable
class EntryStore(Protocol):
    """Read-only access to the journal's entries."""

    def list_keys_in_range(self, date_range: DateRange) -> list[EntryKey]:
        """Return the keys of entries in the range, ascending by date."""
        ...

    def load_meta(self, key: EntryKey) -> EntryMeta:
        """Load an entry's metadata.

        Raises:
            EntryNotFoundError: If the entry has no metadata record.
        """
        ...

    def load_body(self, key: EntryKey) -> str:
        """Load an entry's markdown body.

        Raises:
            EntryNotFoundError: If the entry has no body record.
        """
        ...


class FileEntryStore:
    """EntryStore over a ``YYYY/MM/YYYY-MM-DD[-slug].{json,md}`` tree."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _entry_dir(self, key: EntryKey) -> Path:
        yyyy, mm, _ = key.path_parts()
        return self.data_dir / yyyy / mm

    def _scan(self) -> dict[EntryKey, EntryKey]:
        """Find every entry file, mapping each date-only key to its full key."""
        keys: dict[EntryKey, EntryKey] = {}
        if not self.data_dir.is_dir():
            return keys
        for path in self.data_dir.glob("[0-9][0-9][0-9][0-9]/[0-9][0-9]/*"):
            if path.suffix not in (META_SUFFIX, BODY_SUFFIX) or not path.is_file():
                continue
            try:
                key = EntryKey.parse(path.stem)
            except ValueError:
                logger.warning("Ignoring %s: not an entry file name", path)
                continue
            existing = keys.get(key)
            if existing is not None and existing.slug != key.slug:
                raise DuplicateEntryError(
                    f"Two entries for {format_date(key.date)}: {existing.stem}, {key.stem}"
                )
            keys[key] = key
        return keys

    def list_keys_in_range(self, date_range: DateRange) -> list[EntryKey]:
        keys = [k for k in self._scan().values() if date_range.contains(k.date)]
        return sorted(keys)

    def _resolve(self, key: EntryKey, suffix: str) -> Optional[Path]:
        """Locate the file for a key, finding the slug if the key lacks one."""
        entry_dir = self._entry_dir(key)
        path = entry_dir / f"{key.stem}{suffix}"
        if path.is_file():
            return path
        if key.slug is None:
            candidates = sorted(entry_dir.glob(f"{format_date(key.date)}-*{suffix}"))
            if candidates:
                return candidates[0]
        return None

    def load_meta(self, key: EntryKey) -> EntryMeta:
        path = self._resolve(key, META_SUFFIX)
        if path is None:
            raise EntryNotFoundError(f"Meta not found: {key.stem}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise MetaError(f"{path}: invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MetaError(f"{path}: meta must be a JSON object")
        try:
            return EntryMeta.from_dict(data)
        except MetaError as e:
            raise MetaError(f"{path}: {e}") from e

    def load_body(self, key: EntryKey) -> str:
        path = self._resolve(key, BODY_SUFFIX)
        if path is None:
            raise EntryNotFoundError(f"Body not found: {key.stem}")
        return path.read_text(encoding="utf-8")
