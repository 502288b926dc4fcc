"""Tests for the filesystem entry store."""

import logging
from datetime import date

import pytest

from daybook.errors import DuplicateEntryError, EntryNotFoundError, MetaError
from daybook.models import DateRange, EntryKey
from daybook.store import EntryStore, FileEntryStore


class TestListKeys:
    """Tests for list_keys_in_range."""

    def test_satisfies_protocol(self, store):
        """FileEntryStore is an EntryStore."""
        assert isinstance(store, EntryStore)

    def test_lists_sorted(self, store, make_entry):
        """Keys come back ascending by date."""
        make_entry("2021-02-04")
        make_entry("2020-12-31")
        make_entry("2021-02-03", slug="TITLE")
        keys = store.list_keys_in_range(DateRange.ALL)
        assert [str(k) for k in keys] == ["2020-12-31", "2021-02-03", "2021-02-04"]
        assert keys[1].slug == "TITLE"

    def test_filters_by_range(self, store, make_entry):
        """Only keys inside the range are listed."""
        make_entry("2021-01-31")
        make_entry("2021-02-01")
        make_entry("2021-02-28")
        make_entry("2021-03-01")
        keys = store.list_keys_in_range(DateRange.parse("2021-02-01/2021-02-28"))
        assert [str(k) for k in keys] == ["2021-02-01", "2021-02-28"]

    def test_ignores_unrelated_files(self, store, make_entry, data_dir):
        """Files that are not entries are skipped."""
        make_entry("2021-02-03")
        (data_dir / "2021" / "02" / "notes.md").write_text("x")
        (data_dir / "2021" / "02" / "2021-02-05.txt").write_text("x")
        (data_dir / "README.md").write_text("x")
        assert [str(k) for k in store.list_keys_in_range(DateRange.ALL)] == ["2021-02-03"]

    def test_misdated_file_warns(self, store, make_entry, data_dir, caplog):
        """A file named for a non-calendar date is skipped with a warning."""
        make_entry("2021-02-03")
        (data_dir / "2021" / "02" / "2021-02-30.json").write_text("{}")
        with caplog.at_level(logging.WARNING, logger="daybook.store"):
            keys = store.list_keys_in_range(DateRange.ALL)
        assert [str(k) for k in keys] == ["2021-02-03"]
        assert "2021-02-30.json" in caplog.text

    def test_missing_data_dir(self, temp_project):
        """A missing data directory has no entries."""
        store = FileEntryStore(temp_project / "nope")
        assert store.list_keys_in_range(DateRange.ALL) == []

    def test_duplicate_date(self, store, make_entry):
        """Two slugs for one date are rejected."""
        make_entry("2021-02-03", slug="one")
        make_entry("2021-02-03", slug="two")
        with pytest.raises(DuplicateEntryError):
            store.list_keys_in_range(DateRange.ALL)

    def test_body_only_entry_is_listed(self, store, make_entry):
        """An entry with only a body file is still listed."""
        make_entry("2021-02-03", meta=False)
        assert [str(k) for k in store.list_keys_in_range(DateRange.ALL)] == ["2021-02-03"]


class TestLoad:
    """Tests for load_meta and load_body."""

    def test_load_meta_and_body(self, store, make_entry):
        """Meta and body are read back."""
        make_entry("2021-02-03", body="hello", title="T", tags=["a"], minutes=7)
        key = EntryKey(date(2021, 2, 3))
        meta = store.load_meta(key)
        assert meta.title == "T"
        assert meta.tags == ["a"]
        assert meta.minutes == 7
        assert store.load_body(key) == "hello"

    def test_load_finds_slug(self, store, make_entry):
        """A key without slug still finds the slugged files."""
        make_entry("2021-02-03", body="slugged", slug="TITLE")
        assert store.load_body(EntryKey(date(2021, 2, 3))) == "slugged"

    def test_meta_not_found(self, store, make_entry):
        """Missing meta raises EntryNotFoundError."""
        make_entry("2021-02-03", meta=False)
        with pytest.raises(EntryNotFoundError):
            store.load_meta(EntryKey(date(2021, 2, 3)))

    def test_body_not_found(self, store, make_entry):
        """Missing body raises EntryNotFoundError."""
        make_entry("2021-02-03", content=False)
        with pytest.raises(EntryNotFoundError):
            store.load_body(EntryKey(date(2021, 2, 3)))

    def test_invalid_json(self, store, data_dir):
        """Malformed meta JSON raises MetaError."""
        entry_dir = data_dir / "2021" / "02"
        entry_dir.mkdir(parents=True)
        (entry_dir / "2021-02-03.json").write_text("{not json")
        with pytest.raises(MetaError):
            store.load_meta(EntryKey(date(2021, 2, 3)))

    def test_meta_not_object(self, store, data_dir):
        """Meta must be a JSON object."""
        entry_dir = data_dir / "2021" / "02"
        entry_dir.mkdir(parents=True)
        (entry_dir / "2021-02-03.json").write_text("[]")
        with pytest.raises(MetaError):
            store.load_meta(EntryKey(date(2021, 2, 3)))

    def test_invalid_pubdate_names_file(self, store, make_entry):
        """MetaError messages name the offending file."""
        make_entry("2021-02-03", pubdate="2021-02-03")
        with pytest.raises(MetaError, match="2021-02-03.json"):
            store.load_meta(EntryKey(date(2021, 2, 3)))
