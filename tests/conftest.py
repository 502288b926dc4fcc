"""Shared pytest fixtures for daybook tests."""

import json
import tempfile
from pathlib import Path

import pytest

from daybook.config import BuildConfig
from daybook.engine import BuildEngine
from daybook.store import FileEntryStore


@pytest.fixture
def temp_project():
    """Create a temporary project directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_project):
    """Create a test configuration."""
    return BuildConfig(
        project_root=temp_project,
        site_url="https://blog.example.net",
    )


@pytest.fixture
def data_dir(config):
    """Create the data directory."""
    path = config.get_data_path()
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def make_entry(data_dir):
    """Factory fixture that writes an entry's meta and body files.

    Usage:
        def test_example(make_entry):
            make_entry("2021-02-03", body="hello", tags=["rust"])
    """

    def _create(
        date_str,
        body="",
        title=None,
        tags=None,
        minutes=5,
        pubdate=None,
        slug=None,
        meta=True,
        content=True,
    ):
        yyyy, mm, _ = date_str.split("-")
        entry_dir = data_dir / yyyy / mm
        entry_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{date_str}-{slug}" if slug else date_str
        if meta:
            (entry_dir / f"{stem}.json").write_text(
                json.dumps({
                    "minutes": minutes,
                    "pubdate": pubdate or f"{date_str}T00:00:00+09:00",
                    "tags": tags or [],
                    "title": title or f"Title {date_str}",
                }),
                encoding="utf-8",
            )
        if content:
            (entry_dir / f"{stem}.md").write_text(body, encoding="utf-8")
        return entry_dir / stem

    return _create


@pytest.fixture
def store(data_dir):
    """Create a store over the data directory."""
    return FileEntryStore(data_dir)


@pytest.fixture
def engine(config, data_dir):
    """Create a test engine."""
    return BuildEngine(config)
