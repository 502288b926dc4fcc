"""Build driver: loads every entry and derives all artifacts in one pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from .config import BuildConfig
from .emitter import ArtifactEmitter, pages_to_dict, write_sitemap
from .links import LinkGraph, LinkGraphBuilder
from .models import (
    DateRange,
    EntryDetail,
    EntryKey,
    EntryRecord,
    EntrySummary,
    RelatedRecord,
    TagCount,
)
from .render import markdown_to_html
from .store import EntryStore, FileEntryStore
from .tags import TagCounter
from .windows import build_related, page_window

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Everything derived from one snapshot of the entry set."""
    records: list[EntryRecord] = field(default_factory=list)
    summaries: list[EntrySummary] = field(default_factory=list)
    details: list[EntryDetail] = field(default_factory=list)
    related: dict[date, RelatedRecord] = field(default_factory=dict)
    tags: list[TagCount] = field(default_factory=list)
    graph: LinkGraph = field(default_factory=LinkGraph)
    root_page: list[EntryKey] = field(default_factory=list)
    pages: dict[date, list[EntryKey]] = field(default_factory=dict)

    def pages_dict(self) -> dict[str, list[str]]:
        return pages_to_dict(self.root_page, self.pages)


class BuildEngine:
    """Runs full builds over an entry store.

    Every build recomputes all derived state from the whole entry set.
    """

    def __init__(
        self,
        config: BuildConfig,
        store: Optional[EntryStore] = None,
        renderer: Optional[Callable[[str], str]] = None,
    ):
        self.config = config
        self.store = store if store is not None else FileEntryStore(config.get_data_path())
        self.renderer = renderer or markdown_to_html

    def load_entries(self, date_range: DateRange = DateRange.ALL) -> list[EntryRecord]:
        """Load every entry in the range, ascending by date.

        Raises:
            EntryNotFoundError: If a listed key has no meta or body.
        """
        records = []
        for key in self.store.list_keys_in_range(date_range):
            meta = self.store.load_meta(key)
            body = self.store.load_body(key)
            records.append(EntryRecord(key=key, meta=meta, body=body))
        records.sort(key=lambda r: r.key)
        logger.info("Loaded %d entries in %s", len(records), date_range)
        return records

    def build(self, date_range: DateRange = DateRange.ALL) -> BuildResult:
        """Derive all artifacts without writing anything."""
        records = self.load_entries(date_range)

        links = LinkGraphBuilder(strict=self.config.strict_links)
        tag_counter = TagCounter()
        result = BuildResult(records=records)
        for record in records:
            links.feed(record.date, record.body)
            tag_counter.add(record.meta.tags)
            result.summaries.append(EntrySummary.from_record(record))
            result.details.append(EntryDetail.from_record(record, html=self.renderer(record.body)))

        result.graph = links.build()
        result.tags = tag_counter.counts()

        keys = [r.key for r in records]
        result.related = build_related([k.date for k in keys], result.graph)
        result.root_page = page_window(keys)
        result.pages = {key.date: page_window(keys, i) for i, key in enumerate(keys)}

        logger.info(
            "Built %d entries, %d tags, %d linked dates",
            len(records), len(result.tags), len(result.graph.backlinks()),
        )
        return result

    def build_and_emit(
        self,
        out_dir: Optional[Path] = None,
        date_range: DateRange = DateRange.ALL,
    ) -> list[Path]:
        """Build, then write the artifacts.

        Nothing is written unless the whole build succeeds.
        """
        result = self.build(date_range)
        emitter = ArtifactEmitter(
            out_dir if out_dir is not None else self.config.get_out_path(),
            write_pages=self.config.write_pages,
        )
        return emitter.emit(result)

    def sitemap_urls(self, date_range: DateRange = DateRange.ALL) -> list[tuple[str, str]]:
        """``(loc, lastmod)`` of every entry page."""
        base = self.config.site_url.rstrip("/")
        urls = []
        for key in self.store.list_keys_in_range(date_range):
            meta = self.store.load_meta(key)
            yyyy, mm, dd = key.path_parts()
            urls.append((f"{base}/{yyyy}/{mm}/{dd}/", str(meta.pubdate)))
        return urls

    def write_sitemap(self, out_dir: Optional[Path] = None) -> Path:
        """Write ``sitemap.xml`` into the output directory."""
        target = out_dir if out_dir is not None else self.config.get_out_path()
        return write_sitemap(Path(target) / "sitemap.xml", self.sitemap_urls())
