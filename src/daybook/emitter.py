"""Writes build results to the output directory as JSON files.

Layout under ``out_dir``:

    posts.json                       all entries
    tags.json                        tag counts
    linked.json                      backlinks (date -> referencing dates)
    pages.json                       listing page windows (optional)
    YYYY/MM/DD.json                  entry detail, plus three aliases:
    YYYY/MM/DD/index.json
    YYYY/MM/DD/{slug}.json           slug defaults to "diary"
    YYYY/MM/DD/{slug}/index.json
    YYYY/MM/DD/related.json          related dates
    YYYY/MM/DD/related/index.json
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Optional

from .locking import atomic_write, output_lock, staged_directory
from .models import DEFAULT_SLUG, EntryDetail, EntryKey, RelatedRecord, format_date

if TYPE_CHECKING:
    from .engine import BuildResult

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def detail_paths(key: EntryKey) -> list[str]:
    """Relative paths the detail record of ``key`` is written to."""
    yyyy, mm, dd = key.path_parts()
    slug = key.slug or DEFAULT_SLUG
    return [
        f"{yyyy}/{mm}/{dd}.json",
        f"{yyyy}/{mm}/{dd}/index.json",
        f"{yyyy}/{mm}/{dd}/{slug}.json",
        f"{yyyy}/{mm}/{dd}/{slug}/index.json",
    ]


def related_paths(key: EntryKey) -> list[str]:
    """Relative paths the related record of ``key`` is written to."""
    yyyy, mm, dd = key.path_parts()
    return [
        f"{yyyy}/{mm}/{dd}/related.json",
        f"{yyyy}/{mm}/{dd}/related/index.json",
    ]


def write_sitemap(path: Path, urls: Iterable[tuple[str, str]]) -> Path:
    """Write a sitemap.xml from ``(loc, lastmod)`` pairs."""
    path = Path(path)
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for loc, lastmod in urls:
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = loc
        ET.SubElement(url, "lastmod").text = lastmod
    tree = ET.ElementTree(urlset)

    with output_lock(path.parent), atomic_write(path, mode="wb") as f:
        tree.write(f, encoding="utf-8", xml_declaration=True)
    logger.debug("Wrote %s", path)
    return path


class ArtifactEmitter:
    """Writes every artifact of one build.

    Files go into a staging directory that replaces ``out_dir`` only after
    the last write succeeds. ``sitemap.xml`` from an earlier run survives.
    """

    KEEP = ("sitemap.xml",)

    def __init__(self, out_dir: Path, write_pages: bool = False):
        self.out_dir = Path(out_dir)
        self.write_pages = write_pages
        self.written: list[Path] = []
        self._staging: Optional[Path] = None

    def _write_json(self, relative: str, data: Any) -> Path:
        if self._staging is None:
            raise RuntimeError("write outside emit()")
        path = self._staging / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        logger.debug("Wrote %s", relative)
        self.written.append(self.out_dir / relative)
        return path

    def write_detail(self, detail: EntryDetail) -> None:
        data = detail.to_dict()
        for relative in detail_paths(detail.key):
            self._write_json(relative, data)

    def write_related(self, key: EntryKey, related: RelatedRecord) -> None:
        data = related.to_dict()
        for relative in related_paths(key):
            self._write_json(relative, data)

    def emit(self, result: "BuildResult") -> list[Path]:
        """Write all artifacts of a completed build.

        Returns:
            Final paths written, in write order.
        """
        self.written = []
        with staged_directory(self.out_dir, keep=self.KEEP) as staging:
            self._staging = staging
            try:
                for detail in result.details:
                    self.write_detail(detail)
                for record in result.records:
                    self.write_related(record.key, result.related[record.date])

                self._write_json("posts.json", [s.to_dict() for s in result.summaries])
                self._write_json("tags.json", [t.to_dict() for t in result.tags])
                self._write_json("linked.json", result.graph.backlinks())
                if self.write_pages:
                    self._write_json("pages.json", result.pages_dict())
            finally:
                self._staging = None

        logger.info("Wrote %d files to %s", len(self.written), self.out_dir)
        return self.written


def pages_to_dict(root: list[EntryKey], pages: dict) -> dict[str, list[str]]:
    """Serialize page windows: ``"/"`` for the root, then one per date."""
    data = {"/": [format_date(k.date) for k in root]}
    for d, keys in pages.items():
        data[format_date(d)] = [format_date(k.date) for k in keys]
    return data
