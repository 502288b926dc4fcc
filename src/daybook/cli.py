"""daybook command line - main entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import portalocker

from .config import BuildConfig, load_config
from .engine import BuildEngine
from .errors import DaybookError
from .models import DateRange, format_date
from .timestamps import DateTimeError


def _date_range(value: str) -> DateRange:
    try:
        return DateRange.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="daybook",
        description="daybook - build cross-referenced JSON artifacts from a dated journal",
    )
    parser.add_argument(
        "--project-root",
        "-p",
        type=Path,
        default=Path.cwd(),
        help="Project root directory (default: current directory)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in project root)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every file written",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build JSON artifacts")
    build.add_argument("--out-dir", type=Path, help="Output directory (default: from config)")
    build.add_argument("--pages", action="store_true", help="Also write pages.json")
    build.add_argument(
        "--no-strict-links",
        action="store_true",
        help="Skip malformed reference tokens instead of failing",
    )

    list_cmd = subparsers.add_parser("list", help="List entries")
    list_cmd.add_argument(
        "--range",
        type=_date_range,
        default=DateRange.ALL,
        help="Date range YYYY-MM-DD/YYYY-MM-DD",
    )

    sitemap = subparsers.add_parser("sitemap", help="Write sitemap.xml")
    sitemap.add_argument("out_dir", type=Path, nargs="?", help="Output directory (default: from config)")

    return parser


def run(args: argparse.Namespace, config: BuildConfig) -> int:
    engine = BuildEngine(config)

    if args.command == "build":
        if args.pages:
            config.write_pages = True
        if args.no_strict_links:
            config.strict_links = False
        written = engine.build_and_emit(args.out_dir)
        print(f"Built {len(written)} files")
        return 0

    if args.command == "list":
        for record in engine.load_entries(args.range):
            print(f"{format_date(record.date)} {record.meta.title}")
        return 0

    if args.command == "sitemap":
        path = engine.write_sitemap(args.out_dir)
        print(path)
        return 0

    return 2  # pragma: no cover


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    project_root = args.project_root.resolve()
    try:
        config = load_config(project_root, args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    try:
        return run(args, config)
    except (DaybookError, DateTimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except portalocker.LockException as e:
        print(f"Error: output directory is locked: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
