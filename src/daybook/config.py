"""Configuration loading for daybook.

A project keeps its settings in ``daybook.toml`` (or JSON) at its root:

    [directories]
    data = "data"
    out = "public"

    [site]
    url = "https://blog.example.net"

    [build]
    strict_links = true
    pages = false
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python <3.11
    except ImportError:  # pragma: no cover
        tomllib = None


@dataclass
class BuildConfig:
    """Configuration for a journal build."""

    project_root: Path = field(default_factory=Path.cwd)

    # Directory structure (relative to project_root unless absolute)
    data_dir: str = "data"
    out_dir: str = "public"

    # Used for sitemap locations
    site_url: str = "https://example.net"

    # Abort on a reference token that is not a calendar date; otherwise skip it
    strict_links: bool = True

    # Also write pages.json with listing page windows
    write_pages: bool = False

    def get_data_path(self) -> Path:
        return self.project_root / self.data_dir

    def get_out_path(self) -> Path:
        return self.project_root / self.out_dir


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    if tomllib is None:
        raise ImportError("tomli required for TOML config: pip install tomli")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any], project_root: Path) -> BuildConfig:
    """Convert dictionary to BuildConfig."""
    config = BuildConfig(project_root=project_root)

    if "directories" in data:
        dirs = data["directories"]
        if "data" in dirs:
            config.data_dir = dirs["data"]
        if "out" in dirs:
            config.out_dir = dirs["out"]

    if "site" in data:
        site = data["site"]
        if "url" in site:
            config.site_url = site["url"]

    if "build" in data:
        build = data["build"]
        if "strict_links" in build:
            config.strict_links = bool(build["strict_links"])
        if "pages" in build:
            config.write_pages = bool(build["pages"])

    return config


def find_config_file(project_root: Path) -> Optional[Path]:
    """Find configuration file in project root.

    Search order:
    1. daybook.toml
    2. daybook.json
    3. .daybook.toml
    4. .daybook.json
    """
    candidates = [
        "daybook.toml",
        "daybook.json",
        ".daybook.toml",
        ".daybook.json",
    ]

    for name in candidates:
        path = project_root / name
        if path.exists():
            return path

    return None


def load_config(project_root: Path, config_path: Optional[Path] = None) -> BuildConfig:
    """Load project configuration.

    Args:
        project_root: Root directory of the project
        config_path: Optional explicit path to config file

    Returns:
        BuildConfig instance
    """
    if config_path is None:
        config_path = find_config_file(project_root)

    if config_path is None:
        return BuildConfig(project_root=project_root)

    suffix = config_path.suffix.lower()

    if suffix == ".toml":
        config_dict = load_toml_config(config_path)
        return dict_to_config(config_dict, project_root)

    elif suffix == ".json":
        config_dict = load_json_config(config_path)
        return dict_to_config(config_dict, project_root)

    else:
        raise ValueError(f"Unsupported config file type: {suffix}")
