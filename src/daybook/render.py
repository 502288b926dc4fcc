"""Markdown rendering for entry detail records."""

from __future__ import annotations

import markdown

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


def markdown_to_html(text: str) -> str:
    """Render an entry body to HTML."""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
