"""daybook - derives listings, backlinks, tag counts and page windows from a dated journal."""

__version__ = "0.1.0"
