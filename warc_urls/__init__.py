"""Concurrent extraction of deduplicated WARC-Target-URI values."""

__version__ = "0.3.0"
