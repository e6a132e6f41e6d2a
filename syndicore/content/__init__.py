"""HTML content sanitizing and inspection."""

from .refresh import extract_redirect_url
from .sanitizer import StripRange, clean_html, merge_ranges

__all__ = ["StripRange", "clean_html", "extract_redirect_url", "merge_ranges"]
