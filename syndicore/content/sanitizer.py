"""
Removal of script, style and comment ranges from HTML text.

Works on plain string scanning, without building a DOM. Known limitations:

- HTML entities are not decoded before matching, so ``&lt;script&gt;`` is kept.
- A literal ``</script>`` inside a script's own string content ends the block.
- CDATA sections are not recognised.
- Same-kind tags are not balanced: the first closing tag wins.
- Whitespace inside the opening delimiter (``<  script>``) is not recognised.
"""

import logging
from typing import Iterable, List, NamedTuple

logger = logging.getLogger(__name__)

SCRIPT_TAGS = ("<script", "</script>")
STYLE_TAGS = ("<style", "</style>")
COMMENT_TAGS = ("<!--", "-->")


class StripRange(NamedTuple):
    """Half-open ``[start, end)`` span of text to remove."""

    start: int
    end: int


def _fold(code: int) -> int:
    # ASCII only; other code points compare as-is.
    if 65 <= code <= 90:
        return code + 32
    return code


def _matches_at(html: str, position: int, pattern: str) -> bool:
    if position + len(pattern) > len(html):
        return False
    for offset, char in enumerate(pattern):
        if _fold(ord(html[position + offset])) != ord(char):
            return False
    return True


def _index_ignore_case(html: str, pattern: str, start: int) -> int:
    """Position of the first case-insensitive ``pattern`` at or after ``start``, or -1."""
    # Patterns are lower case and begin with punctuation, so str.find can jump between candidates.
    first = pattern[0]
    position = html.find(first, start)
    while position != -1:
        if _matches_at(html, position, pattern):
            return position
        position = html.find(first, position + 1)
    return -1


def _find_tag_pair_ranges(
    html: str, start_tag: str, end_tag: str, find_open_tag_end: bool
) -> List[StripRange]:
    ranges: List[StripRange] = []
    length = len(html)
    position = _index_ignore_case(html, start_tag, 0)

    while position != -1:
        search_from = position + len(start_tag)

        if find_open_tag_end:
            open_tag_end = html.find(">", position)
            if open_tag_end == -1:
                ranges.append(StripRange(position, length))
                return ranges

            check = open_tag_end - 1
            while check >= position and html[check] in " \t":
                check -= 1
            if check >= position and html[check] == "/":
                ranges.append(StripRange(position, open_tag_end + 1))
                position = _index_ignore_case(html, start_tag, open_tag_end + 1)
                continue

            search_from = open_tag_end + 1

        close = _index_ignore_case(html, end_tag, search_from)
        if close == -1:
            ranges.append(StripRange(position, length))
            return ranges

        end = close + len(end_tag)
        ranges.append(StripRange(position, end))
        position = _index_ignore_case(html, start_tag, end)

    return ranges


def merge_ranges(ranges: Iterable[StripRange]) -> List[StripRange]:
    """
    Merge overlapping and adjacent ranges into maximal sorted runs.

    The input is left untouched.

    >>> merge_ranges([StripRange(10, 20), StripRange(15, 25), StripRange(30, 40)])
    [StripRange(start=10, end=25), StripRange(start=30, end=40)]
    """
    merged: List[StripRange] = []
    for current in sorted(ranges, key=lambda r: r.start):
        if merged and current.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = StripRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def clean_html(
    html: str,
    strip_scripts: bool = True,
    strip_styles: bool = True,
    strip_comments: bool = True,
) -> str:
    """
    Remove script blocks, style blocks and comments from HTML.

    Args:
        html: Markup to clean.
        strip_scripts: Remove ``<script>`` blocks, including self-closing ones.
        strip_styles: Remove ``<style>`` blocks, including self-closing ones.
        strip_comments: Remove ``<!-- -->`` comments.

    Returns:
        The cleaned markup, or ``html`` itself when nothing matched.
    """
    ranges: List[StripRange] = []
    if strip_scripts:
        ranges.extend(_find_tag_pair_ranges(html, *SCRIPT_TAGS, True))
    if strip_styles:
        ranges.extend(_find_tag_pair_ranges(html, *STYLE_TAGS, True))
    if strip_comments:
        ranges.extend(_find_tag_pair_ranges(html, *COMMENT_TAGS, False))

    if not ranges:
        return html

    merged = merge_ranges(ranges)
    logger.debug("Stripping %d ranges from %d characters of HTML", len(merged), len(html))

    segments: List[str] = []
    last_end = 0
    for strip in merged:
        if strip.start > last_end:
            segments.append(html[last_end : strip.start])
        last_end = strip.end
    if last_end < len(html):
        segments.append(html[last_end:])
    return "".join(segments)
