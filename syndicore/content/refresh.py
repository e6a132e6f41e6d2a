"""Meta refresh redirects in HTML interstitial pages."""

import re
from typing import Optional

_RE_META_TAG = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_RE_HTTP_EQUIV_REFRESH = re.compile(r"http-equiv\s*=\s*[\"']?\s*refresh\b", re.IGNORECASE)
_RE_REFRESH_URL = re.compile(r"content=[\"']?\d*\s*;\s*url=(.*?)[\"'\s>]", re.IGNORECASE)


def extract_redirect_url(html: str) -> Optional[str]:
    """
    Target of the first ``<meta http-equiv="refresh">`` tag, if it names one.

    >>> extract_redirect_url('<meta http-equiv="refresh" content="0; url=https://example.com/feed">')
    'https://example.com/feed'
    """
    for match in _RE_META_TAG.finditer(html):
        tag = match.group(0)
        if not _RE_HTTP_EQUIV_REFRESH.search(tag):
            continue
        target = _RE_REFRESH_URL.search(tag)
        if target is None or not target.group(1):
            return None
        return target.group(1)
    return None
