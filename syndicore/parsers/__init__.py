"""Feed parsers: RSS, JSON Feed and OPML."""

from .detect import detect_format, parse_feed
from .jsonfeed import LooseFeed, StrictFeed1, StrictFeed11, parse_json_feed, validate_json_feed
from .models import (
    FeedAuthor,
    FeedCategory,
    FeedEnclosure,
    FeedImage,
    FeedItem,
    ParsedFeedDocument,
    ParsedRss,
)
from .opml import LooseOpml, LooseOpmlOutline, check_opml, dump_opml, parse_opml, validate_opml
from .resolver import PUBLISHED_PROPS, UPDATED_PROPS, resolve
from .rss import parse_rss

__all__ = [
    "FeedAuthor",
    "FeedCategory",
    "FeedEnclosure",
    "FeedImage",
    "FeedItem",
    "LooseFeed",
    "LooseOpml",
    "LooseOpmlOutline",
    "ParsedFeedDocument",
    "ParsedRss",
    "PUBLISHED_PROPS",
    "StrictFeed1",
    "StrictFeed11",
    "UPDATED_PROPS",
    "check_opml",
    "detect_format",
    "dump_opml",
    "parse_feed",
    "parse_json_feed",
    "parse_opml",
    "parse_rss",
    "resolve",
    "validate_json_feed",
    "validate_opml",
]
