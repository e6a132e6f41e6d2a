"""Feed format detection by body sniffing and content type."""

import json
import logging
import re
from typing import Literal, Optional, Union

from ..errors import FeedParseError
from .jsonfeed import parse_json_feed
from .models import ParsedFeedDocument
from .rss import MULTI_VALUED, is_rss_root, rss_from_tree
from .tree import parse_document

logger = logging.getLogger(__name__)

FeedFormat = Literal["rss", "jsonfeed"]

JSON_FEED_CONTENT_TYPES = ("application/feed+json", "application/json")

XML_FEED_CONTENT_TYPES = (
    "application/rss+xml",
    "application/rdf+xml",
    "application/atom+xml",
    "application/xml",
    "text/rss+xml",
    "text/rdf+xml",
    "text/atom+xml",
    "text/xml",
)

# How much of the body is inspected when sniffing.
SNIFF_LENGTH = 2048

_RE_RSS_ROOT = re.compile(r"<rss[\s>]", re.IGNORECASE)


def media_type(content_type: Optional[str]) -> str:
    """Lower-cased media type without parameters, e.g. ``application/rss+xml``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def detect_format(
    body: Union[str, bytes], content_type: Optional[str] = None
) -> Optional[FeedFormat]:
    """
    Guess whether a response body is an RSS feed or a JSON Feed.

    The body wins over the declared content type, since servers routinely
    send feeds as ``text/html`` or ``application/octet-stream``.
    """
    if isinstance(body, bytes):
        body = body[:SNIFF_LENGTH].decode("utf-8", errors="ignore")
    head = body.lstrip("\ufeff \t\r\n")[:SNIFF_LENGTH]

    if head.startswith("{"):
        return "jsonfeed"
    if _RE_RSS_ROOT.search(head):
        return "rss"

    declared = media_type(content_type)
    if declared in JSON_FEED_CONTENT_TYPES:
        return "jsonfeed"
    if declared in XML_FEED_CONTENT_TYPES:
        return "rss"
    return None


def parse_feed(body: Union[str, bytes], content_type: Optional[str] = None) -> ParsedFeedDocument:
    """
    Detect the format of a feed body and parse it leniently.

    Raises:
        FeedParseError: The body is neither RSS nor JSON Feed, is empty, has
            a root other than ``<rss>`` (Atom, RSS 1.0), or is not decodable.
    """
    feed_format = detect_format(body, content_type)
    if feed_format is None:
        declared = media_type(content_type) or "no content type"
        raise FeedParseError(f"unrecognised feed format ({declared})")

    if feed_format == "jsonfeed":
        try:
            data = json.loads(body)
        except ValueError as e:
            raise FeedParseError(f"invalid JSON: {e}") from e
        json_feed = parse_json_feed(data)
        return ParsedFeedDocument(format="jsonfeed", version=json_feed.version, feed=json_feed)

    document = parse_document(body, force_list=MULTI_VALUED)
    if document is None:
        raise FeedParseError("empty document")

    root_name, tree = document
    if not is_rss_root(root_name):
        raise FeedParseError(f"unsupported root <{root_name}>")

    rss = rss_from_tree(tree)
    logger.debug("Parsed RSS feed with %d items", len(rss.items or []))
    return ParsedFeedDocument(format="rss", version=rss.version, feed=rss)
