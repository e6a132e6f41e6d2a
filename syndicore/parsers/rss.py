"""RSS-family parser (RSS 2.0 with Atom, Dublin Core, Media RSS and iTunes extensions)."""

import html
import logging
from typing import Any, List, Mapping, Optional, Union

from .models import (
    FeedAuthor,
    FeedCategory,
    FeedEnclosure,
    FeedImage,
    FeedItem,
    ParsedRss,
)
from .resolver import resolve, resolve_published_at, resolve_updated_at, text_of
from .tree import parse_document

logger = logging.getLogger(__name__)

# Elements that are lists even when they occur once.
MULTI_VALUED = frozenset(["item", "category", "author", "itunes:author", "atom:link"])

CONTENT_PROPS = ("content:encoded", "content")


def de_entity(value: Optional[str]) -> Optional[str]:
    """Decode HTML entities left in a text value."""
    if value is None:
        return None
    return html.unescape(value)


def _text(node: Any, key: str) -> Optional[str]:
    if not isinstance(node, Mapping):
        return None
    return de_entity(text_of(node.get(key)))


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def retrieve_self(channel: Any) -> Optional[str]:
    """Return the href of the first ``atom:link`` with ``rel="self"``."""
    if not isinstance(channel, Mapping):
        return None

    atom_links = channel.get("atom:link")
    if not isinstance(atom_links, list):
        return None

    for atom_link in atom_links:
        if isinstance(atom_link, Mapping) and atom_link.get("rel") == "self":
            return atom_link.get("href")
    return None


def retrieve_authors(node: Any) -> Optional[List[FeedAuthor]]:
    """Collect RSS authors followed by iTunes authors."""
    if not isinstance(node, Mapping):
        return None

    authors: List[FeedAuthor] = []
    for rss_author in _as_list(node.get("author")):
        if not isinstance(rss_author, Mapping):
            continue
        authors.append(
            FeedAuthor(
                name=_text(rss_author, "name") or de_entity(text_of(rss_author) or None),
                email=_text(rss_author, "email"),
                link=_text(rss_author, "link"),
            )
        )

    for itunes_author in _as_list(node.get("itunes:author")):
        name = de_entity(text_of(itunes_author))
        if name:
            authors.append(FeedAuthor(name=name))

    return authors


def retrieve_categories(node: Any) -> Optional[List[FeedCategory]]:
    if not isinstance(node, Mapping) or "category" not in node:
        return None

    categories: List[FeedCategory] = []
    for category in _as_list(node.get("category")):
        if not isinstance(category, Mapping):
            continue
        categories.append(
            FeedCategory(
                term=de_entity(text_of(category) or category.get("term")),
                label=de_entity(category.get("label")),
                link=category.get("domain") or category.get("scheme"),
            )
        )
    return categories


def _attribute_or_text(node: Mapping, key: str) -> Optional[str]:
    value = node.get(key)
    if isinstance(value, str):
        return value
    return text_of(value)


def retrieve_enclosure(node: Any) -> Optional[FeedEnclosure]:
    """Enclosure attributes of an item, if it has one."""
    enclosure = node.get("enclosure") if isinstance(node, Mapping) else None
    if isinstance(enclosure, list) and enclosure:
        enclosure = enclosure[0]
    if not isinstance(enclosure, Mapping):
        return None

    return FeedEnclosure(
        url=de_entity(_attribute_or_text(enclosure, "url")),
        type=de_entity(_attribute_or_text(enclosure, "type")),
        length=_attribute_or_text(enclosure, "length"),
    )


def retrieve_image(node: Any) -> Optional[FeedImage]:
    """Image block of a channel or item, if it has one."""
    image = node.get("image") if isinstance(node, Mapping) else None
    if not isinstance(image, Mapping):
        return None

    return FeedImage(
        url=_text(image, "url"),
        title=_text(image, "title"),
        link=_text(image, "link"),
        description=_text(image, "description"),
        width=text_of(image.get("width")),
        height=text_of(image.get("height")),
    )


def retrieve_item(node: Any) -> Optional[FeedItem]:
    if not isinstance(node, Mapping):
        return None

    return FeedItem(
        id=_text(node, "guid"),
        title=_text(node, "title"),
        link=_text(node, "link"),
        description=_text(node, "description"),
        content=de_entity(text_of(resolve(node, CONTENT_PROPS))),
        authors=retrieve_authors(node),
        categories=retrieve_categories(node),
        enclosure=retrieve_enclosure(node),
        image=retrieve_image(node),
        published_at=de_entity(resolve_published_at(node)),
        updated_at=de_entity(resolve_updated_at(node)),
    )


def retrieve_items(channel: Any) -> Optional[List[FeedItem]]:
    items = channel.get("item") if isinstance(channel, Mapping) else None
    if not isinstance(items, list):
        return None

    return [item for item in (retrieve_item(node) for node in items) if item is not None]


def parse_rss(xml: Union[str, bytes]) -> ParsedRss:
    """
    Parse an RSS document into its canonical channel.

    Every field is optional: a document that is not RSS at all yields an
    empty ``ParsedRss`` instead of an error.
    """
    document = parse_document(xml, force_list=MULTI_VALUED)
    if document is None:
        return ParsedRss()

    root_name, rss = document
    if not is_rss_root(root_name):
        logger.debug("Not an RSS document, root element is <%s>", root_name)
        return ParsedRss()

    return rss_from_tree(rss)


def is_rss_root(root_name: str) -> bool:
    return root_name.lower() == "rss"


def rss_from_tree(rss: Mapping[str, Any]) -> ParsedRss:
    """Build the canonical channel from the tree of an ``<rss>`` root element."""
    channel = rss.get("channel")
    if isinstance(channel, list):
        channel = channel[0]
    if not isinstance(channel, Mapping):
        channel = {}

    version = rss.get("version")

    return ParsedRss(
        version=de_entity(version) if isinstance(version, str) else None,
        title=_text(channel, "title"),
        link=_text(channel, "link"),
        description=_text(channel, "description"),
        language=_text(channel, "language"),
        copyright=_text(channel, "copyright"),
        generator=_text(channel, "generator"),
        authors=retrieve_authors(channel),
        categories=retrieve_categories(channel),
        image=retrieve_image(channel),
        items=retrieve_items(channel),
        published_at=de_entity(resolve_published_at(channel)),
        updated_at=de_entity(resolve_updated_at(channel)),
        self=retrieve_self(channel),
    )
