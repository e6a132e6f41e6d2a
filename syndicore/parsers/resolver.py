"""Namespace-priority resolution of fields that competing dialects spell differently."""

from typing import Any, Dict, Mapping, Optional, Sequence

# Order matters: the first present candidate wins.
PUBLISHED_PROPS = (
    "pubDate",  # RSS.
    "published",  # Atom 1.0.
    "atom:published",
    "a10:published",
    "issued",  # Atom 0.3.
    "atom:issued",
    "dc:created",  # Dublin Core.
    "dc:issued",
    "dcterms:created",  # Dublin Core Terms.
    "dcterms:issued",
    "media:pubDate",
    "itunes:pubDate",
)

UPDATED_PROPS = (
    "lastBuildDate",  # RSS.
    "updated",  # Atom 1.0.
    "atom:updated",
    "a10:updated",
    "modified",  # Atom 0.3.
    "atom:modified",
    "dc:modified",  # Dublin Core.
    "dcterms:modified",  # Dublin Core Terms.
    "rdf:modified",
    "content:modified",
    "media:updated",
    "itunes:updated",
)

_MISSING = object()


def resolve(record: Any, candidates: Sequence[str], default: Any = None) -> Any:
    """
    Return the value of the first candidate present in ``record``.

    Matching is case-insensitive for every candidate alike; the order of
    ``candidates`` decides precedence, not the order of keys in the record.

    Args:
        record: Mapping to search. Anything else resolves to ``default``.
        candidates: Property names in priority order.
        default: Returned when no candidate is present.

    Returns:
        The stored value (which may itself be falsy) or ``default``.
    """
    if not isinstance(record, Mapping):
        return default

    lower_keys: Dict[str, str] = {}
    for key in record:
        if isinstance(key, str):
            lower_keys[key.lower()] = key

    for candidate in candidates:
        actual_key = lower_keys.get(candidate.lower(), _MISSING)
        if actual_key is not _MISSING:
            return record[actual_key]

    return default


def text_of(node: Any) -> Optional[str]:
    """Return the tagged ``#text`` of a tree node, or a bare string node."""
    if isinstance(node, str):
        return node
    if isinstance(node, Mapping):
        value = node.get("#text")
        return value if isinstance(value, str) else None
    return None


def resolve_published_at(record: Any) -> Optional[str]:
    """Raw publish timestamp of a channel or item."""
    return text_of(resolve(record, PUBLISHED_PROPS))


def resolve_updated_at(record: Any) -> Optional[str]:
    """Raw update timestamp of a channel or item."""
    return text_of(resolve(record, UPDATED_PROPS))
