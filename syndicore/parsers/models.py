"""Canonical models produced by the feed parsers."""

import math
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field

from .jsonfeed import LooseFeed


def coerce_number(value: Any) -> Union[int, float]:
    """Coerce a text value to a number, falling back to 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else 0

    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0
    return number if math.isfinite(number) else 0


Number = Annotated[Union[int, float], BeforeValidator(coerce_number)]


class FeedAuthor(BaseModel):
    """Author of a channel or item."""

    name: Optional[str] = None
    email: Optional[str] = None
    link: Optional[str] = None


class FeedCategory(BaseModel):
    """Category or tag attached to a channel or item."""

    term: Optional[str] = None
    label: Optional[str] = None
    link: Optional[str] = None


class FeedEnclosure(BaseModel):
    """Media attachment of an item."""

    url: Optional[str] = None
    type: Optional[str] = None
    length: Optional[Number] = None


class FeedImage(BaseModel):
    """Channel or item artwork."""

    url: Optional[str] = None
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    width: Optional[Number] = None
    height: Optional[Number] = None


class FeedItem(BaseModel):
    """Single entry of an RSS-family feed."""

    id: Optional[str] = Field(None, description="guid of the entry")
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    authors: Optional[List[FeedAuthor]] = None
    categories: Optional[List[FeedCategory]] = None
    enclosure: Optional[FeedEnclosure] = None
    image: Optional[FeedImage] = None
    published_at: Optional[str] = Field(None, description="Raw publish timestamp")
    updated_at: Optional[str] = Field(None, description="Raw update timestamp")


class ParsedRss(BaseModel):
    """Channel of an RSS-family feed with its items."""

    version: Optional[str] = None
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    copyright: Optional[str] = None
    generator: Optional[str] = None
    authors: Optional[List[FeedAuthor]] = None
    categories: Optional[List[FeedCategory]] = None
    image: Optional[FeedImage] = None
    items: Optional[List[FeedItem]] = None
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    self: Optional[str] = Field(None, description="href of the rel=self atom:link")


class ParsedFeedDocument(BaseModel):
    """Parsed feed tagged with its format and declared version."""

    format: Literal["rss", "jsonfeed"]
    version: Optional[str] = None
    feed: Union[ParsedRss, LooseFeed]

    @property
    def item_count(self) -> int:
        """Number of items in the feed."""
        return len(self.feed.items or [])
