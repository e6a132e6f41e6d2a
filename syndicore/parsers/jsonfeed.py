"""JSON Feed v1 / v1.1 parsing in loose and strict mode."""

import math
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, Union
from urllib.parse import urlsplit

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
)

from ..errors import FeedValidationError, ValidationIssue, ValidationResult

VERSION_1 = "https://jsonfeed.org/version/1"
VERSION_1_1 = "https://jsonfeed.org/version/1.1"


# Loose mode.


def _loose_string(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _loose_number(value: Any) -> Union[int, float]:
    # Only called for keys that are present: absent keys stay None.
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
        try:
            number = float(value.strip())
        except ValueError:
            return 0
        return number if math.isfinite(number) else 0
    return 0


def _loose_boolean(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _loose_objects(value: Any) -> Optional[List[Any]]:
    if not isinstance(value, list):
        return None
    return [entry for entry in value if isinstance(entry, dict)]


def _loose_object(value: Any) -> Any:
    return value if isinstance(value, dict) else None


def _loose_strings(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [entry for entry in value if isinstance(entry, str)]


LooseStr = Annotated[Optional[str], BeforeValidator(_loose_string)]
LooseNumber = Annotated[Optional[Union[int, float]], BeforeValidator(_loose_number)]
LooseBool = Annotated[Optional[bool], BeforeValidator(_loose_boolean)]
LooseTags = Annotated[Optional[List[str]], BeforeValidator(_loose_strings)]


class LooseModel(BaseModel):
    """Base for loose models: unknown properties are dropped."""

    model_config = ConfigDict(extra="ignore")


class LooseAuthor(LooseModel):
    name: LooseStr = None
    url: LooseStr = None
    avatar: LooseStr = None


class LooseAttachment(LooseModel):
    url: LooseStr = None
    mime_type: LooseStr = None
    title: LooseStr = None
    size_in_bytes: LooseNumber = None
    duration_in_seconds: LooseNumber = None


class LooseItem(LooseModel):
    id: LooseStr = None
    url: LooseStr = None
    external_url: LooseStr = None
    title: LooseStr = None
    content_html: LooseStr = None
    content_text: LooseStr = None
    summary: LooseStr = None
    image: LooseStr = None
    banner_image: LooseStr = None
    date_published: LooseStr = None
    date_modified: LooseStr = None
    tags: LooseTags = None
    author: Annotated[Optional[LooseAuthor], BeforeValidator(_loose_object)] = None
    authors: Annotated[Optional[List[LooseAuthor]], BeforeValidator(_loose_objects)] = None
    language: LooseStr = None
    attachments: Annotated[
        Optional[List[LooseAttachment]], BeforeValidator(_loose_objects)
    ] = None


class LooseHub(LooseModel):
    type: LooseStr = None
    url: LooseStr = None


class LooseFeed(LooseModel):
    """Best-effort JSON Feed: every field optional, either author shape accepted."""

    version: LooseStr = None
    title: LooseStr = None
    home_page_url: LooseStr = None
    feed_url: LooseStr = None
    description: LooseStr = None
    user_comment: LooseStr = None
    next_url: LooseStr = None
    icon: LooseStr = None
    favicon: LooseStr = None
    language: LooseStr = None
    expired: LooseBool = None
    hubs: Annotated[Optional[List[LooseHub]], BeforeValidator(_loose_objects)] = None
    author: Annotated[Optional[LooseAuthor], BeforeValidator(_loose_object)] = None
    authors: Annotated[Optional[List[LooseAuthor]], BeforeValidator(_loose_objects)] = None
    items: Annotated[Optional[List[LooseItem]], BeforeValidator(_loose_objects)] = None


# Strict mode.


def _check_url(value: str) -> str:
    parts = urlsplit(value)
    if not parts.scheme or not (parts.netloc or parts.path):
        raise ValueError("Invalid url")
    if any(char.isspace() for char in parts.netloc):
        raise ValueError("Invalid url")
    return value


def _integral(value: Any) -> Any:
    # JSON numbers like 1024.0 decode as float but are still integers.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Url = Annotated[StrictStr, AfterValidator(_check_url)]
Integral = Annotated[StrictInt, BeforeValidator(_integral)]


class StrictModel(BaseModel):
    """Base for strict models: unknown properties dropped, scalars never coerced."""

    model_config = ConfigDict(extra="ignore")


class StrictAuthor(StrictModel):
    name: StrictStr
    url: Optional[Url] = None
    avatar: Optional[Url] = None


class StrictAttachment(StrictModel):
    url: Url
    mime_type: StrictStr
    title: Optional[StrictStr] = None
    size_in_bytes: Optional[Integral] = None
    duration_in_seconds: Optional[Union[StrictInt, StrictFloat]] = None


class StrictHub(StrictModel):
    type: StrictStr
    url: Url


class StrictItemBase(StrictModel):
    id: StrictStr
    url: Optional[Url] = None
    external_url: Optional[Url] = None
    title: Optional[StrictStr] = None
    content_html: Optional[StrictStr] = None
    content_text: Optional[StrictStr] = None
    summary: Optional[StrictStr] = None
    image: Optional[Url] = None
    banner_image: Optional[Url] = None
    date_published: Optional[StrictStr] = None
    date_modified: Optional[StrictStr] = None
    tags: Optional[List[StrictStr]] = None
    attachments: Optional[List[StrictAttachment]] = None


class StrictItem1(StrictItemBase):
    author: Optional[StrictAuthor] = None


class StrictItem11(StrictItemBase):
    authors: Optional[List[StrictAuthor]] = None
    language: Optional[StrictStr] = None


class StrictFeedBase(StrictModel):
    title: StrictStr
    home_page_url: Optional[Url] = None
    feed_url: Optional[Url] = None
    description: Optional[StrictStr] = None
    user_comment: Optional[StrictStr] = None
    next_url: Optional[Url] = None
    icon: Optional[Url] = None
    favicon: Optional[Url] = None
    expired: Optional[StrictBool] = None
    hubs: Optional[List[StrictHub]] = None


class StrictFeed1(StrictFeedBase):
    """JSON Feed version 1."""

    version: Literal["https://jsonfeed.org/version/1"]
    author: Optional[StrictAuthor] = None
    items: List[StrictItem1]


class StrictFeed11(StrictFeedBase):
    """JSON Feed version 1.1."""

    version: Literal["https://jsonfeed.org/version/1.1"]
    authors: Optional[List[StrictAuthor]] = None
    language: Optional[StrictStr] = None
    items: List[StrictItem11]


StrictFeed = Union[StrictFeed1, StrictFeed11]

STRICT_VERSIONS: Dict[str, Type[StrictFeedBase]] = {
    VERSION_1: StrictFeed1,
    VERSION_1_1: StrictFeed11,
}


def _require_object(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        received = "null" if data is None else type(data).__name__
        raise FeedValidationError(
            [ValidationIssue("", f"Expected object, received {received}")]
        )
    return data


def _content_issues(data: Dict[str, Any]) -> List[ValidationIssue]:
    items = data.get("items")
    if not isinstance(items, list):
        return []

    issues = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        if not (item.get("content_html") or item.get("content_text")):
            issues.append(
                ValidationIssue(
                    f"items.{index}.content_text",
                    "At least one of 'content_html' or 'content_text' must be provided",
                )
            )
    return issues


def _parse_strict(data: Dict[str, Any]) -> StrictFeed:
    version = data.get("version")
    model = STRICT_VERSIONS.get(version) if isinstance(version, str) else None
    if model is None:
        expected = " | ".join(f"'{v}'" for v in STRICT_VERSIONS)
        raise FeedValidationError(
            [ValidationIssue("version", f"Invalid discriminator value. Expected {expected}")]
        )

    issues: List[ValidationIssue] = []
    feed = None
    try:
        feed = model.model_validate(data)
    except ValidationError as e:
        issues.extend(FeedValidationError.issues_from(e))
    issues.extend(_content_issues(data))

    if issues:
        raise FeedValidationError(issues)
    return feed


def parse_json_feed(data: Any, strict: bool = False) -> Union[LooseFeed, StrictFeed]:
    """
    Parse a decoded JSON Feed document.

    Args:
        data: Result of ``json.loads`` on the feed body.
        strict: Validate against the declared version instead of best effort.

    Returns:
        ``LooseFeed`` in loose mode, ``StrictFeed1`` or ``StrictFeed11`` in strict mode.

    Raises:
        FeedValidationError: The input is not an object, or (strict mode only)
            violates its version's contract.
    """
    data = _require_object(data)
    if strict:
        return _parse_strict(data)
    return LooseFeed.model_validate(data)


def validate_json_feed(data: Any) -> ValidationResult:
    """Strictly validate a JSON Feed without raising."""
    try:
        _parse_strict(_require_object(data))
    except FeedValidationError as e:
        return ValidationResult(False, e)
    return ValidationResult(True, None)
