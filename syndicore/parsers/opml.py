"""OPML outline documents: loose parsing, version-gated validation and canonical dump."""

import json
import logging
from email.utils import parsedate_to_datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Tuple, Type, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictStr,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..errors import FeedParseError, FeedValidationError, ValidationIssue, ValidationResult
from .tree import TEXT_KEY, parse_document

logger = logging.getLogger(__name__)

OUTLINE = "outline"

Path = Tuple[Union[str, int], ...]


def _as_node(value: Any) -> Optional[Dict[str, Any]]:
    # Elements without attributes or children collapse to "".
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value
    return None


# Loose mode.


def _string_map(value: Any) -> Dict[str, str]:
    node = _as_node(value) or {}
    head: Dict[str, str] = {}
    for key, entry in node.items():
        if isinstance(entry, dict):
            entry = entry.get(TEXT_KEY, "")
        if isinstance(entry, str):
            head[key] = entry
    return head


def _outline_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class LooseOpmlOutline(BaseModel):
    """Outline node: every attribute kept verbatim as a string, children under ``outline``."""

    model_config = ConfigDict(extra="allow")

    outline: Optional[List["LooseOpmlOutline"]] = None

    @model_validator(mode="before")
    @classmethod
    def _attribute_bag(cls, data: Any) -> Dict[str, Any]:
        node = _as_node(data) or {}
        return {
            key: value
            for key, value in node.items()
            if key == OUTLINE or (key != TEXT_KEY and isinstance(value, str))
        }

    @property
    def attributes(self) -> Dict[str, str]:
        """Attributes in document order."""
        return dict(self.model_extra or {})


class LooseOpmlBody(BaseModel):
    outline: Annotated[List[LooseOpmlOutline], BeforeValidator(_outline_list)] = Field(
        default_factory=list
    )

    @model_validator(mode="before")
    @classmethod
    def _empty_body(cls, data: Any) -> Dict[str, Any]:
        return _as_node(data) or {}


class LooseOpml(BaseModel):
    """Best-effort OPML document."""

    version: Annotated[str, BeforeValidator(lambda v: v if isinstance(v, str) else "")] = ""
    head: Annotated[Dict[str, str], BeforeValidator(_string_map)] = Field(default_factory=dict)
    body: LooseOpmlBody = Field(default_factory=LooseOpmlBody)

    @model_validator(mode="before")
    @classmethod
    def _empty_document(cls, data: Any) -> Dict[str, Any]:
        return _as_node(data) or {}


def parse_opml(xml: Union[str, bytes]) -> Optional[LooseOpml]:
    """
    Parse an OPML document leniently.

    Returns ``None`` for empty input or a document whose root is not
    ``<opml>``, so callers can treat an empty remote document as absent.
    """
    document = parse_document(xml, force_list=frozenset([OUTLINE]), text_nodes=False)
    if document is None:
        return None

    root_name, opml = document
    if root_name != "opml":
        logger.debug("Not an OPML document, root element is <%s>", root_name)
        return None

    return LooseOpml.model_validate(opml)


def _outline_to_dict(outline: LooseOpmlOutline) -> Dict[str, Any]:
    data: Dict[str, Any] = outline.attributes
    if outline.outline is not None:
        data[OUTLINE] = [_outline_to_dict(child) for child in outline.outline]
    return data


def dump_opml(document: LooseOpml) -> str:
    """Render a parsed document as canonical JSON (attributes in document order, then children)."""
    data = {
        "version": document.version,
        "head": document.head,
        "body": {OUTLINE: [_outline_to_dict(outline) for outline in document.body.outline]},
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


# Strict mode.


def _check_rfc822(value: str) -> str:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        raise ValueError("Invalid RFC 822 date")
    return value


Rfc822Date = Annotated[StrictStr, AfterValidator(_check_rfc822)]


class OpmlModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class OpmlHead1(OpmlModel):
    """``<head>`` of OPML 1.0 and 1.1."""

    title: Optional[StrictStr] = None
    date_created: Optional[StrictStr] = None
    date_modified: Optional[StrictStr] = None
    owner_name: Optional[StrictStr] = None
    owner_email: Optional[StrictStr] = None
    owner_id: Optional[StrictStr] = None
    docs: Optional[StrictStr] = None
    expansion_state: Optional[StrictStr] = None
    vert_scroll_state: Optional[int] = None
    window_top: Optional[int] = None
    window_left: Optional[int] = None
    window_bottom: Optional[int] = None
    window_right: Optional[int] = None


class OpmlHead20(OpmlHead1):
    """``<head>`` of OPML 2.0, with RFC 822 dates."""

    date_created: Optional[Rfc822Date] = None
    date_modified: Optional[Rfc822Date] = None


class OpmlOutline1(OpmlModel):
    text: Optional[StrictStr] = None
    type: Optional[StrictStr] = None
    is_comment: Optional[Literal["true", "false"]] = None
    is_breakpoint: Optional[Literal["true", "false"]] = None
    outline: Optional[List["OpmlOutline1"]] = None


class OpmlOutline20Base(OpmlModel):
    text: StrictStr
    created: Optional[StrictStr] = None
    is_comment: Optional[StrictStr] = None
    is_breakpoint: Optional[StrictStr] = None
    category: Optional[StrictStr] = None
    outline: Optional[List["OpmlOutline20"]] = None


class OpmlOutline20Untyped(OpmlOutline20Base):
    """Outline without a recognised ``type``; unknown attributes pass through."""

    model_config = ConfigDict(extra="allow")

    type: Optional[StrictStr] = None
    url: Optional[StrictStr] = None
    xml_url: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    html_url: Optional[StrictStr] = None
    language: Optional[StrictStr] = None
    title: Optional[StrictStr] = None
    version: Optional[StrictStr] = None


class OpmlOutline20Rss(OpmlOutline20Base):
    """Subscription to a feed."""

    type: Literal["rss"]
    xml_url: StrictStr
    description: Optional[StrictStr] = None
    html_url: Optional[StrictStr] = None
    language: Optional[StrictStr] = None
    title: Optional[StrictStr] = None
    version: Optional[Literal["RSS", "RSS1", "RSS2", "scriptingNews"]] = None


class OpmlOutline20Link(OpmlOutline20Base):
    type: Literal["link"]
    url: StrictStr


class OpmlOutline20Include(OpmlOutline20Base):
    type: Literal["include"]
    url: StrictStr


OpmlOutline20 = Union[
    OpmlOutline20Rss, OpmlOutline20Link, OpmlOutline20Include, OpmlOutline20Untyped
]

OUTLINE_TYPES_20: Dict[str, Type[OpmlOutline20Base]] = {
    "rss": OpmlOutline20Rss,
    "link": OpmlOutline20Link,
    "include": OpmlOutline20Include,
}

for _model in (
    OpmlOutline1,
    OpmlOutline20Base,
    OpmlOutline20Untyped,
    OpmlOutline20Rss,
    OpmlOutline20Link,
    OpmlOutline20Include,
):
    _model.model_rebuild()


class OpmlBody1(OpmlModel):
    outline: List[OpmlOutline1]


class OpmlBody20(OpmlModel):
    outline: List[OpmlOutline20]


class ValidatedOpml1(OpmlModel):
    """OPML 1.0 or 1.1 document that passed validation."""

    version: Literal["1.0", "1.1"]
    head: OpmlHead1
    body: OpmlBody1


class ValidatedOpml20(OpmlModel):
    """OPML 2.0 document that passed validation."""

    version: Literal["2.0"]
    head: OpmlHead20
    body: OpmlBody20


ValidatedOpml = Union[ValidatedOpml1, ValidatedOpml20]

VERSIONS = ("1.0", "1.1", "2.0")


def _outline_model(version: str, attributes: Dict[str, Any]) -> Type[OpmlModel]:
    if version != "2.0":
        return OpmlOutline1
    outline_type = attributes.get("type")
    if isinstance(outline_type, str):
        return OUTLINE_TYPES_20.get(outline_type, OpmlOutline20Untyped)
    return OpmlOutline20Untyped


def _validate_outlines(
    nodes: Sequence[Any], version: str, path: Path, issues: List[ValidationIssue]
) -> List[Any]:
    outlines = []
    for index, value in enumerate(nodes):
        location = (*path, index)
        node = _as_node(value)
        if node is None:
            issues.append(ValidationIssue(".".join(map(str, location)), "Expected object"))
            continue

        attributes = {key: item for key, item in node.items() if key not in (OUTLINE, TEXT_KEY)}
        model = _outline_model(version, attributes)
        try:
            outline = model.model_validate(attributes)
        except ValidationError as e:
            issues.extend(FeedValidationError.issues_from(e, location))
            outline = None

        children = node.get(OUTLINE)
        if isinstance(children, list):
            validated = _validate_outlines(children, version, (*location, OUTLINE), issues)
            if outline is not None:
                outline.outline = validated

        if outline is not None:
            outlines.append(outline)
    return outlines


def _validate_head(head: Any, version: str, issues: List[ValidationIssue]) -> Optional[OpmlModel]:
    node = _as_node(head)
    if head is None:
        issues.append(ValidationIssue("head", "Field required"))
        return None
    if node is None:
        issues.append(ValidationIssue("head", "Expected object"))
        return None

    model = OpmlHead20 if version == "2.0" else OpmlHead1
    try:
        return model.model_validate(node)
    except ValidationError as e:
        issues.extend(FeedValidationError.issues_from(e, ("head",)))
        return None


def _validate_body(body: Any, version: str, issues: List[ValidationIssue]) -> List[Any]:
    node = _as_node(body)
    if body is None or node is None:
        message = "Field required" if body is None else "Expected object"
        issues.append(ValidationIssue("body", message))
        return []

    outlines = node.get(OUTLINE)
    if not isinstance(outlines, list):
        issues.append(ValidationIssue("body.outline", "Field required"))
        return []
    return _validate_outlines(outlines, version, ("body", OUTLINE), issues)


def validate_opml(xml: Union[str, bytes]) -> ValidatedOpml:
    """
    Validate an OPML document against the rules of its declared version.

    Args:
        xml: Document text or bytes.

    Returns:
        ``ValidatedOpml1`` for versions 1.0 and 1.1, ``ValidatedOpml20`` for 2.0.

    Raises:
        FeedValidationError: Listing every offending path, e.g. ``body.outline.0.xmlUrl``.
    """
    try:
        document = parse_document(xml, force_list=frozenset([OUTLINE]), text_nodes=False)
    except FeedParseError as e:
        raise FeedValidationError([ValidationIssue("", str(e))]) from e

    if document is None:
        raise FeedValidationError([ValidationIssue("", "Empty document")])

    root_name, tree = document
    if root_name != "opml":
        message = f"Expected <opml> root, received <{root_name}>"
        raise FeedValidationError([ValidationIssue("", message)])
    opml = _as_node(tree) or {}

    version = opml.get("version")
    if version not in VERSIONS:
        expected = " | ".join(f"'{v}'" for v in VERSIONS)
        raise FeedValidationError(
            [ValidationIssue("version", f"Invalid discriminator value. Expected {expected}")]
        )

    issues: List[ValidationIssue] = []
    head = _validate_head(opml.get("head"), version, issues)
    outlines = _validate_body(opml.get("body"), version, issues)
    if issues:
        raise FeedValidationError(issues)

    if version == "2.0":
        return ValidatedOpml20(version=version, head=head, body=OpmlBody20(outline=outlines))
    return ValidatedOpml1(version=version, head=head, body=OpmlBody1(outline=outlines))


def check_opml(xml: Union[str, bytes]) -> ValidationResult:
    """Validate an OPML document without raising."""
    try:
        validate_opml(xml)
    except FeedValidationError as e:
        return ValidationResult(False, e)
    return ValidationResult(True, None)
