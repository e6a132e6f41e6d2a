"""Conversion of XML documents into a JSON-like tree of dicts, lists and strings."""

import re
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from lxml import etree

from ..errors import FeedParseError

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

TEXT_KEY = "#text"

_RE_XML_DECL_ENCODING = re.compile(
    r'^(<\?xml[^>]*encoding=["\'])([^"\']+)(["\'][^>]*\?>)', re.IGNORECASE
)


def _make_parser() -> etree.XMLParser:
    # Entities are left unresolved so undefined HTML entities survive as text.
    return etree.XMLParser(
        recover=True,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=True,
    )


def _prepare(source: Union[str, bytes]) -> bytes:
    if isinstance(source, bytes):
        return source.lstrip(b"\xef\xbb\xbf \t\r\n")

    # lxml refuses str input that declares an encoding, so re-declare as UTF-8.
    text = source.lstrip("\ufeff \t\r\n")
    text = _RE_XML_DECL_ENCODING.sub(r"\1utf-8\3", text, count=1)
    return text.encode("utf-8")


def qualified_name(element: etree._Element) -> str:
    """Tag name with its document prefix, e.g. ``atom:link``."""
    local = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local}"
    return local


def _attribute_name(element: etree._Element, key: str) -> str:
    if not key.startswith("{"):
        return key

    uri, local = key[1:].split("}", 1)
    if uri == XML_NAMESPACE:
        return f"xml:{local}"
    for prefix, namespace in element.nsmap.items():
        if prefix and namespace == uri:
            return f"{prefix}:{local}"
    return local


def element_to_tree(
    element: etree._Element,
    force_list: FrozenSet[str] = frozenset(),
    text_nodes: bool = True,
) -> Any:
    """
    Convert an element into a dict of attributes, children and text.

    Attributes keep their names; child elements are keyed by qualified name and
    become lists when repeated or listed in ``force_list``; the element's own
    text lives under ``#text``. With ``text_nodes`` every element is a dict and
    leaves always carry ``#text``; without it, attribute-less leaves collapse
    into plain strings.
    """
    node: Dict[str, Any] = {}
    for key, value in element.attrib.items():
        node[_attribute_name(element, key)] = value

    children: Dict[str, List[Any]] = {}
    text_parts = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str):
            name = qualified_name(child)
            children.setdefault(name, []).append(
                element_to_tree(child, force_list, text_nodes)
            )
        elif child.tag is etree.Entity:
            text_parts.append(child.text or "")
        text_parts.append(child.tail or "")

    for name, values in children.items():
        if name in force_list or len(values) > 1:
            node[name] = values
        else:
            node[name] = values[0]

    text = "".join(text_parts).strip()
    if text_nodes:
        if text or not children:
            node[TEXT_KEY] = text
        return node

    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


def parse_document(
    source: Union[str, bytes],
    force_list: FrozenSet[str] = frozenset(),
    text_nodes: bool = True,
) -> Optional[Tuple[str, Any]]:
    """
    Parse an XML document into ``(root name, tree)``.

    Returns ``None`` for empty input. Malformed markup is recovered where
    libxml2 can; input with no recoverable element raises ``FeedParseError``.
    """
    data = _prepare(source)
    if not data:
        return None

    try:
        root = etree.fromstring(data, _make_parser())
    except etree.XMLSyntaxError as e:
        raise FeedParseError(str(e)) from e

    if root is None:
        raise FeedParseError("no root element")

    return qualified_name(root), element_to_tree(root, force_list, text_nodes)
