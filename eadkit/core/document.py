from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional, Tuple, Union
from xml.sax.saxutils import escape

from defusedxml import ElementTree as DefusedET

EAD_NS = "urn:isbn:1-931666-22-9"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Serialize EAD as the default namespace and keep the conventional xlink
# prefix instead of ns0/ns1. ElementTree's prefix registry is process-wide:
# importing eadkit changes how any caller serializes these two namespaces.
# ET.tostring(default_namespace=...) cannot be used instead because it
# rejects the unqualified attributes every EAD element carries.
ET.register_namespace("", EAD_NS)
ET.register_namespace("xlink", XLINK_NS)


def parse_document(data: Union[bytes, str], *, keep_comments: bool = False) -> ET.Element:
    """Parse serialized EAD into a mutable element tree.

    With keep_comments, comments and processing instructions inside the
    root element are kept as tree nodes so re-serialization is lossless
    for them. Nodes outside the root element are always dropped.

    Security notes:
    - Uses defusedxml: DTD entity declarations and external references are
      refused rather than expanded.
    - Raises defusedxml.ElementTree.ParseError for malformed XML.

    """

    if not keep_comments:
        return DefusedET.fromstring(data)

    parser = DefusedET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    parser.feed(data)
    return parser.close()


def serialize_document(root: ET.Element) -> str:
    """Serialize a document back to text with an XML declaration."""

    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"


def local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.split("}", 1)[1] if "}" in tag else tag


def attr(elem: ET.Element, name: str) -> Optional[str]:
    """Read an attribute by local name (matches both href and xlink:href)."""

    if name in elem.attrib:
        return elem.attrib[name]
    for k, v in elem.attrib.items():
        if local_name(k) == name:
            return v
    return None


def children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [c for c in elem if local_name(c.tag) == name]


def first_child(elem: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if elem is None:
        return None
    for c in elem:
        if local_name(c.tag) == name:
            return c
    return None


def find_path(elem: Optional[ET.Element], *names: str) -> Optional[ET.Element]:
    """Follow a path of local names, taking the first match at each step."""

    cur = elem
    for n in names:
        cur = first_child(cur, n)
        if cur is None:
            return None
    return cur


def iter_local(elem: ET.Element, name: str) -> Iterator[ET.Element]:
    """Iterate descendants (and elem itself) whose local name matches."""

    for e in elem.iter():
        if local_name(e.tag) == name:
            yield e


def parent_map(root: ET.Element) -> Dict[ET.Element, ET.Element]:
    return {c: p for p in root.iter() for c in p}


def inner_markup(elem: ET.Element, skip: Tuple[str, ...] = ()) -> str:
    """Return the element's content as markup text, without its own tags.

    Children whose local name is in skip are left out; their tail text is kept.
    """

    parts = [escape(elem.text or "")]
    for child in elem:
        if local_name(child.tag) in skip:
            parts.append(escape(child.tail or ""))
            continue
        # tostring includes the child's tail text.
        parts.append(ET.tostring(child, encoding="unicode"))
    return "".join(parts)


def text_content(elem: Optional[ET.Element]) -> str:
    if elem is None:
        return ""
    return "".join(elem.itertext())
