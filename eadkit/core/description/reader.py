from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from eadkit.core.document import (
    attr,
    children,
    find_path,
    first_child,
    inner_markup,
    local_name,
    parse_document,
    text_content,
)
from eadkit.core.errors import ReaderError
from eadkit.core.markup import cleanup_whitespace
from eadkit.core.settings import ProcessingConfig
from eadkit.core.storage import StorageLocationNode

from .model import (
    DescriptionNode,
    DigitalObjectDescriptor,
    FindingAid,
    NameEntry,
    RichTextField,
    TitleProper,
)

log = logging.getLogger("eadkit.description")

COMPONENT_TAGS = frozenset({"c"} | {f"c{i:02d}" for i in range(1, 13)})

# Formatted notes that may appear on <archdesc> and components. Each <p>
# becomes one rich-text field.
NOTE_TAGS = (
    "accessrestrict",
    "accruals",
    "acqinfo",
    "altformavail",
    "appraisal",
    "arrangement",
    "bioghist",
    "custodhist",
    "fileplan",
    "materialspec",
    "odd",
    "originalsloc",
    "otherfindaid",
    "phystech",
    "prefercite",
    "processinfo",
    "relatedmaterial",
    "scopecontent",
    "separatedmaterial",
    "userestrict",
)

# <did> children that are rich text in their own right.
DID_RICH_TAGS = ("abstract", "physdesc")


def _read_notes(elem: ET.Element) -> List[RichTextField]:
    fields: List[RichTextField] = []
    did = first_child(elem, "did")
    for name in DID_RICH_TAGS:
        for e in children(did, name) if did is not None else []:
            fields.append(RichTextField(name=name, raw=inner_markup(e)))

    for child in elem:
        name = local_name(child.tag)
        if name not in NOTE_TAGS:
            continue
        head_el = first_child(child, "head")
        head = inner_markup(head_el) if head_el is not None else ""
        paragraphs = children(child, "p")
        if not paragraphs:
            fields.append(RichTextField(name=name, raw=inner_markup(child, skip=("head",)), head=head))
            continue
        for p in paragraphs:
            fields.append(RichTextField(name=name, raw=inner_markup(p), head=head))
    return fields


NAME_ELEMENTS = ("corpname", "famname", "persname")


def _read_names(archdesc: ET.Element) -> List[NameEntry]:
    """Creator and access-point names, origination first, in document order."""

    did = first_child(archdesc, "did")
    holders = [("origination", e) for e in (children(did, "origination") if did is not None else [])]
    holders += [("controlaccess", e) for e in children(archdesc, "controlaccess")]
    names: List[NameEntry] = []
    for ctx, holder in holders:
        for e in holder:
            element = local_name(e.tag)
            if element not in NAME_ELEMENTS:
                continue
            names.append(
                NameEntry(
                    context=ctx,
                    element=element,
                    text=cleanup_whitespace(text_content(e)),
                    role=(e.get("role") or "").strip(),
                )
            )
    return names


def _read_digital_objects(elem: ET.Element) -> List[DigitalObjectDescriptor]:
    """<dao> elements may sit in <did> or directly in the component."""

    did = first_child(elem, "did")
    found = children(elem, "dao") + (children(did, "dao") if did is not None else [])
    daos: List[DigitalObjectDescriptor] = []
    for e in found:
        desc = first_child(e, "daodesc")
        title = attr(e, "title") or cleanup_whitespace(text_content(desc))
        daos.append(
            DigitalObjectDescriptor(
                href=(attr(e, "href") or "").strip(),
                role=(attr(e, "role") or "").strip(),
                title=title,
            )
        )
    return daos


def _read_unitid(did: Optional[ET.Element], internal_type: str) -> str:
    if did is None:
        return ""
    for u in children(did, "unitid"):
        if u.get("type") != internal_type:
            return cleanup_whitespace(text_content(u))
    return ""


def _read_node(elem: ET.Element, config: ProcessingConfig) -> DescriptionNode:
    did = first_child(elem, "did")
    unittitle = first_child(did, "unittitle")
    node = DescriptionNode(
        identifier=elem.get("id"),
        level=(elem.get("level") or "").strip(),
        otherlevel=(elem.get("otherlevel") or "").strip(),
        title=inner_markup(unittitle) if unittitle is not None else "",
        unitid=_read_unitid(did, config.internal_unitid_type),
        unitdates=[cleanup_whitespace(text_content(u)) for u in (children(did, "unitdate") if did is not None else [])],
        notes=_read_notes(elem),
        digital_objects=_read_digital_objects(elem),
        containers=[StorageLocationNode(c) for c in (children(did, "container") if did is not None else [])],
    )

    # Components hang off <dsc> under <archdesc> and directly under other
    # components.
    parents = [elem] + children(elem, "dsc")
    for holder in parents:
        for child in holder:
            if local_name(child.tag) in COMPONENT_TAGS:
                node.add_child(_read_node(child, config))
    return node


def read_finding_aid(
    data: Union[bytes, str],
    *,
    source_file: Optional[str] = None,
    config: Optional[ProcessingConfig] = None,
) -> FindingAid:
    """Parse an EAD document into a FindingAid.

    Only the parts the description pipeline consumes are read; the element
    tree is kept on the result for anything else.

    Security notes:
    - Parsing uses defusedxml; entity expansion is refused.

    Raises ReaderError when the bytes are not XML or not an EAD with an
    <archdesc>.

    """

    cfg = config or ProcessingConfig()
    try:
        root = parse_document(data)
    except (DefusedET.ParseError, DefusedXmlException) as e:
        raise ReaderError(f"Unable to parse XML file: {e}") from e

    if local_name(root.tag) != "ead":
        raise ReaderError(f"not an EAD document: root element is <{local_name(root.tag)}>")

    archdesc_el = first_child(root, "archdesc")
    if archdesc_el is None:
        raise ReaderError("Required element archdesc not found.")

    header = first_child(root, "eadheader")
    titlestmt = find_path(header, "filedesc", "titlestmt")
    title_propers = [
        TitleProper(raw=inner_markup(t), type=(t.get("type") or "").strip())
        for t in (children(titlestmt, "titleproper") if titlestmt is not None else [])
    ]

    archdesc = _read_node(archdesc_el, cfg)
    aid = FindingAid(
        root=root,
        eadid=cleanup_whitespace(text_content(find_path(header, "eadid"))),
        title_propers=title_propers,
        repository=cleanup_whitespace(text_content(find_path(archdesc_el, "did", "repository", "corpname"))),
        archdesc=archdesc,
        guide_title=cleanup_whitespace(text_content(find_path(archdesc_el, "did", "unittitle"))),
        source_file=source_file,
        names=_read_names(archdesc_el),
    )
    log.info(
        "finding_aid_read",
        extra={"eadid": aid.eadid, "components": sum(1 for _ in archdesc.iter_nodes()) - 1},
    )
    return aid
