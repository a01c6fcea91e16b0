from __future__ import annotations

import weakref
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from eadkit.core.markup import LineBreakMode
from eadkit.core.storage import StorageLocationNode


@dataclass(frozen=True)
class RichTextField:
    """One rich-text value as found in the document.

    raw is inner markup (text plus inline elements). head is the inner
    markup of the enclosing note's <head>, shared by all of its paragraphs.
    Flattening happens in the record pass, never here.
    """

    name: str
    raw: str
    mode: LineBreakMode = LineBreakMode.PROSE
    head: str = ""


@dataclass(eq=False)
class DigitalObjectDescriptor:
    """A <dao> reference to a digital surrogate.

    The owning DescriptionNode holds the descriptor; the descriptor only
    keeps a weak back-reference, set by the census.
    """

    href: str = ""
    role: str = ""
    title: str = ""
    do_type: str = ""
    count: Optional[int] = None
    _owner: Optional["weakref.ReferenceType[DescriptionNode]"] = field(default=None, repr=False)

    @property
    def owner(self) -> Optional["DescriptionNode"]:
        return self._owner() if self._owner is not None else None

    def link_owner(self, node: "DescriptionNode") -> None:
        self._owner = weakref.ref(node)


@dataclass(eq=False)
class DescriptionNode:
    """A unit of archival description (collection, series, file, item, ...).

    Identity-compared: two distinct nodes with equal fields are still
    different units. Children are in document order unless regrouped.
    """

    identifier: Optional[str] = None
    level: str = ""
    otherlevel: str = ""
    title: str = ""
    unitid: str = ""
    unitdates: List[str] = field(default_factory=list)
    notes: List[RichTextField] = field(default_factory=list)
    children: List["DescriptionNode"] = field(default_factory=list)
    digital_objects: List[DigitalObjectDescriptor] = field(default_factory=list)
    containers: List[StorageLocationNode] = field(default_factory=list)

    def add_child(self, node: "DescriptionNode") -> None:
        self.children.append(node)

    def iter_nodes(self) -> Iterator["DescriptionNode"]:
        """Pre-order iteration over this node and all descendants."""

        stack: List[DescriptionNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class NameEntry:
    """A corpname/famname/persname under <origination> or <controlaccess>."""

    context: str
    element: str
    text: str
    role: str = ""


@dataclass(frozen=True)
class TitleProper:
    raw: str
    type: str = ""


@dataclass
class FindingAid:
    """A parsed finding aid: the element tree plus its description view."""

    root: ET.Element
    eadid: str
    title_propers: List[TitleProper]
    repository: str
    archdesc: DescriptionNode
    guide_title: str = ""
    source_file: Optional[str] = None
    names: List[NameEntry] = field(default_factory=list)
