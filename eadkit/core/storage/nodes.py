from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional

from eadkit.core.document import EAD_NS


class StorageLocationNode:
    """Mutable handle over one physical-container element (box, folder, ...).

    A node without a parent reference is the root of a container hierarchy.
    Writes go straight to the underlying element, so a normalized document
    can be re-serialized as-is.

    """

    __slots__ = ("element",)

    def __init__(self, element: ET.Element) -> None:
        self.element = element

    @classmethod
    def create(
        cls,
        *,
        identifier: Optional[str] = None,
        parent: Optional[str] = None,
        type: Optional[str] = None,
        label: Optional[str] = None,
        value: str = "",
    ) -> "StorageLocationNode":
        """Build a detached <container> element (used by tests and tooling)."""

        attrib: Dict[str, str] = {}
        if identifier is not None:
            attrib["id"] = identifier
        if parent is not None:
            attrib["parent"] = parent
        if type is not None:
            attrib["type"] = type
        if label is not None:
            attrib["label"] = label
        el = ET.Element(f"{{{EAD_NS}}}container", attrib)
        el.text = value
        return cls(el)

    @property
    def identifier(self) -> Optional[str]:
        return self.element.get("id")

    @property
    def parent(self) -> Optional[str]:
        return self.element.get("parent")

    @property
    def type(self) -> Optional[str]:
        return self.element.get("type")

    @property
    def label(self) -> Optional[str]:
        return self.element.get("label")

    @property
    def value(self) -> str:
        return (self.element.text or "").strip()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def set_parent(self, parent: str) -> None:
        self.element.set("parent", parent)

    def remove_identifier(self) -> None:
        self.element.attrib.pop("id", None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identifier,
            "parent": self.parent,
            "type": self.type,
            "label": self.label,
            "value": self.value,
        }

    def __repr__(self) -> str:
        return f"StorageLocationNode(id={self.identifier!r}, parent={self.parent!r}, type={self.type!r})"
