from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from .model import DescriptionNode, DigitalObjectDescriptor

log = logging.getLogger("eadkit.description")


class DAOCategory(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"
    EXTERNAL_LINK = "external-link"
    ELECTRONIC_RECORDS_READING_ROOM = "electronic-records-reading-room"
    AUDIO_READING_ROOM = "audio-reading-room"
    VIDEO_READING_ROOM = "video-reading-room"


_ROLE_CATEGORIES: Dict[str, DAOCategory] = {
    "audio-service": DAOCategory.AUDIO,
    "video-service": DAOCategory.VIDEO,
    "image-service": DAOCategory.IMAGE,
    "external-link": DAOCategory.EXTERNAL_LINK,
    "electronic-records-reading-room": DAOCategory.ELECTRONIC_RECORDS_READING_ROOM,
    "audio-reading-room": DAOCategory.AUDIO_READING_ROOM,
    "video-reading-room": DAOCategory.VIDEO_READING_ROOM,
}


def classify_role(role: Optional[str]) -> DAOCategory:
    """Map a <dao> role to its census bucket.

    Blank roles count as external links. Unrecognized roles do too, and are
    logged so the source can be corrected.
    """

    key = (role or "").strip().lower()
    if not key:
        return DAOCategory.EXTERNAL_LINK
    category = _ROLE_CATEGORIES.get(key)
    if category is None:
        log.warning("dao_role_unrecognized", extra={"role": key})
        return DAOCategory.EXTERNAL_LINK
    return category


@dataclass
class CensusBucket:
    """Ordered descriptors plus a count that always equals their number."""

    count: int = 0
    items: List[DigitalObjectDescriptor] = field(default_factory=list)

    def add(self, dao: DigitalObjectDescriptor) -> None:
        self.items.append(dao)
        self.count += 1

    def clear(self) -> None:
        self.items.clear()
        self.count = 0


@dataclass
class CensusResult:
    all: CensusBucket = field(default_factory=CensusBucket)
    buckets: Dict[DAOCategory, CensusBucket] = field(
        default_factory=lambda: {c: CensusBucket() for c in DAOCategory}
    )

    def bucket(self, category: DAOCategory) -> CensusBucket:
        return self.buckets[category]

    def count(self, category: Optional[DAOCategory] = None) -> int:
        if category is None:
            return self.all.count
        return self.buckets[category].count

    def add(self, category: DAOCategory, dao: DigitalObjectDescriptor) -> None:
        self.all.add(dao)
        self.buckets[category].add(dao)

    def clear(self) -> None:
        self.all.clear()
        for b in self.buckets.values():
            b.clear()

    def to_dict(self) -> Dict[str, int]:
        out = {"all": self.all.count}
        out.update({c.value: b.count for c, b in self.buckets.items()})
        return out


def annotate_digital_objects(root: DescriptionNode, info: Mapping[str, Tuple[str, int]]) -> int:
    """Fill do_type/count from an href-keyed lookup (e.g. image-set sizes).

    Returns the number of descriptors updated. Hrefs absent from info are
    left as they are.
    """

    updated = 0
    for node in root.iter_nodes():
        for dao in node.digital_objects:
            hit = info.get(dao.href)
            if hit is None:
                continue
            dao.do_type, dao.count = hit[0], int(hit[1])
            updated += 1
    return updated


def census(root: DescriptionNode) -> CensusResult:
    """Classify every digital object in the tree and link it to its owner.

    Each node is visited once; the walk uses an explicit stack so deep
    component nesting cannot exhaust the recursion limit.
    """

    result = CensusResult()
    for node in root.iter_nodes():
        for dao in node.digital_objects:
            dao.link_owner(node)
            result.add(classify_role(dao.role), dao)

    log.debug("dao_census", extra={"total": result.all.count})
    return result
