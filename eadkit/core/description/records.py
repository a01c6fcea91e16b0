from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from eadkit.core.errors import TitleNotFoundError
from eadkit.core.markup import filter_label, filter_strings, transcode, transcode_literal
from eadkit.core.settings import ProcessingConfig
from eadkit.core.validation.relators import relator_label

from .census import annotate_digital_objects, census
from .grouping import group
from .model import DescriptionNode, FindingAid, NameEntry, TitleProper

log = logging.getLogger("eadkit.description")

VERSION = "0.1.0"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class DigitalObjectRecord(_Record):
    href: str
    role: str = ""
    title: str = ""
    do_type: Optional[str] = None
    count: Optional[int] = None


class ContainerRecord(_Record):
    """A <container>; the label has bracketed barcodes removed."""

    id: Optional[str] = None
    parent: Optional[str] = None
    type: Optional[str] = None
    label: Optional[str] = None
    value: str = ""


class NoteRecord(_Record):
    name: str
    text: str
    head: str = ""


class NameRecord(_Record):
    """A creator or access-point name; role_label is the MARC relator label."""

    context: str
    element: str
    name: str
    role: str = ""
    role_label: Optional[str] = None


class ComponentRecord(_Record):
    id: Optional[str] = None
    level: str = ""
    otherlevel: str = ""
    title: str = ""
    unitid: str = ""
    unitdates: List[str] = Field(default_factory=list)
    notes: List[NoteRecord] = Field(default_factory=list)
    digital_objects: List[DigitalObjectRecord] = Field(default_factory=list)
    containers: List[ContainerRecord] = Field(default_factory=list)
    children: List["ComponentRecord"] = Field(default_factory=list)


ComponentRecord.model_rebuild()


class RunInfo(_Record):
    libversion: str
    timestamp: datetime
    sourcefile: str = ""


class PubInfo(_Record):
    themeid: str = ""


class FindingAidRecord(_Record):
    """Output record for one finding aid, ready for model_dump_json."""

    eadid: str
    title_proper: str
    guide_title: str = ""
    repository: str = ""
    donors: List[str] = Field(default_factory=list)
    runinfo: RunInfo
    pubinfo: PubInfo = Field(default_factory=PubInfo)
    dao_counts: Dict[str, int] = Field(default_factory=dict)
    names: List[NameRecord] = Field(default_factory=list)
    archdesc: ComponentRecord


def flatten_title_proper(titles: Iterable[TitleProper]) -> str:
    """Transcode the first title proper that is not a "filing" title.

    Line breaks stay visible as paired annotations. Raises
    TitleNotFoundError when no usable title exists.
    """

    chosen = next((t for t in titles if t.type != "filing"), None)
    if chosen is None:
        raise TitleNotFoundError("Unable to find correct title")
    return transcode_literal(chosen.raw)


def _name_record(entry: NameEntry) -> NameRecord:
    label = None
    if entry.role:
        try:
            label = relator_label(entry.role)
        except KeyError:
            log.debug("relator_code_unknown", extra={"role": entry.role})
    return NameRecord(
        context=entry.context,
        element=entry.element,
        name=entry.text,
        role=entry.role,
        role_label=label,
    )


def _container_record(node) -> ContainerRecord:
    label = node.label
    return ContainerRecord(
        id=node.identifier,
        parent=node.parent,
        type=node.type,
        label=filter_label(label) if label is not None else None,
        value=node.value,
    )


def _component_record(node: DescriptionNode, config: ProcessingConfig, group_children: bool) -> ComponentRecord:
    kids = node.children
    if group_children and node.level.strip().lower() != config.wrapper_level:
        kids = group(kids, config)

    return ComponentRecord(
        id=node.identifier,
        level=node.level,
        otherlevel=node.otherlevel,
        title=transcode(node.title),
        unitid=node.unitid,
        unitdates=list(node.unitdates),
        notes=[
            NoteRecord(name=f.name, text=transcode(f.raw, f.mode), head=transcode(f.head))
            for f in node.notes
        ],
        digital_objects=[
            DigitalObjectRecord(
                href=d.href,
                role=d.role,
                title=d.title,
                do_type=d.do_type or None,
                count=d.count,
            )
            for d in node.digital_objects
        ],
        containers=[_container_record(c) for c in node.containers],
        children=[_component_record(k, config, group_children) for k in kids],
    )


def build_record(
    aid: FindingAid,
    *,
    config: Optional[ProcessingConfig] = None,
    group_children: bool = True,
    themeid: str = "",
    donors: Iterable[str] = (),
    dao_info: Optional[Mapping[str, Tuple[str, int]]] = None,
    now: Optional[datetime] = None,
) -> FindingAidRecord:
    """Materialize every derived field of a finding aid into a frozen record.

    The raw FindingAid is only read (plus DAO back-references and any
    dao_info annotations); all transcoding and grouping happens here, not
    during JSON encoding.

    Raises DecodeError when any rich-text field is malformed and
    TitleNotFoundError when there is no usable title proper.

    """

    cfg = config or ProcessingConfig()
    if dao_info:
        annotate_digital_objects(aid.archdesc, dao_info)
    counts = census(aid.archdesc)

    record = FindingAidRecord(
        eadid=aid.eadid,
        title_proper=flatten_title_proper(aid.title_propers),
        guide_title=aid.guide_title,
        repository=aid.repository,
        donors=filter_strings(donors),
        runinfo=RunInfo(
            libversion=VERSION,
            timestamp=now or datetime.now(timezone.utc),
            sourcefile=aid.source_file or "",
        ),
        pubinfo=PubInfo(themeid=themeid),
        dao_counts=counts.to_dict(),
        names=[_name_record(n) for n in aid.names],
        archdesc=_component_record(aid.archdesc, cfg, group_children),
    )
    log.info("record_built", extra={"eadid": aid.eadid, "daos": counts.all.count})
    return record


def record_to_json(record: FindingAidRecord, *, indent: Optional[int] = 4) -> str:
    return record.model_dump_json(indent=indent)
