"""Description-tree views of a finding aid.

The reader builds DescriptionNode trees from EAD; grouping, the DAO census
and the record builder work over those trees.
"""

from .census import CensusBucket, CensusResult, DAOCategory, annotate_digital_objects, census, classify_role
from .grouping import group, is_groupable
from .model import DescriptionNode, DigitalObjectDescriptor, FindingAid, NameEntry, RichTextField, TitleProper
from .reader import read_finding_aid
from .records import (
    VERSION,
    ComponentRecord,
    ContainerRecord,
    DigitalObjectRecord,
    NameRecord,
    FindingAidRecord,
    NoteRecord,
    PubInfo,
    RunInfo,
    build_record,
    flatten_title_proper,
    record_to_json,
)

__all__ = [
    "DescriptionNode",
    "DigitalObjectDescriptor",
    "FindingAid",
    "NameEntry",
    "RichTextField",
    "TitleProper",
    "group",
    "is_groupable",
    "DAOCategory",
    "CensusBucket",
    "CensusResult",
    "annotate_digital_objects",
    "census",
    "classify_role",
    "read_finding_aid",
    "VERSION",
    "ComponentRecord",
    "ContainerRecord",
    "DigitalObjectRecord",
    "NameRecord",
    "FindingAidRecord",
    "NoteRecord",
    "PubInfo",
    "RunInfo",
    "build_record",
    "flatten_title_proper",
    "record_to_json",
]
