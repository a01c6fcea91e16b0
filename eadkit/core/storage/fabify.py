from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from eadkit.core.document import (
    children,
    find_path,
    iter_local,
    parse_document,
    serialize_document,
)
from eadkit.core.settings import ProcessingConfig

from .hierarchy import NormalizationOutcome, normalize_storage_hierarchy
from .nodes import StorageLocationNode

log = logging.getLogger("eadkit.storage")


def storage_nodes(root: ET.Element) -> List[StorageLocationNode]:
    """All <container> elements of a document, in document order."""

    return [StorageLocationNode(e) for e in iter_local(root, "container")]


def _lowercase_creator_labels(root: ET.Element) -> int:
    changed = 0
    for orig in iter_local(root, "origination"):
        if orig.get("label") == "Creator":
            orig.set("label", "creator")
            changed += 1
    return changed


def _remove_internal_unitid(root: ET.Element, unitid_type: str) -> int:
    """Drop the collection-level <unitid> carrying the internal type marker."""

    archdesc = next(iter_local(root, "archdesc"), None)
    did = find_path(archdesc, "did")
    if did is None:
        return 0
    removed = 0
    for unitid in children(did, "unitid"):
        if unitid.get("type") == unitid_type:
            did.remove(unitid)
            removed += 1
    return removed


def normalize_document(root: ET.Element, config: Optional[ProcessingConfig] = None) -> NormalizationOutcome:
    """Prepare a parsed finding aid for export to the discovery system.

    Runs the storage-hierarchy rewrite first. The label and unitid side
    transforms are applied only when that rewrite succeeds, so a failed call
    leaves the document unmodified.

    """

    cfg = config or ProcessingConfig()
    outcome = normalize_storage_hierarchy(storage_nodes(root))
    if not outcome.success:
        return outcome

    labels = _lowercase_creator_labels(root)
    unitids = _remove_internal_unitid(root, cfg.internal_unitid_type)
    log.info("document_normalized", extra={"creator_labels": labels, "unitids_removed": unitids})
    return outcome


def fabify_ead(data: Union[bytes, str], config: Optional[ProcessingConfig] = None) -> Tuple[str, List[str]]:
    """Parse, normalize and re-serialize an EAD for the discovery system.

    Returns (xml_text, diagnostics). On any failure xml_text is "" and
    diagnostics explain why.

    """

    try:
        root = parse_document(data, keep_comments=True)
    except (DefusedET.ParseError, DefusedXmlException) as e:
        return "", ["Unable to parse XML file", str(e)]

    outcome = normalize_document(root, config)
    if not outcome.success:
        return "", list(outcome.diagnostics)

    return serialize_document(root), []
