from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from .nodes import StorageLocationNode

log = logging.getLogger("eadkit.storage")

SUBCONTAINER_FAILURE = "problem processing subcontainers"


@dataclass(frozen=True)
class NormalizationOutcome:
    """Result of a fail-closed normalization.

    diagnostics are operator-facing strings; they are empty on success.
    """

    success: bool
    diagnostics: List[str] = field(default_factory=list)


def _index_by_parent(nodes: List[StorageLocationNode]) -> Tuple[Dict[str, StorageLocationNode], List[str]]:
    """Map each declared parent value to the single node declaring it."""

    index: Dict[str, StorageLocationNode] = {}
    problems: List[str] = []
    for node in nodes:
        parent = node.parent
        if parent is None:
            continue
        other = index.get(parent)
        if other is not None and other.element is not node.element:
            problems.append(
                f'containers "{other.identifier}" and "{node.identifier}" both declare parent "{parent}"; '
                "the hierarchy may already be normalized"
            )
            continue
        index[parent] = node
    return index, problems


def plan_storage_hierarchy(
    nodes: Iterable[StorageLocationNode],
) -> Tuple[List[Tuple[StorageLocationNode, str]], List[str]]:
    """Compute (node, root_id) rewrites without touching any node.

    Returns (plan, problems). A non-empty problems list means the plan must
    not be applied.

    """

    node_list = list(nodes)
    index, problems = _index_by_parent(node_list)
    if problems:
        return [], problems

    plan: List[Tuple[StorageLocationNode, str]] = []
    for root in node_list:
        if not root.is_root:
            continue
        root_id = root.identifier
        if not root_id:
            log.debug("storage_root_without_id", extra={"type": root.type})
            continue

        seen: Set[str] = {root_id}
        key = root_id
        while True:
            child = index.get(key)
            if child is None:
                break
            child_id = child.identifier
            if not child_id:
                problems.append(f'problem accessing @id attribute for subcontainers of parent "{key}"')
                return [], problems
            if child_id in seen:
                problems.append(f'container hierarchy under "{root_id}" loops back to "{child_id}"')
                return [], problems
            seen.add(child_id)
            plan.append((child, root_id))
            key = child_id

    return plan, problems


def normalize_storage_hierarchy(nodes: Iterable[StorageLocationNode]) -> NormalizationOutcome:
    """Parent every subcontainer directly to the root of its hierarchy.

    For a chain Box(id=b) -> Folder(id=f, parent=b) -> Item(id=i, parent=f),
    Folder and Item end up with parent="b" and no @id. Roots are untouched.

    Fails closed: a duplicate parent declaration or a subcontainer without
    @id aborts the call before any node is modified.

    """

    plan, problems = plan_storage_hierarchy(nodes)
    if problems:
        log.warning("storage_normalization_aborted", extra={"problem_count": len(problems)})
        return NormalizationOutcome(success=False, diagnostics=[SUBCONTAINER_FAILURE, *problems])

    for node, root_id in plan:
        node.set_parent(root_id)
        node.remove_identifier()

    log.info("storage_normalized", extra={"rewritten": len(plan)})
    return NormalizationOutcome(success=True)
