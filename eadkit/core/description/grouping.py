from __future__ import annotations

import itertools
import logging
from typing import Iterable, List, Optional

from eadkit.core.settings import ProcessingConfig

from .model import DescriptionNode

log = logging.getLogger("eadkit.description")


def is_groupable(node: DescriptionNode, config: Optional[ProcessingConfig] = None) -> bool:
    """True unless the node's level is protected (series-like or a wrapper)."""

    cfg = config or ProcessingConfig()
    return not cfg.is_protected(node.level)


def group(nodes: Iterable[DescriptionNode], config: Optional[ProcessingConfig] = None) -> List[DescriptionNode]:
    """Wrap each maximal run of groupable siblings in a presentation node.

    Pure: the input list and its nodes are not modified; wrappers hold the
    original node objects as children. Wrapper ids are numbered per call
    (items001, items002, ...), so repeated calls never interfere.

    Time:  O(n)
    Space: O(n)
    """

    cfg = config or ProcessingConfig()
    counter = itertools.count(1)
    out: List[DescriptionNode] = []

    for groupable, run in itertools.groupby(nodes, key=lambda n: not cfg.is_protected(n.level)):
        members = list(run)
        if not groupable:
            out.extend(members)
            continue
        out.append(
            DescriptionNode(
                identifier=f"{cfg.wrapper_id_prefix}{next(counter):0{cfg.wrapper_id_width}d}",
                level=cfg.wrapper_level,
                title=cfg.wrapper_title,
                children=members,
            )
        )

    created = next(counter) - 1
    if created:
        log.debug("siblings_grouped", extra={"output": len(out), "wrappers": created})
    return out
