"""Physical-storage helpers for eadkit.

Container hierarchies (box -> folder -> item) are flattened so every
subcontainer points straight at its root, the shape the discovery system
expects on import.
"""

from .fabify import fabify_ead, normalize_document, storage_nodes
from .hierarchy import NormalizationOutcome, normalize_storage_hierarchy, plan_storage_hierarchy
from .nodes import StorageLocationNode

__all__ = [
    "StorageLocationNode",
    "NormalizationOutcome",
    "normalize_storage_hierarchy",
    "plan_storage_hierarchy",
    "normalize_document",
    "storage_nodes",
    "fabify_ead",
]
