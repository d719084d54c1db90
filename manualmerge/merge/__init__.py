"""Variant tree alignment and merge engine."""

from manualmerge.merge.engine import MergeResult, merge_manifests
from manualmerge.merge.leaves import collect_leaves, map_leaves
from manualmerge.merge.models import (
    ContentReference,
    CycleError,
    LeafAvailability,
    LeafRecord,
    MergedNode,
    MergedTree,
    MergeError,
    StructuralError,
    merged_id,
)
from manualmerge.merge.pathkey import build_path_key, normalize_title, root_key
from manualmerge.merge.roots import align_roots, assign_parents, merge_trees
from manualmerge.merge.tree import MergeContext, TreeMerger

__all__ = [
    "ContentReference",
    "CycleError",
    "LeafAvailability",
    "LeafRecord",
    "MergeContext",
    "MergeError",
    "MergeResult",
    "MergedNode",
    "MergedTree",
    "StructuralError",
    "TreeMerger",
    "align_roots",
    "assign_parents",
    "build_path_key",
    "collect_leaves",
    "map_leaves",
    "merge_manifests",
    "merge_trees",
    "merged_id",
    "normalize_title",
    "root_key",
]
