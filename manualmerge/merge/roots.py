"""Top-level root alignment and assembly of the merged forest."""

from __future__ import annotations

import logging
from dataclasses import replace

from manualmerge.manifest.models import SourceTree
from manualmerge.merge.models import (
    LeafAvailability,
    MergedNode,
    MergedTree,
    StructuralError,
)
from manualmerge.merge.pathkey import root_key
from manualmerge.merge.tree import LeafPolicy, MergeContext, TreeMerger

logger = logging.getLogger(__name__)


def _root_groups(tree: SourceTree) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for rid in tree.roots:
        node = tree.nodes.get(rid)
        if node is None:
            logger.debug("root %s missing from node table, skipping", rid)
            continue
        ids = groups.setdefault(root_key(node.title), [])
        if rid not in ids:
            ids.append(rid)
    return groups


def align_roots(
    tree_a: SourceTree, tree_b: SourceTree | None = None
) -> dict[str, tuple[list[str], list[str]]]:
    """Root key -> (A root ids, B root ids), in A's order then B-only roots."""
    groups_a = _root_groups(tree_a)
    groups_b = _root_groups(tree_b) if tree_b is not None else {}
    aligned: dict[str, tuple[list[str], list[str]]] = {}
    for key, ids in groups_a.items():
        aligned[key] = (ids, groups_b.get(key, []))
    for key, ids in groups_b.items():
        if key not in aligned:
            aligned[key] = ([], ids)
    return aligned


def assign_parents(
    nodes: dict[str, MergedNode], roots: list[str]
) -> dict[str, MergedNode]:
    """Derive parent ids from children lists in one pass.

    Raises StructuralError if a node would have two parents or a root
    would have one.
    """
    parents: dict[str, str] = {}
    for node in nodes.values():
        for cid in node.children:
            if cid in parents and parents[cid] != node.id:
                raise StructuralError(
                    f"node {cid} listed under both {parents[cid]} and {node.id}"
                )
            parents[cid] = node.id
    for rid in roots:
        if rid in parents:
            raise StructuralError(f"root {rid} is also a child of {parents[rid]}")
    return {
        nid: replace(node, parent_id=parents[nid]) if nid in parents else node
        for nid, node in nodes.items()
    }


def merge_trees(
    tree_a: SourceTree,
    availability: dict[str, LeafAvailability],
    variant_a: str,
    tree_b: SourceTree | None = None,
    variant_b: str | None = None,
    *,
    id_algorithm: str = "md5",
    id_prefix: str = "m_",
    id_length: int = 12,
    leaf_policy: LeafPolicy = "union",
) -> MergedTree:
    """Merge one or two variant trees into a single forest."""
    context = MergeContext()
    merger = TreeMerger(
        tree_a,
        availability,
        variant_a,
        tree_b,
        variant_b,
        id_algorithm=id_algorithm,
        id_prefix=id_prefix,
        id_length=id_length,
        leaf_policy=leaf_policy,
        context=context,
    )

    roots: list[str] = []
    for key, (ids_a, ids_b) in align_roots(tree_a, tree_b).items():
        mid = merger.merge_key(key, ids_a, ids_b)
        if mid not in roots:
            roots.append(mid)

    nodes = assign_parents(context.nodes, roots)
    variants = (variant_a, variant_b) if tree_b is not None and variant_b else (variant_a,)
    logger.debug("Merged %d roots, %d nodes", len(roots), len(nodes))
    return MergedTree(roots=tuple(roots), nodes=nodes, variants=variants)
