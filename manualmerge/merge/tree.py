"""Recursive alignment of two variant trees into merged nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from manualmerge.manifest.models import SourceNode, SourceTree
from manualmerge.merge.models import (
    ContentReference,
    CycleError,
    LeafAvailability,
    MergedNode,
    StructuralError,
    merged_id,
)
from manualmerge.merge.pathkey import build_path_key

logger = logging.getLogger(__name__)

LeafPolicy = Literal["union", "strict"]


@dataclass
class MergeContext:
    """Accumulated state for one merge run.

    ``ids`` maps each materialized path key to its merged id; ``expanding``
    holds the keys on the current depth-first path.
    """

    ids: dict[str, str] = field(default_factory=dict)
    nodes: dict[str, MergedNode] = field(default_factory=dict)
    expanding: list[str] = field(default_factory=list)


class TreeMerger:
    """Merges the subtrees of two variants that share a path key."""

    def __init__(
        self,
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
        context: MergeContext | None = None,
    ) -> None:
        if tree_b is not None and variant_b is None:
            raise ValueError("variant_b is required when tree_b is given")
        self.tree_a = tree_a
        self.tree_b = tree_b
        self.availability = availability
        self.variant_a = variant_a
        self.variant_b = variant_b if tree_b is not None else None
        self.id_algorithm = id_algorithm
        self.id_prefix = id_prefix
        self.id_length = id_length
        self.leaf_policy = leaf_policy
        self.context = context if context is not None else MergeContext()

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge_key(
        self, key: str, ids_a: list[str], ids_b: list[str] | None = None
    ) -> str:
        """Materialize the merged node for *key* and return its id.

        *ids_a* / *ids_b* are the source nodes carrying *key* in each tree
        (either may be empty). A key already merged in this run returns
        the existing id.
        """
        ctx = self.context
        if key in ctx.ids:
            return ctx.ids[key]
        if key in ctx.expanding:
            raise CycleError(key, list(ctx.expanding))

        nodes_a = [self.tree_a.nodes[i] for i in ids_a]
        nodes_b: list[SourceNode] = []
        if self.tree_b is not None and ids_b:
            nodes_b = [self.tree_b.nodes[i] for i in ids_b]
        if not nodes_a and not nodes_b:
            raise StructuralError(f"no source node for path {key!r}")

        is_leaf = self._is_leaf(nodes_a + nodes_b)
        variants, content = self._variant_tags(key, is_leaf, nodes_a, nodes_b)

        # A's children first, then B-only children, deduplicated by key
        groups_a = self._child_groups(self.tree_a, nodes_a)
        groups_b = self._child_groups(self.tree_b, nodes_b) if nodes_b else {}
        child_keys = list(groups_a) + [k for k in groups_b if k not in groups_a]

        ctx.expanding.append(key)
        try:
            children = tuple(
                self.merge_key(ck, groups_a.get(ck, []), groups_b.get(ck, []))
                for ck in child_keys
            )
        finally:
            ctx.expanding.pop()

        node_id = merged_id(key, self.id_algorithm, self.id_prefix, self.id_length)
        if node_id in ctx.nodes:
            raise StructuralError(f"merged id collision for {node_id} at {key!r}")

        title = next((n.title for n in nodes_a + nodes_b if n.title), "")
        ctx.nodes[node_id] = MergedNode(
            id=node_id,
            title=title,
            variants=variants,
            children=children,
            is_leaf=is_leaf,
            content=content,
        )
        ctx.ids[key] = node_id
        return node_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_leaf(self, candidates: list[SourceNode]) -> bool:
        flags = [n.is_leaf for n in candidates]
        if self.leaf_policy == "strict":
            return bool(flags) and all(flags)
        # A leaf in either variant wins over an internal node in the other
        return any(flags)

    def _variant_tags(
        self,
        key: str,
        is_leaf: bool,
        nodes_a: list[SourceNode],
        nodes_b: list[SourceNode],
    ) -> tuple[tuple[str, ...], dict[str, ContentReference] | None]:
        leaf = self.availability.get(key)
        if is_leaf and leaf is not None:
            return leaf.variants, dict(leaf.content)
        present: list[str] = []
        if nodes_a:
            present.append(self.variant_a)
        if nodes_b and self.variant_b is not None:
            present.append(self.variant_b)
        return tuple(present), None

    @staticmethod
    def _child_groups(
        tree: SourceTree | None, parents: list[SourceNode]
    ) -> dict[str, list[str]]:
        """Ordered child path key -> source child ids, across all *parents*."""
        groups: dict[str, list[str]] = {}
        if tree is None:
            return groups
        for parent in parents:
            for cid in parent.children:
                if cid not in tree.nodes:
                    logger.debug("child %s missing from node table, skipping", cid)
                    continue
                ids = groups.setdefault(build_path_key(cid, tree), [])
                if cid not in ids:
                    ids.append(cid)
        return groups
