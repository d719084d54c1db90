"""One-call merge of two variant manifests."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from manualmerge.config.models import MergeConfig
from manualmerge.manifest.models import VariantManifest
from manualmerge.merge.leaves import collect_leaves, map_leaves
from manualmerge.merge.models import LeafAvailability, LeafRecord, MergedTree, merged_id
from manualmerge.merge.roots import merge_trees

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Everything the output stage needs from a merge run."""

    tree: MergedTree
    availability: dict[str, LeafAvailability]
    leaves_a: dict[str, LeafRecord]
    leaves_b: dict[str, LeafRecord]

    @property
    def variants(self) -> tuple[str, ...]:
        return self.tree.variants


def merge_manifests(
    manifest_a: VariantManifest,
    variant_a: str,
    manifest_b: VariantManifest | None = None,
    variant_b: str | None = None,
    config: MergeConfig | None = None,
) -> MergeResult:
    """Collect leaves, map availability, and merge both trees."""
    config = config or MergeConfig()
    if manifest_b is None:
        variant_b = None
        logger.info("Single-variant mode (%s only)", variant_a)
    elif variant_b is None:
        raise ValueError("variant_b is required when manifest_b is given")

    leaves_a = collect_leaves(manifest_a, variant_a)
    leaves_b = collect_leaves(manifest_b, variant_b) if manifest_b is not None else {}
    availability = map_leaves(variant_a, leaves_a, variant_b, leaves_b)

    tree = merge_trees(
        manifest_a.tree,
        availability,
        variant_a,
        manifest_b.tree if manifest_b is not None else None,
        variant_b,
        id_algorithm=config.id_algorithm,
        id_prefix=config.id_prefix,
        id_length=config.id_length,
        leaf_policy=config.leaf_policy,
    )
    return MergeResult(
        tree=tree,
        availability=_merged_leaves_only(availability, tree, config),
        leaves_a=leaves_a,
        leaves_b=leaves_b,
    )


def _merged_leaves_only(
    availability: dict[str, LeafAvailability], tree: MergedTree, config: MergeConfig
) -> dict[str, LeafAvailability]:
    """Drop leaf entries whose merged node came out internal (strict leaf policy)."""
    kept: dict[str, LeafAvailability] = {}
    for key, leaf in availability.items():
        mid = merged_id(key, config.id_algorithm, config.id_prefix, config.id_length)
        node = tree.nodes.get(mid)
        if node is not None and not node.is_leaf:
            logger.debug("%r is internal in the merged tree, no section emitted", key)
            continue
        kept[key] = leaf
    return kept
