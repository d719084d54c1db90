"""Leaf collection per variant and the cross-variant leaf availability map."""

from __future__ import annotations

import logging

from manualmerge.manifest.models import Section, VariantManifest
from manualmerge.merge.models import ContentReference, LeafAvailability, LeafRecord
from manualmerge.merge.pathkey import build_path_key

logger = logging.getLogger(__name__)


def _resolve_content(
    manifest: VariantManifest, sections: dict[str, Section], node_id: str
) -> ContentReference | None:
    slug = manifest.toc_id_to_slug.get(node_id)
    if not slug:
        return None
    section = sections.get(slug)
    if section is None:
        # Transform listed the slug but not the section; assume its default filenames
        return ContentReference(
            slug=slug, filename=f"{slug}.json", html_filename=f"{slug}.html"
        )
    return ContentReference(
        slug=slug, filename=section.filename, html_filename=section.html_filename
    )


def collect_leaves(manifest: VariantManifest, variant: str) -> dict[str, LeafRecord]:
    """Map each leaf's path key to its record for one variant.

    Leaves whose content cannot be resolved are skipped rather than
    failing the merge. If two leaves share a path key the first wins.
    """
    tree = manifest.tree
    sections = manifest.section_by_slug()
    leaves: dict[str, LeafRecord] = {}
    skipped = 0
    for node_id, node in tree.nodes.items():
        if not node.is_leaf:
            continue
        content = _resolve_content(manifest, sections, node_id)
        if content is None:
            skipped += 1
            logger.debug("%s: leaf %s has no content slug, skipping", variant, node_id)
            continue
        key = build_path_key(node_id, tree)
        if key in leaves:
            logger.debug("%s: duplicate leaf path for %s, keeping first", variant, node_id)
            continue
        leaves[key] = LeafRecord(
            path_key=key,
            variant=variant,
            content=content,
            node_id=node_id,
            title=node.title,
        )
    logger.info("%s: %d leaves collected, %d without content", variant, len(leaves), skipped)
    return leaves


def map_leaves(
    variant_a: str,
    leaves_a: dict[str, LeafRecord],
    variant_b: str | None = None,
    leaves_b: dict[str, LeafRecord] | None = None,
) -> dict[str, LeafAvailability]:
    """Combine both variants' leaves into one availability map.

    Keys follow A's order, then B-only keys in B's order. When a leaf is
    in both variants, A is always listed first.
    """
    leaves_b = leaves_b or {}
    mapping: dict[str, LeafAvailability] = {}

    for key, rec_a in leaves_a.items():
        rec_b = leaves_b.get(key)
        if rec_b is not None and variant_b is not None:
            mapping[key] = LeafAvailability(
                variants=(variant_a, variant_b),
                content={variant_a: rec_a.content, variant_b: rec_b.content},
            )
        else:
            mapping[key] = LeafAvailability(
                variants=(variant_a,), content={variant_a: rec_a.content}
            )

    if variant_b is not None:
        for key, rec_b in leaves_b.items():
            if key in mapping:
                continue
            mapping[key] = LeafAvailability(
                variants=(variant_b,), content={variant_b: rec_b.content}
            )

    return mapping
