"""Assemble the merged viewer manifest from a merge result."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from manualmerge.config.models import VehicleConfig
from manualmerge.manifest.models import Section, VariantManifest
from manualmerge.merge.engine import MergeResult
from manualmerge.merge.models import ContentReference

Layout = Literal["flat", "namespaced"]


def reference_dict(ref: ContentReference, variant: str, layout: Layout = "flat") -> dict:
    """Serialize a content reference, prefixing filenames by variant when namespaced."""
    data = ref.to_dict()
    if layout == "namespaced":
        for k in ("filename", "htmlFilename"):
            if data[k]:
                data[k] = f"{variant}/{data[k]}"
    return data


def _vehicle(manifest_a: VariantManifest, variants: tuple[str, ...], defaults: VehicleConfig) -> dict:
    v = manifest_a.vehicle
    return {
        "make": v.get("make") or defaults.make,
        "model": v.get("model") or defaults.model,
        "year": v.get("year") or defaults.year,
        "variants": list(variants),
    }


def _sections(
    result: MergeResult,
    metadata: dict[str, Section],
    layout: Layout,
) -> list[dict[str, Any]]:
    sections = []
    for leaf in result.availability.values():
        primary_variant = leaf.variants[0]
        primary = leaf.primary
        refs = {
            code: reference_dict(leaf.content[code], code, layout) for code in leaf.variants
        }
        meta = metadata.get(primary.slug)
        sections.append({
            "id": primary.slug,
            "title": meta.title if meta else "",
            "contentType": meta.content_type if meta else "generic",
            "filename": refs[primary_variant]["filename"],
            "htmlFilename": refs[primary_variant]["htmlFilename"],
            "variantsAvailable": list(leaf.variants),
            "variants": refs,
        })
    return sections


def _tree(result: MergeResult, layout: Layout) -> dict[str, Any]:
    data = result.tree.to_dict()
    if layout == "namespaced":
        for nid, node in result.tree.nodes.items():
            if node.content:
                data["nodes"][nid]["variants"] = {
                    code: reference_dict(ref, code, layout)
                    for code, ref in node.content.items()
                }
    return data


def _timestamp(when: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a ``Z`` suffix, e.g. ``2024-05-01T12:00:00.000Z``."""
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def _sum_counts(a: dict[str, int], b: dict[str, int]) -> dict[str, int]:
    merged = dict(a)
    for k, v in b.items():
        merged[k] = merged.get(k, 0) + v
    return merged


def build_merged_manifest(
    result: MergeResult,
    manifest_a: VariantManifest,
    manifest_b: VariantManifest | None = None,
    *,
    layout: Layout = "flat",
    vehicle: VehicleConfig | None = None,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the merged manifest dict in the viewer's JSON shape.

    Pass *generated_at* to make the output reproducible byte for byte.
    """
    vehicle = vehicle or VehicleConfig()
    generated_at = generated_at or datetime.now(timezone.utc)

    # Section metadata by slug, A's entries taking precedence
    metadata: dict[str, Section] = {}
    if manifest_b is not None:
        metadata.update(manifest_b.section_by_slug())
    metadata.update(manifest_a.section_by_slug())

    toc_id_to_slug = dict(manifest_a.toc_id_to_slug)
    stats = dict(manifest_a.content_type_stats)
    refs_a = manifest_a.references
    refs_b = manifest_b.references if manifest_b is not None else None
    if manifest_b is not None:
        toc_id_to_slug.update(manifest_b.toc_id_to_slug)
        stats = _sum_counts(stats, manifest_b.content_type_stats)

    references = {
        "toolsCount": refs_a.tools_count + (refs_b.tools_count if refs_b else 0),
        "torqueValuesCount": refs_a.torque_values_count
        + (refs_b.torque_values_count if refs_b else 0),
        # Pictograms and glossary come from one shared catalogue
        "pictogramsCount": max(refs_a.pictograms_count, refs_b.pictograms_count if refs_b else 0),
        "glossaryTermsCount": max(
            refs_a.glossary_terms_count, refs_b.glossary_terms_count if refs_b else 0
        ),
    }

    return {
        "vehicle": _vehicle(manifest_a, result.variants, vehicle),
        "generatedAt": _timestamp(generated_at),
        "sections": _sections(result, metadata, layout),
        "tree": _tree(result, layout),
        "tocIdToSlug": toc_id_to_slug,
        "contentTypeStats": stats,
        "references": references,
    }
