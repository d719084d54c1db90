"""Per-variant manifest models and loading."""

from manualmerge.manifest.models import (
    ReferenceCounts,
    Section,
    SourceNode,
    SourceTree,
    VariantManifest,
)
from manualmerge.manifest.reader import ManifestError, load_manifest, manifest_path

__all__ = [
    "ManifestError",
    "ReferenceCounts",
    "Section",
    "SourceNode",
    "SourceTree",
    "VariantManifest",
    "load_manifest",
    "manifest_path",
]
