"""manualmerge - unify two variant service-manual hierarchies into one manifest."""

from manualmerge.config import MergeToolConfig, load_config
from manualmerge.manifest import ManifestError, VariantManifest, load_manifest
from manualmerge.merge import (
    CycleError,
    MergedNode,
    MergedTree,
    MergeError,
    MergeResult,
    StructuralError,
    merge_manifests,
)
from manualmerge.output import ContentCopier, ManifestWriter, build_merged_manifest

__version__ = "0.1.0"

__all__ = [
    "ContentCopier",
    "CycleError",
    "ManifestError",
    "ManifestWriter",
    "MergeError",
    "MergeResult",
    "MergeToolConfig",
    "MergedNode",
    "MergedTree",
    "StructuralError",
    "VariantManifest",
    "build_merged_manifest",
    "load_config",
    "load_manifest",
    "merge_manifests",
]
