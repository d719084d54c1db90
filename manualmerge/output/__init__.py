from .builder import build_merged_manifest, reference_dict
from .copier import ContentCopier, CopyStats
from .writer import ManifestWriter

__all__ = [
    "ContentCopier",
    "CopyStats",
    "ManifestWriter",
    "build_merged_manifest",
    "reference_dict",
]
