"""Load variant manifests from viewer data directories."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from manualmerge.manifest.models import VariantManifest

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class ManifestError(Exception):
    """A manifest is missing, unparseable, or structurally invalid."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


def manifest_path(directory: Path) -> Path:
    return Path(directory) / MANIFEST_NAME


def load_manifest(directory: Path) -> VariantManifest:
    """Read and validate ``manifest.json`` from a variant data directory.

    Only the structural shape is validated; node titles, slugs and
    filenames are taken as given.
    """
    path = manifest_path(directory)
    if not path.is_file():
        raise ManifestError(path, "manifest file not found")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestError(path, f"invalid JSON: {e}") from e
    except OSError as e:
        raise ManifestError(path, f"unreadable: {e}") from e

    if not isinstance(raw, dict):
        raise ManifestError(path, "expected a JSON object at top level")

    try:
        manifest = VariantManifest.model_validate(raw)
    except ValidationError as e:
        raise ManifestError(path, f"invalid manifest structure: {e}") from e

    logger.debug(
        "Loaded %s: %d nodes, %d roots, %d sections",
        path,
        len(manifest.tree.nodes),
        len(manifest.tree.roots),
        len(manifest.sections),
    )
    return manifest
