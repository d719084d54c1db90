"""ManifestWriter: writes the merged manifest to disk in one atomic step."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from manualmerge.manifest.reader import MANIFEST_NAME

logger = logging.getLogger(__name__)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class ManifestWriter:
    """Serializes a merged manifest to ``<output_dir>/manifest.json``.

    The JSON goes to a temporary file beside the target first and is
    moved into place with ``os.replace``, so readers never see a
    partially written manifest.
    """

    def __init__(self, output_dir: Path, indent: int = 2) -> None:
        self.output_dir = Path(output_dir)
        self.indent = indent

    @property
    def target(self) -> Path:
        return self.output_dir / MANIFEST_NAME

    def dumps(self, manifest: dict[str, Any]) -> str:
        return json.dumps(manifest, indent=self.indent, ensure_ascii=False)

    def write(self, manifest: dict[str, Any], *, dry_run: bool = False) -> Path:
        """Write *manifest* and return the path of the written (or would-be) file."""
        dest = self.target
        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        payload = self.dumps(manifest)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=".manifest-", suffix=".json", dir=self.output_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            # mkstemp creates 0600; publish with the usual umask-derived mode
            os.chmod(tmp_name, 0o666 & ~_current_umask())
            os.replace(tmp_name, dest)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Wrote %s (%d bytes)", dest, len(payload.encode("utf-8")))
        return dest
