"""Copy per-variant content, reference and asset files into the output dir."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)


@dataclass
class CopyStats:
    copied: int = 0
    overwritten: list[str] = field(default_factory=list)


class ContentCopier:
    """Copies variant directories into the merged output.

    With the ``flat`` layout a later variant's file replaces an earlier
    one of the same name (logged as a warning). With ``namespaced``,
    content files land in ``content/<VARIANT>/`` so they cannot collide.
    """

    def __init__(
        self, output_dir: Path, layout: Literal["flat", "namespaced"] = "flat"
    ) -> None:
        self.output_dir = Path(output_dir)
        self.layout = layout
        self.stats = CopyStats()
        self._written: dict[Path, str] = {}

    def copy_variant(self, source_dir: Path, variant: str) -> None:
        """Copy content, references and assets from one variant data dir."""
        source_dir = Path(source_dir)
        content_dest = self.output_dir / "content"
        if self.layout == "namespaced":
            content_dest = content_dest / variant
        self._copy_files(source_dir / "content", content_dest, variant)
        self._copy_tree(source_dir / "references", self.output_dir / "references", variant)
        self._copy_tree(source_dir / "assets", self.output_dir / "assets", variant)

    def ensure_layout(self) -> None:
        for sub in ("content", "references", "assets", "assets/images"):
            (self.output_dir / sub).mkdir(parents=True, exist_ok=True)

    def _copy_files(self, src_dir: Path, dest_dir: Path, variant: str) -> None:
        """Copy the regular files directly inside *src_dir* (not subdirectories)."""
        if not src_dir.is_dir():
            return
        dest_dir.mkdir(parents=True, exist_ok=True)
        for src in sorted(src_dir.iterdir()):
            if src.is_file():
                self._copy(src, dest_dir / src.name, variant)

    def _copy_tree(self, src_dir: Path, dest_dir: Path, variant: str) -> None:
        if not src_dir.is_dir():
            return
        dest_dir.mkdir(parents=True, exist_ok=True)
        for src in sorted(src_dir.iterdir()):
            if src.is_file():
                self._copy(src, dest_dir / src.name, variant)
            elif src.is_dir():
                self._copy_tree(src, dest_dir / src.name, variant)

    def _copy(self, src: Path, dest: Path, variant: str) -> None:
        previous = self._written.get(dest)
        if previous is not None and previous != variant:
            logger.warning(
                "%s from %s overwrites the copy from %s", dest, variant, previous
            )
            self.stats.overwritten.append(str(dest.relative_to(self.output_dir)))
        shutil.copy2(src, dest)
        self._written[dest] = variant
        self.stats.copied += 1
