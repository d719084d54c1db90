"""Canonical path keys: the only correspondence between two variant trees."""

from __future__ import annotations

import re

from manualmerge.manifest.models import SourceTree
from manualmerge.merge.models import PATH_SEPARATOR, CycleError

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_title(title: str | None) -> str:
    """Collapse whitespace runs to single spaces and trim. Case is kept."""
    return _WHITESPACE_RE.sub(" ", title or "").strip()


def path_titles(node_id: str, tree: SourceTree) -> list[str]:
    """Normalized titles from the root down to and including *node_id*.

    The walk stops at a node without a parent, or whose parent id is not
    in the tree.
    """
    titles: list[str] = []
    seen: set[str] = set()
    current: str | None = node_id
    while current is not None and current in tree.nodes:
        if current in seen:
            raise CycleError(current, list(seen))
        seen.add(current)
        node = tree.nodes[current]
        titles.append(normalize_title(node.title))
        current = node.parent_id
    titles.reverse()
    return titles


def join_titles(titles: list[str]) -> str:
    return PATH_SEPARATOR.join(titles)


def build_path_key(node_id: str, tree: SourceTree) -> str:
    return join_titles(path_titles(node_id, tree))


def root_key(title: str | None) -> str:
    """Key for a top-level root: its normalized title alone."""
    return normalize_title(title)
