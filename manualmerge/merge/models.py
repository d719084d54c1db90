"""Data models and errors for the variant merge engine."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

PATH_SEPARATOR = "\n"


class MergeError(Exception):
    """Base class for merge engine failures."""


class StructuralError(MergeError):
    """The merged structure would not be a forest."""


class CycleError(StructuralError):
    """A path key or ancestor chain leads back to itself."""

    def __init__(self, key: str, chain: list[str] | None = None) -> None:
        self.key = key
        self.chain = chain or []
        shown = " > ".join(key.split(PATH_SEPARATOR))
        super().__init__(f"cycle detected at {shown!r}")


def merged_id(
    path_key: str,
    algorithm: str = "md5",
    prefix: str = "m_",
    length: int = 12,
) -> str:
    """Deterministic merged-node id: a truncated hex digest of the path key."""
    digest = hashlib.new(algorithm, path_key.encode("utf-8"), usedforsecurity=False)
    return prefix + digest.hexdigest()[:length]


@dataclass(frozen=True)
class ContentReference:
    """Where one variant's rendered content for a leaf lives."""

    slug: str
    filename: str | None = None
    html_filename: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "slug": self.slug,
            "filename": self.filename,
            "htmlFilename": self.html_filename,
        }


@dataclass(frozen=True)
class LeafRecord:
    path_key: str
    variant: str
    content: ContentReference
    node_id: str
    title: str = ""


@dataclass(frozen=True)
class LeafAvailability:
    """Which variants carry a leaf path, and each variant's content reference."""

    variants: tuple[str, ...]
    content: dict[str, ContentReference] = field(default_factory=dict, hash=False)

    @property
    def primary(self) -> ContentReference:
        return self.content[self.variants[0]]


@dataclass(frozen=True)
class MergedNode:
    """One node of the unified hierarchy, shared by every variant that has it."""

    id: str
    title: str
    variants: tuple[str, ...]
    children: tuple[str, ...] = ()
    is_leaf: bool = False
    parent_id: str | None = None
    content: dict[str, ContentReference] | None = field(default=None, hash=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("merged node id cannot be empty")
        if self.id in self.children:
            raise CycleError(self.title)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "variantsAvailable": list(self.variants),
            "parentId": self.parent_id,
            "children": list(self.children),
            "isLeaf": self.is_leaf,
        }
        if self.content:
            data["variants"] = {
                code: ref.to_dict() for code, ref in self.content.items()
            }
        return data


@dataclass
class MergedTree:
    """A forest of merged nodes with ordered roots."""

    roots: tuple[str, ...]
    nodes: dict[str, MergedNode]
    variants: tuple[str, ...] = ()

    def walk(self) -> Iterator[MergedNode]:
        """Depth-first, pre-order, following root then child order."""
        stack = [self.nodes[r] for r in reversed(self.roots)]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(self.nodes[c] for c in reversed(node.children))

    def leaves(self) -> list[MergedNode]:
        return [n for n in self.walk() if n.is_leaf]

    def find(self, *titles: str) -> MergedNode | None:
        """Look a node up by its title path from a root."""
        candidates = self.roots
        node: MergedNode | None = None
        for title in titles:
            node = next(
                (self.nodes[c] for c in candidates if self.nodes[c].title == title),
                None,
            )
            if node is None:
                return None
            candidates = node.children
        return node

    def to_dict(self) -> dict[str, Any]:
        return {
            "roots": list(self.roots),
            "nodes": {nid: n.to_dict() for nid, n in self.nodes.items()},
        }
