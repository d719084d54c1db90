"""Shared test fixtures for manualmerge."""

import itertools
import json
import logging
from pathlib import Path

import pytest

from manualmerge.config.models import MergeToolConfig
from manualmerge.manifest.models import VariantManifest

# Outline items are (title, children) for internal nodes and
# (title, slug) for leaves; a None slug is a leaf with no content.
ENGINE_A_OUTLINE = [
    ("Body", [
        ("Doors", [("Door Trim", "door-trim-a")]),
        ("Paint", "paint-a"),
    ]),
    ("Engine", [
        ("Oil Filter", "oil-filter-a"),
        ("Turbo Wastegate", "turbo-wastegate"),
        ("Timing Belt", "timing-belt-a"),
    ]),
]

ENGINE_B_OUTLINE = [
    ("Engine", [
        ("Oil Filter", "oil-filter-b"),
        ("Balance Shafts", "balance-shafts"),
        ("Timing Belt", "timing-belt-b"),
    ]),
    ("Electrical", [("Battery", "battery")]),
]


def outline_to_dict(outline: list, prefix: str = "n", vehicle: dict | None = None) -> dict:
    """Build a raw manifest dict, as the content transform writes it."""
    nodes: dict[str, dict] = {}
    toc: dict[str, str] = {}
    sections: list[dict] = []
    counter = itertools.count(1)

    def add(item: tuple, parent_id: str | None) -> str:
        title, body = item
        nid = f"{prefix}{next(counter)}"
        is_leaf = not isinstance(body, list)
        node = {"title": title, "parentId": parent_id, "children": [], "isLeaf": is_leaf}
        nodes[nid] = node
        if is_leaf:
            if body:
                toc[nid] = body
                sections.append({
                    "id": body,
                    "title": title,
                    "contentType": "procedure",
                    "filename": f"{body}.json",
                    "htmlFilename": f"{body}.html",
                })
        else:
            for child in body:
                node["children"].append(add(child, nid))
        return nid

    roots = [add(item, None) for item in outline]
    return {
        "vehicle": vehicle or {"make": "Vauxhall", "model": "VX220", "year": 2003},
        "generatedAt": "2024-01-01T00:00:00Z",
        "sections": sections,
        "tree": {"roots": roots, "nodes": nodes},
        "tocIdToSlug": toc,
        "contentTypeStats": {"procedure": len(sections)},
        "references": {
            "toolsCount": 3,
            "torqueValuesCount": 5,
            "pictogramsCount": 7,
            "glossaryTermsCount": 11,
        },
    }


@pytest.fixture
def make_manifest():
    def _make(outline: list, prefix: str = "n") -> VariantManifest:
        return VariantManifest.model_validate(outline_to_dict(outline, prefix))

    return _make


@pytest.fixture
def engine_a_outline():
    return ENGINE_A_OUTLINE


@pytest.fixture
def engine_b_outline():
    return ENGINE_B_OUTLINE


@pytest.fixture
def manifest_a(make_manifest):
    return make_manifest(ENGINE_A_OUTLINE, prefix="a")


@pytest.fixture
def manifest_b(make_manifest):
    return make_manifest(ENGINE_B_OUTLINE, prefix="b")


@pytest.fixture
def make_variant_dir(tmp_path):
    """Write a viewer data dir (manifest.json plus content files) under tmp_path."""

    def _make(name: str, outline: list, prefix: str, content: dict[str, str] | None = None) -> Path:
        root = tmp_path / name
        (root / "content").mkdir(parents=True)
        (root / "references").mkdir()
        (root / "assets" / "images").mkdir(parents=True)
        (root / "manifest.json").write_text(json.dumps(outline_to_dict(outline, prefix)))
        for filename, text in (content or {}).items():
            (root / "content" / filename).write_text(text)
        (root / "references" / "tools.json").write_text(json.dumps({"tools": [name]}))
        (root / "assets" / "images" / f"{name}.png").write_bytes(b"\x89PNG")
        return root

    return _make


@pytest.fixture
def sample_config():
    return MergeToolConfig()


@pytest.fixture(autouse=True)
def _reset_root_handlers():
    """Drop handlers the CLI installs so they do not outlive a test's streams."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
