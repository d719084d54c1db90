"""Tests for the manualmerge CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from manualmerge.cli import app
from manualmerge.merge import merged_id

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Keep project-local and user-global config files out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def variant_dirs(make_variant_dir, engine_a_outline, engine_b_outline):
    dir_a = make_variant_dir("z20let", engine_a_outline, "a", {"oil-filter-a.json": "{}"})
    dir_b = make_variant_dir("z22se", engine_b_outline, "b", {"oil-filter-b.json": "{}"})
    return dir_a, dir_b


# ── manualmerge merge ────────────────────────────────────────────────


def test_merge_two_variants(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    out = tmp_path / "merged"
    result = runner.invoke(
        app, ["merge", "--variant-a", str(dir_a), "--variant-b", str(dir_b), "--output", str(out)]
    )
    assert result.exit_code == 0, result.output
    assert "Merge Summary" in result.output

    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["vehicle"]["variants"] == ["Z20LET", "Z22SE"]
    roots = [manifest["tree"]["nodes"][r]["title"] for r in manifest["tree"]["roots"]]
    assert roots == ["Body", "Engine", "Electrical"]
    oil = manifest["tree"]["nodes"][merged_id("Engine\nOil Filter")]
    assert oil["variantsAvailable"] == ["Z20LET", "Z22SE"]

    assert (out / "content" / "oil-filter-a.json").is_file()
    assert (out / "content" / "oil-filter-b.json").is_file()
    assert (out / "assets" / "images" / "z22se.png").is_file()


def test_merge_single_variant(tmp_path: Path, variant_dirs):
    dir_a, _ = variant_dirs
    out = tmp_path / "merged"
    result = runner.invoke(app, ["merge", "-a", str(dir_a), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert "Single-variant mode" in result.output
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["vehicle"]["variants"] == ["Z20LET"]


def test_merge_requires_variant_a():
    result = runner.invoke(app, ["merge"])
    assert result.exit_code != 0


def test_merge_missing_manifest_a(tmp_path: Path):
    result = runner.invoke(app, ["merge", "-a", str(tmp_path / "missing"), "-o", str(tmp_path / "o")])
    assert result.exit_code == 1
    assert "Error" in result.output
    assert not (tmp_path / "o").exists()


def test_merge_missing_manifest_b(tmp_path: Path, variant_dirs):
    dir_a, _ = variant_dirs
    out = tmp_path / "merged"
    result = runner.invoke(
        app, ["merge", "-a", str(dir_a), "-b", str(tmp_path / "missing"), "-o", str(out)]
    )
    assert result.exit_code == 1
    assert not (out / "manifest.json").exists()


def test_merge_dry_run_writes_nothing(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    out = tmp_path / "merged"
    result = runner.invoke(
        app, ["merge", "-a", str(dir_a), "-b", str(dir_b), "-o", str(out), "--dry-run"]
    )
    assert result.exit_code == 0, result.output
    assert "dry run" in result.output
    assert not out.exists()


def test_merge_no_copy(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    out = tmp_path / "merged"
    result = runner.invoke(
        app, ["merge", "-a", str(dir_a), "-b", str(dir_b), "-o", str(out), "--no-copy"]
    )
    assert result.exit_code == 0, result.output
    assert (out / "manifest.json").is_file()
    assert not (out / "content").exists()


def test_merge_namespaced_layout(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    out = tmp_path / "merged"
    result = runner.invoke(
        app,
        ["merge", "-a", str(dir_a), "-b", str(dir_b), "-o", str(out), "--layout", "namespaced"],
    )
    assert result.exit_code == 0, result.output
    assert (out / "content" / "Z20LET" / "oil-filter-a.json").is_file()
    manifest = json.loads((out / "manifest.json").read_text())
    oil = next(s for s in manifest["sections"] if s["id"] == "oil-filter-a")
    assert oil["variants"]["Z22SE"]["filename"] == "Z22SE/oil-filter-b.json"


def test_merge_unknown_layout(tmp_path: Path, variant_dirs):
    dir_a, _ = variant_dirs
    result = runner.invoke(app, ["merge", "-a", str(dir_a), "--layout", "nested"])
    assert result.exit_code == 1


def test_merge_structural_error_exits(tmp_path: Path):
    bad = tmp_path / "bad"
    bad.mkdir()
    (bad / "manifest.json").write_text(json.dumps({
        "tree": {"roots": ["1"], "nodes": {"1": {"title": "Engine", "children": ["1"]}}}
    }))
    out = tmp_path / "merged"
    result = runner.invoke(app, ["merge", "-a", str(bad), "-o", str(out)])
    assert result.exit_code == 1
    assert "cycle" in result.output
    assert not out.exists()


def test_merge_tolerates_sections_without_slug(tmp_path: Path):
    src = tmp_path / "gaps"
    src.mkdir()
    (src / "manifest.json").write_text(json.dumps({
        "sections": [{"id": "oil"}, {"id": ""}],
        "tree": {
            "roots": ["1"],
            "nodes": {
                "1": {"title": "Engine", "children": ["2", "3"]},
                "2": {"title": "Oil Filter", "parentId": "1", "isLeaf": True},
                "3": {"title": "Spark Plugs", "parentId": "1", "isLeaf": True},
            },
        },
        "tocIdToSlug": {"2": "oil", "3": None},
    }))
    out = tmp_path / "merged"
    result = runner.invoke(app, ["merge", "-a", str(src), "-o", str(out), "--no-copy"])
    assert result.exit_code == 0, result.output
    manifest = json.loads((out / "manifest.json").read_text())
    assert [s["id"] for s in manifest["sections"]] == ["oil"]


def test_merge_uses_config_variant_codes(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    cfg = tmp_path / "codes.yaml"
    cfg.write_text("variants:\n  a: V6\n  b: V8\n")
    out = tmp_path / "merged"
    result = runner.invoke(
        app, ["--config", str(cfg), "merge", "-a", str(dir_a), "-b", str(dir_b), "-o", str(out)]
    )
    assert result.exit_code == 0, result.output
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["vehicle"]["variants"] == ["V6", "V8"]


def test_invalid_config_exits(tmp_path: Path, variant_dirs):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("merge:\n  leaf_policy: sometimes\n")
    result = runner.invoke(app, ["--config", str(cfg), "merge", "-a", str(variant_dirs[0])])
    assert result.exit_code == 1
    assert "Invalid config" in result.output


# ── manualmerge show ─────────────────────────────────────────────────


def test_show_renders_tree(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    out = tmp_path / "merged"
    runner.invoke(app, ["merge", "-a", str(dir_a), "-b", str(dir_b), "-o", str(out), "--no-copy"])

    result = runner.invoke(app, ["show", str(out)])
    assert result.exit_code == 0, result.output
    assert "Engine" in result.output
    assert "Oil Filter" in result.output
    assert "Z20LET, Z22SE" in result.output


def test_show_depth_limits_output(tmp_path: Path, variant_dirs):
    dir_a, dir_b = variant_dirs
    out = tmp_path / "merged"
    runner.invoke(app, ["merge", "-a", str(dir_a), "-b", str(dir_b), "-o", str(out), "--no-copy"])

    result = runner.invoke(app, ["show", str(out / "manifest.json"), "--depth", "1"])
    assert result.exit_code == 0, result.output
    assert "Oil Filter" not in result.output
    assert "more" in result.output


def test_show_missing_manifest(tmp_path: Path):
    result = runner.invoke(app, ["show", str(tmp_path / "nothing.json")])
    assert result.exit_code == 1


# ── manualmerge config ───────────────────────────────────────────────


def test_config_init_creates_file(tmp_path: Path):
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert (tmp_path / "manualmerge.yaml").is_file()


def test_config_init_refuses_overwrite(tmp_path: Path):
    (tmp_path / "manualmerge.yaml").write_text("log_level: debug\n")
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_config_show(tmp_path: Path):
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "Z20LET" in result.output
