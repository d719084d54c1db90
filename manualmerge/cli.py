"""CLI entry point for manualmerge."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from manualmerge.config import MergeToolConfig, load_config
from manualmerge.config.loader import DEFAULT_CONFIG_TEMPLATE
from manualmerge.manifest import ManifestError, VariantManifest, load_manifest
from manualmerge.merge import MergeError, MergeResult, merge_manifests
from manualmerge.output import ContentCopier, ManifestWriter, build_merged_manifest

app = typer.Typer(
    name="manualmerge",
    help="Merge two variant service-manual manifests into one viewer manifest.",
)

config_app = typer.Typer(help="Manage manualmerge configuration.")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

# Global state
_config: MergeToolConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps({
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def _configure_logging(cfg: MergeToolConfig) -> None:
    handler = logging.StreamHandler()
    if cfg.log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


def _get_config() -> MergeToolConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to manualmerge.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _configure_logging(_config)


def _load_inputs(
    variant_a: Path, variant_b: Path | None
) -> tuple[VariantManifest, VariantManifest | None]:
    try:
        manifest_a = load_manifest(variant_a)
        manifest_b = load_manifest(variant_b) if variant_b is not None else None
    except ManifestError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    return manifest_a, manifest_b


def _display_summary(result: MergeResult, manifest: dict[str, Any], dest: Path, dry_run: bool) -> None:
    """Display per-variant leaf counts and merged totals."""
    table = Table(title="Merge Summary")
    table.add_column("Variant", style="cyan")
    table.add_column("Leaves", justify="right")
    table.add_column("Only here", justify="right", style="yellow")

    for code in result.variants:
        total = sum(1 for leaf in result.availability.values() if code in leaf.variants)
        only = sum(1 for leaf in result.availability.values() if leaf.variants == (code,))
        table.add_row(code, str(total), str(only))
    rprint(table)

    rprint(
        f"[bold]Merged:[/bold] {len(manifest['sections'])} sections, "
        f"{len(result.tree.nodes)} tree nodes, {len(result.tree.roots)} roots"
    )
    if dry_run:
        rprint(f"[yellow](dry run)[/yellow] would write {dest}")
    else:
        rprint(f"[green]Output:[/green] {dest}")


@app.command()
def merge(
    variant_a: Annotated[
        Path, typer.Option("--variant-a", "-a", help="Viewer data dir of the primary variant")
    ],
    variant_b: Annotated[
        Path | None, typer.Option("--variant-b", "-b", help="Viewer data dir of the second variant")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output directory")
    ] = None,
    layout: Annotated[
        str | None, typer.Option("--layout", help="Content layout: flat | namespaced")
    ] = None,
    copy_content: Annotated[
        bool | None, typer.Option("--copy/--no-copy", help="Copy content, references and assets")
    ] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Merge without writing anything")] = False,
) -> None:
    """Merge variant manifests into a single multi-variant manifest."""
    cfg = _get_config()
    layout = layout or cfg.output.layout
    if layout not in ("flat", "namespaced"):
        rprint(f"[red]Error:[/red] unknown layout '{escape(layout)}', expected flat or namespaced")
        raise typer.Exit(1)
    do_copy = copy_content if copy_content is not None else cfg.output.copy_content
    out_dir = (output or Path(cfg.output.directory)).resolve()

    manifest_a, manifest_b = _load_inputs(variant_a, variant_b)
    if manifest_b is None:
        rprint(f"[dim]Single-variant mode ({cfg.variants.a} only)[/dim]")

    try:
        result = merge_manifests(
            manifest_a, cfg.variants.a, manifest_b, cfg.variants.b, cfg.merge
        )
    except MergeError as e:
        rprint(f"[red]Error:[/red] merge failed: {escape(str(e))}")
        raise typer.Exit(1)

    manifest = build_merged_manifest(
        result, manifest_a, manifest_b, layout=layout, vehicle=cfg.vehicle
    )

    if do_copy and not dry_run:
        copier = ContentCopier(out_dir, layout=layout)
        copier.ensure_layout()
        copier.copy_variant(variant_a, cfg.variants.a)
        if variant_b is not None:
            copier.copy_variant(variant_b, cfg.variants.b)
        if copier.stats.overwritten:
            rprint(
                f"[yellow]{len(copier.stats.overwritten)} file(s) overwritten by "
                f"{cfg.variants.b}[/yellow] (use --layout namespaced to keep both)"
            )

    dest = ManifestWriter(out_dir, indent=cfg.output.indent).write(manifest, dry_run=dry_run)
    logger.info(
        "Merged: %d sections, %d tree nodes", len(manifest["sections"]), len(result.tree.nodes)
    )
    _display_summary(result, manifest, dest, dry_run)


@app.command()
def show(
    manifest: Annotated[Path, typer.Argument(help="Merged manifest.json or its directory")],
    depth: Annotated[int, typer.Option("--depth", "-d", help="Maximum depth to render")] = 3,
) -> None:
    """Render a merged manifest's hierarchy with variant tags."""
    path = manifest / "manifest.json" if manifest.is_dir() else manifest
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        nodes = data["tree"]["nodes"]
        roots = data["tree"]["roots"]
    except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
        rprint(f"[red]Error:[/red] cannot read merged manifest {path}: {escape(str(e))}")
        raise typer.Exit(1)

    variants = data.get("vehicle", {}).get("variants", [])
    tree = Tree(f"[bold]{escape(str(path))}[/bold] ({', '.join(variants) or 'no variants'})")

    def _label(node: dict) -> str:
        tags = ", ".join(node.get("variantsAvailable", []))
        style = "green" if node.get("isLeaf") else "cyan"
        return f"[{style}]{escape(node.get('title', ''))}[/{style}] [dim]({tags})[/dim]"

    def _add(branch: Tree, node_id: str, level: int) -> None:
        node = nodes.get(node_id)
        if node is None:
            return
        sub = branch.add(_label(node))
        children = node.get("children", [])
        if level >= depth:
            if children:
                sub.add(f"[dim]… {len(children)} more[/dim]")
            return
        for cid in children:
            _add(sub, cid, level + 1)

    for rid in roots:
        _add(tree, rid, 1)
    rprint(tree)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default manualmerge.yaml in current directory."""
    target = Path("manualmerge.yaml")
    if target.exists() and not force:
        rprint("[yellow]manualmerge.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
