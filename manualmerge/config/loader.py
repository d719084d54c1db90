"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import MergeToolConfig

PROJECT_CONFIG = Path("manualmerge.yaml")
USER_CONFIG = Path(".manualmerge") / "config.yaml"

# ${VAR} or ${VAR:-fallback}
_ENV_REF_RE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def load_config(cli_path: str | None = None) -> MergeToolConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults.

    An explicit *cli_path* must exist. The first file found that holds a
    non-empty mapping wins; an empty file falls through to the next one.
    """
    for path in _candidate_paths(cli_path):
        raw = _read_yaml(path)
        if raw is None:
            continue
        try:
            return MergeToolConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return MergeToolConfig()


def _candidate_paths(cli_path: str | None) -> list[Path]:
    if cli_path:
        explicit = Path(cli_path)
        if not explicit.is_file():
            raise ValueError(f"Config file not found: {cli_path}")
        return [explicit]
    return [p for p in (PROJECT_CONFIG, Path.home() / USER_CONFIG) if p.is_file()]


def _read_yaml(path: Path) -> dict[str, Any] | None:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping")
    return raw


def _expand_env_vars(obj: Any) -> Any:
    """Expand ${VAR} and ${VAR:-fallback} in every string of a parsed config."""
    if isinstance(obj, str):
        return _ENV_REF_RE.sub(lambda m: os.environ.get(m.group(1)) or m.group(2) or "", obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `manualmerge config init`
DEFAULT_CONFIG_TEMPLATE = """\
# manualmerge.yaml

# Variant codes (A is the primary variant, B is optional at run time)
variants:
  a: "Z20LET"
  b: "Z22SE"

# Merge engine
merge:
  id_algorithm: "md5"          # md5 | sha1 | sha256
  id_prefix: "m_"
  id_length: 12
  leaf_policy: "union"         # union | strict

# Output
output:
  directory: "${MANUALMERGE_OUTPUT:-viewer/public/data}"
  copy_content: true
  layout: "flat"               # flat | namespaced
  indent: 2

# Vehicle defaults when the primary manifest omits them
vehicle:
  make: "Vauxhall"
  model: "SPEEDSTER"
  year: "2003"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
