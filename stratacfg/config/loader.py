# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Loading of configuration layers from YAML files.

A configuration directory holds the base tree, one overlay per environment
and, optionally, the list of required paths:

    config/
        base.yaml                  # required; mapping root
        environments/
            development.yaml       # optional overlays, named by environment
            staging.yaml
            production.yaml
        required.yaml              # optional; list of dot-paths

Environment Interpolation
-------------------------
String values may reference environment variables:

  - ``${NAME}``: value of NAME, or null when unset
  - ``${NAME:-fallback}``: value of NAME, or the fallback literal

Values are taken from an EnvironmentSnapshot, never from os.environ
directly. When a string consists of a single placeholder, the substituted
text is coerced to int, float or bool (``true``/``false``) when it parses
as one, so ``port: ${PORT:-3000}`` yields the integer 3000.

Error Handling
--------------
- ConfigError: Missing directory or base file, YAML parse errors, empty base
- StructuralError: A file whose root has the wrong shape
- All errors are chained with "from err"

Example:
    ```python
    from pathlib import Path
    from stratacfg.config import load_config_dir
    from stratacfg.environment import EnvironmentSnapshot
    from stratacfg.resolver import resolve

    sources = load_config_dir(Path("config"), EnvironmentSnapshot.from_os())
    cfg = resolve(sources.base, sources.overlays, "staging")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
from typing import Any

import yaml

from stratacfg.environment import EnvironmentSnapshot
from stratacfg.exceptions import ConfigError, StructuralError
from stratacfg.logging import get_global_logger

__all__ = ["ConfigSources", "interpolate", "load_config_dir"]

BASE_FILE = "base.yaml"
ENVIRONMENTS_DIR = "environments"
REQUIRED_FILE = "required.yaml"

_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class ConfigSources:
    """Layers read from a configuration directory.

    Attributes:
        root: The configuration directory.
        base: Base tree.
        overlays: Overlay trees keyed by environment name.
        required_paths: Paths from required.yaml, or None if absent.
    """

    root: Path
    base: dict[str, Any]
    overlays: dict[str, dict[str, Any]]
    required_paths: tuple[str, ...] | None


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Loads a YAML file and returns the parsed Python object.

    Raises:
        ConfigError: When the file does not exist or is not valid YAML.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err


def _print_yaml_content(data: Any, indent: int = 0) -> None:
    """Log YAML content line by line at debug level."""
    logger = get_global_logger()
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", " " * indent + line)


# -------------------------------
# Interpolation
# -------------------------------


def _coerce(text: str) -> Any:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            continue
    return text


def _interpolate_string(value: str, snapshot: EnvironmentSnapshot) -> Any:
    whole = _PLACEHOLDER_RE.fullmatch(value)
    if whole:
        name, fallback = whole.group(1), whole.group(2)
        resolved = snapshot.get_str(name, fallback)
        return None if resolved is None else _coerce(resolved)

    def _replace(match: re.Match[str]) -> str:
        return snapshot.get_str(match.group(1), match.group(2) or "") or ""

    return _PLACEHOLDER_RE.sub(_replace, value)


def interpolate(data: Any, snapshot: EnvironmentSnapshot) -> Any:
    """Replace ``${NAME}`` placeholders throughout a parsed YAML tree.

    Returns a new tree; data is not mutated.
    """
    if isinstance(data, dict):
        return {k: interpolate(v, snapshot) for k, v in data.items()}
    if isinstance(data, list):
        return [interpolate(v, snapshot) for v in data]
    if isinstance(data, str):
        return _interpolate_string(data, snapshot)
    return data


# -------------------------------
# Layer loading
# -------------------------------


def _load_mapping(p: Path, snapshot: EnvironmentSnapshot, *, allow_empty: bool) -> dict[str, Any]:
    data = _load_yaml_file(p)
    if data is None:
        if allow_empty:
            return {}
        raise ConfigError(f"YAML file is empty: {p}")
    if not isinstance(data, dict):
        raise StructuralError(f"top-level YAML must be a mapping (dict): {p}")
    return interpolate(data, snapshot)


def _load_required(p: Path) -> tuple[str, ...]:
    data = _load_yaml_file(p)
    if data is None:
        return ()
    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        raise StructuralError(f"{p.name} must be a list of dot-paths: {p}")
    return tuple(data)


def load_config_dir(
    config_dir: Path, snapshot: EnvironmentSnapshot | None = None
) -> ConfigSources:
    """Load base, overlays and required paths from a configuration directory.

    Args:
        config_dir: Directory containing base.yaml.
        snapshot: Environment values for interpolation. Defaults to an
            empty snapshot, so every placeholder takes its fallback.

    Returns:
        The loaded layers, interpolated and ready for resolve().

    Raises:
        ConfigError: If the directory or base.yaml is missing, base.yaml is
            empty, or a file is not valid YAML.
        StructuralError: If a file's root has the wrong shape.
    """
    logger = get_global_logger()
    snapshot = snapshot if snapshot is not None else EnvironmentSnapshot()
    config_dir = config_dir.resolve()

    if not config_dir.is_dir():
        raise ConfigError(f"configuration directory not found: {config_dir}")

    # 1) Base layer
    base_path = config_dir / BASE_FILE
    logger.verbose("CONFIG", f"Loading: {BASE_FILE}")
    base = _load_mapping(base_path, snapshot, allow_empty=False)
    logger.debug("CONFIG", f"--- Content from {BASE_FILE} ---")
    _print_yaml_content(base)

    # 2) Environment overlays
    overlays: dict[str, dict[str, Any]] = {}
    env_dir = config_dir / ENVIRONMENTS_DIR
    if env_dir.is_dir():
        candidates = sorted(
            p for p in env_dir.iterdir() if p.suffix.lower() in {".yaml", ".yml"}
        )
        for p in candidates:
            logger.verbose("CONFIG", f"Loading: {ENVIRONMENTS_DIR}/{p.name}")
            overlays[p.stem.lower()] = _load_mapping(p, snapshot, allow_empty=True)

    # 3) Required paths
    required_paths = None
    required_path = config_dir / REQUIRED_FILE
    if required_path.exists():
        required_paths = _load_required(required_path)
        logger.verbose(
            "CONFIG", f"Loaded {len(required_paths)} required path(s)"
        )

    logger.verbose(
        "CONFIG",
        f"Found {len(overlays)} overlay(s): {', '.join(overlays) or 'none'}",
    )
    return ConfigSources(
        root=config_dir,
        base=base,
        overlays=overlays,
        required_paths=required_paths,
    )
