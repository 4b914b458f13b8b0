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

"""Core orchestration for stratacfg.

bootstrap() runs the whole startup sequence once:

1. Snapshot the process environment (unless a snapshot is supplied)
2. Pick the active environment (argument > STRATA_ENV > APP_ENV > NODE_ENV
   > "development")
3. Build the base tree and overlays, from the built-in tables or from a
   YAML configuration directory
4. Resolve: deep-merge the active overlay onto the base and freeze it
5. Validate required paths, failing with every missing path listed

The returned ResolvedConfig is meant to be created once at startup and
passed explicitly to whatever needs it. There is no module-level
configuration instance.

Design Principles:

- Every input (environment name, snapshot, layers) is explicit, so tests
  can bootstrap without touching the process environment
- Error handling uses exceptions; the CLI layer formats for display
- A configuration missing required settings never starts in a degraded mode

Example:
    ```python
    from stratacfg.core import bootstrap

    cfg = bootstrap(exit_on_error=True)
    port = cfg.get("app.port")
    ```
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import sys
from typing import Any

from stratacfg.config.loader import load_config_dir
from stratacfg.defaults import DEFAULT_REQUIRED_PATHS, build_base_config, build_overlays
from stratacfg.environment import EnvironmentSnapshot, active_environment
from stratacfg.exceptions import ValidationError
from stratacfg.logging import get_global_logger
from stratacfg.resolver import ResolvedConfig, resolve
from stratacfg.validation import validate_required

__all__ = ["build_layers", "bootstrap"]


def build_layers(
    snapshot: EnvironmentSnapshot, config_dir: Path | None = None
) -> tuple[dict[str, Any], dict[str, dict[str, Any]], tuple[str, ...]]:
    """Build the base tree, overlays and required paths.

    Args:
        snapshot: Environment values read by the tables or placeholders.
        config_dir: YAML configuration directory. When None, the built-in
            tables from stratacfg.defaults are used.

    Returns:
        A tuple (base, overlays, required_paths). For a configuration
            directory without required.yaml, required_paths is empty.
    """
    if config_dir is not None:
        sources = load_config_dir(config_dir, snapshot)
        return sources.base, sources.overlays, sources.required_paths or ()
    return build_base_config(snapshot), build_overlays(snapshot), DEFAULT_REQUIRED_PATHS


def bootstrap(
    *,
    env: str | None = None,
    config_dir: Path | None = None,
    snapshot: EnvironmentSnapshot | None = None,
    env_file: Path | None = None,
    required_paths: Sequence[str] | None = None,
    validate: bool = True,
    exit_on_error: bool = False,
) -> ResolvedConfig:
    """Resolve and validate the configuration for this process.

    Args:
        env: Environment name. Defaults to the one named in the snapshot.
        config_dir: YAML configuration directory. When None, the built-in
            tables from stratacfg.defaults are used.
        snapshot: Environment values. Defaults to a snapshot of os.environ
            taken now.
        env_file: .env file merged under os.environ when the snapshot is
            taken here. Ignored when snapshot is given.
        required_paths: Paths to validate. Defaults to required.yaml from
            config_dir, or DEFAULT_REQUIRED_PATHS for the built-in tables.
        validate: If False, skip required-path validation.
        exit_on_error: If True, a validation failure prints every missing
            path to stderr and raises SystemExit(1).

    Returns:
        The resolved, validated configuration.

    Raises:
        ValidationError: If required paths are missing (and exit_on_error
            is False).
        ConfigError: If configuration files cannot be loaded.
        SystemExit: On validation failure when exit_on_error is True.
    """
    logger = get_global_logger()

    if snapshot is None:
        snapshot = EnvironmentSnapshot.from_os(env_file)
    active_env = env or active_environment(snapshot)

    # 1) Build layers
    logger.step(1, 3, f"Building configuration layers for '{active_env}'...")
    base, overlays, default_required = build_layers(snapshot, config_dir)

    # 2) Resolve
    logger.step(2, 3, "Resolving configuration...")
    resolved = resolve(base, overlays, active_env)

    # 3) Validate
    if validate:
        logger.step(3, 3, "Validating required settings...")
        paths = required_paths if required_paths is not None else default_required
        try:
            validate_required(resolved, paths)
        except ValidationError as err:
            if not exit_on_error:
                raise
            print(f"Error: {err}", file=sys.stderr)
            for path in err.missing:
                print(f"  [X] {path}", file=sys.stderr)
            raise SystemExit(1) from err

    return resolved
