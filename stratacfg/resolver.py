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

"""Environment-aware configuration resolution.

resolve() merges a base tree with the overlay registered for the active
environment and wraps the result in a ResolvedConfig:

1. Look up the overlay for the active environment name
2. Unknown environment names use an empty overlay (base only, not an error)
3. Deep-merge base and overlay (mappings merge, sequences replace)
4. Freeze the merged tree

A ResolvedConfig never changes after construction. Nested mappings are
exposed as read-only views and sequences as tuples, so any number of
readers can share one instance without locking. To pick up different
inputs, resolve again and swap the reference the application holds.

Resolution is deterministic: the same base, overlays and environment name
always produce equal trees (and equal fingerprints).

Example:
    ```python
    from stratacfg.resolver import resolve

    base = {"server": {"port": 3000}, "logging": {"level": "info"}}
    overlays = {"staging": {"logging": {"level": "debug"}}}

    cfg = resolve(base, overlays, "staging")
    cfg.get("server.port")     # 3000
    cfg.get("logging.level")   # "debug"
    cfg.get("missing.path")    # ABSENT
    ```
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import hashlib
import json
from types import MappingProxyType
from typing import Any

from stratacfg.defaults import DEFAULT_CACHE_TTL
from stratacfg.environment import DEVELOPMENT, PRODUCTION, TEST
from stratacfg.exceptions import StructuralError
from stratacfg.features import is_enabled
from stratacfg.logging import get_global_logger
from stratacfg.merge import deep_merge
from stratacfg.paths import ABSENT, get_path

__all__ = ["ResolvedConfig", "freeze", "thaw", "resolve"]


def freeze(value: Any, _active: frozenset[int] = frozenset()) -> Any:
    """Return a read-only deep copy of a configuration value.

    Mappings become MappingProxyType views over fresh dicts, lists and
    tuples become tuples, everything else is returned as-is.

    Raises:
        StructuralError: If a mapping or list contains itself.
    """
    if isinstance(value, (Mapping, list, tuple)):
        if id(value) in _active:
            raise StructuralError("Configuration tree contains a cycle")
        active = _active | {id(value)}
        if isinstance(value, Mapping):
            return MappingProxyType({k: freeze(v, active) for k, v in value.items()})
        return tuple(freeze(v, active) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Return a plain, mutable deep copy (dicts and lists) of a value."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


class ResolvedConfig(Mapping[str, Any]):
    """Immutable, merged configuration for one environment.

    Behaves as a read-only mapping over the top-level sections and adds
    dot-path accessors. Lookups never raise; missing paths return ABSENT.

    Attributes:
        env: Name of the environment this tree was resolved for.
    """

    __slots__ = ("_root", "_env")

    def __init__(self, tree: Mapping[str, Any], env: str = DEVELOPMENT) -> None:
        if not isinstance(tree, Mapping):
            raise StructuralError(
                f"Configuration root must be a mapping, got {type(tree).__name__}"
            )
        object.__setattr__(self, "_root", freeze(tree))
        object.__setattr__(self, "_env", env)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ResolvedConfig is immutable")

    def __getitem__(self, key: str) -> Any:
        return self._root[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._root)

    def __len__(self) -> int:
        return len(self._root)

    def __eq__(self, other: object) -> bool:
        # Structural: tuples and read-only views compare equal to lists and dicts
        if not isinstance(other, Mapping):
            return NotImplemented
        return thaw(self._root) == thaw(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"ResolvedConfig(env={self._env!r}, sections={list(self._root)!r})"

    @property
    def env(self) -> str:
        return self._env

    # -------------------------------
    # Path access
    # -------------------------------

    def get(self, path: str, default: Any = ABSENT) -> Any:
        """Return the value at a dot-path, or default (ABSENT) if missing."""
        return get_path(self._root, path, default)

    def get_api_config(self, service: str) -> Any:
        """Return the ``apis.<service>`` section, or ABSENT."""
        return self.get(f"apis.{service}")

    def get_platform_config(self, platform: str) -> Any:
        """Return the ``platforms.<platform>`` section, or ABSENT."""
        return self.get(f"platforms.{platform}")

    def get_endpoints(self, category: str, integration: str = "govwin") -> Mapping[str, Any]:
        """Return the endpoint table for a category, or an empty mapping."""
        endpoints = self.get(f"integrations.{integration}.endpoints.{category}")
        if not isinstance(endpoints, Mapping):
            return MappingProxyType({})
        return endpoints

    # -------------------------------
    # Derived lookups
    # -------------------------------

    def is_feature_enabled(self, name: str) -> bool:
        """Return whether a feature flag is on. Unknown flags are off."""
        return is_enabled(self.get("featureFlags.flags", {}), name)

    def get_cache_ttl(self, data_type: str, default: int = DEFAULT_CACHE_TTL) -> int:
        """Return the cache TTL (seconds) for a data type.

        Missing, non-integer and zero entries fall back to default.
        """
        ttl = self.get(f"caching.ttl.{data_type}")
        if isinstance(ttl, bool) or not isinstance(ttl, int) or not ttl:
            return default
        return ttl

    def is_development(self) -> bool:
        return self._env == DEVELOPMENT

    def is_production(self) -> bool:
        return self._env == PRODUCTION

    def is_test(self) -> bool:
        return self._env == TEST

    # -------------------------------
    # Export
    # -------------------------------

    def as_mapping(self) -> Mapping[str, Any]:
        """Return the read-only root mapping."""
        return self._root

    def to_dict(self) -> dict[str, Any]:
        """Return a plain, mutable deep copy of the tree."""
        return thaw(self._root)

    def fingerprint(self) -> str:
        """Return a SHA-256 hex digest of the canonical JSON of the tree.

        Structurally equal trees have equal fingerprints regardless of key
        insertion order.
        """
        canonical = json.dumps(
            self.to_dict(),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def resolve(
    base: Mapping[str, Any],
    overlays_by_env: Mapping[str, Mapping[str, Any]],
    active_env: str,
) -> ResolvedConfig:
    """Merge the overlay for active_env onto base.

    Args:
        base: The base configuration tree.
        overlays_by_env: Overlay trees keyed by environment name.
        active_env: Name of the environment to resolve for.

    Returns:
        The frozen, merged configuration.

    Raises:
        StructuralError: If base or the selected overlay is not a mapping,
            or either contains a cycle.
    """
    logger = get_global_logger()

    overlay = overlays_by_env.get(active_env)
    if overlay is None:
        logger.verbose("CONFIG", f"No overlay for '{active_env}'; using base only")
        overlay = {}
    elif not isinstance(overlay, Mapping):
        raise StructuralError(
            f"Overlay for '{active_env}' must be a mapping, got {type(overlay).__name__}"
        )
    else:
        logger.verbose("CONFIG", f"Applying '{active_env}' overlay")

    merged = deep_merge(base, overlay)
    logger.verbose(
        "CONFIG",
        f"Resolved config has {len(merged)} top-level keys: {', '.join(merged)}",
    )
    return ResolvedConfig(merged, env=active_env)
