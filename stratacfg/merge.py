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

"""Deep merging of configuration layers.

Merge behavior ("override wins"):

- **Mappings**: Merged recursively, key by key
- **Sequences**: Replaced entirely (NOT appended or merged by index)
- **Scalars and None**: Overwritten
- **Type mismatches**: Not an error; the override value replaces the base

Inputs are never mutated and a new dict is returned at every level that was
merged. Keys that only exist in the base are carried over unchanged.

A mapping that contains itself on the current merge path raises
StructuralError instead of recursing without bound.

Example:
    ```python
    from stratacfg.merge import deep_merge, merge_layers

    deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 9}})
    # {"a": {"x": 1, "y": 9}}

    deep_merge({"m": ["GET"]}, {"m": ["GET", "POST"]})
    # {"m": ["GET", "POST"]}

    merge_layers(base, staging_overlay, local_overrides)
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from stratacfg.exceptions import StructuralError
from stratacfg.logging import get_global_logger

__all__ = ["deep_merge", "merge_layers"]


def _deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
    active: frozenset[int],
    trail: str,
) -> dict[str, Any]:
    for node in (base, override):
        if id(node) in active:
            raise StructuralError(
                f"Mapping at '{trail or '<root>'}' contains itself"
            )
    active = active | {id(base), id(override)}

    result: dict[str, Any] = dict(base)
    for k, v in override.items():
        current = result.get(k)
        if isinstance(v, Mapping) and isinstance(current, Mapping):
            child = f"{trail}.{k}" if trail else str(k)
            result[k] = _deep_merge(current, v, active, child)
        else:
            # Replace sequences, scalars and type mismatches entirely
            result[k] = v
    return result


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge override onto base with "override wins" semantics.

    Args:
        base: The base mapping.
        override: The mapping whose values take precedence.

    Returns:
        A new dict with the merged contents.

    Raises:
        StructuralError: If either input is not a mapping, or a mapping is
            reached again while it is still being merged.
    """
    if not isinstance(base, Mapping) or not isinstance(override, Mapping):
        raise StructuralError(
            "Deep merge requires mappings at the root, got "
            f"{type(base).__name__} and {type(override).__name__}"
        )
    return _deep_merge(base, override, frozenset(), "")


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge any number of layers, later layers winning.

    Args:
        *layers: Mappings in increasing order of precedence.

    Returns:
        A new dict. Merging zero layers yields an empty dict.
    """
    logger = get_global_logger()
    merged: dict[str, Any] = {}
    for layer in layers:
        merged = deep_merge(merged, layer)
    logger.debug("MERGE", f"Deep merged {len(layers)} layer(s)")
    return merged
