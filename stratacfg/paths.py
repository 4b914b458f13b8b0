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

"""Dot-path access into nested configuration mappings.

A dot-path such as ``"apis.govwin.timeout"`` names a value by successive
mapping lookups. Lookups never raise: when a segment is missing, or when an
intermediate value is not a mapping, the result is the ``ABSENT`` sentinel.
Absence is an ordinary outcome (validation checks optional keys all the
time), so callers compose lookups with defaults instead of try/except.

``ABSENT`` is distinct from ``None``: an explicit ``null`` in a
configuration file resolves to ``None``, a missing key resolves to
``ABSENT``.

Example:
    ```python
    from stratacfg.paths import ABSENT, get_path

    tree = {"server": {"port": 3000}}
    get_path(tree, "server.port")            # 3000
    get_path(tree, "server.port.value")      # ABSENT
    get_path(tree, "missing", default=8080)  # 8080
    get_path(tree, "") is tree               # True
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = ["ABSENT", "is_absent", "split_path", "get_path"]


class _Absent:
    """Sentinel type for a lookup that found nothing."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


def is_absent(value: Any) -> bool:
    """Return True if value is the ABSENT sentinel."""
    return value is ABSENT


def split_path(path: str) -> list[str]:
    """Split a dot-path into its segments.

    The empty path has no segments and refers to the root itself.
    """
    if not path:
        return []
    return path.split(".")


def get_path(root: Any, path: str, default: Any = ABSENT) -> Any:
    """Resolve a dot-path against a nested mapping.

    Args:
        root: The mapping to start from.
        path: Dot-separated key path. The empty string returns root.
        default: Value returned when the path does not resolve.
            Default is ABSENT.

    Returns:
        The value at path, or default if any segment is missing or an
        intermediate value is not a mapping.
    """
    current = root
    for segment in split_path(path):
        if not isinstance(current, Mapping):
            return default
        if segment not in current:
            return default
        current = current[segment]
    return current
