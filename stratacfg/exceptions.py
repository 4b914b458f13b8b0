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

"""Exception hierarchy for stratacfg.

This module defines the exceptions raised while building, resolving and
validating configuration trees:

- ConfigError: Unreadable or invalid configuration sources (YAML parse
  errors, missing files, missing integration sections)
- StructuralError: Malformed trees (self-referencing mappings, bad rollout
  stages or durations, non-mapping roots)
- ValidationError: One or more required paths are missing after resolution

All exceptions inherit from StrataError, so callers can catch every
stratacfg error with a single except clause.

Lookups never raise. A missing path is reported as ABSENT and an unknown
feature flag is reported as disabled; only loading, structural checks and
required-path validation surface exceptions.

Example:
    Halting startup on missing settings:
        ```python
        from stratacfg.core import bootstrap
        from stratacfg.exceptions import ValidationError

        try:
            cfg = bootstrap(env="production")
        except ValidationError as e:
            print(f"Cannot start: {e}")
            for path in e.missing:
                print(f"  - {path}")
        ```
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "StrataError",
    "ConfigError",
    "StructuralError",
    "ValidationError",
]


class StrataError(Exception):
    """Base exception for all stratacfg errors."""

    pass


class ConfigError(StrataError):
    """Raised for configuration source errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, empty base file)
    - Missing configuration directories or base files
    - Missing integration or typed sections requested by a caller
    """

    pass


class StructuralError(ConfigError):
    """Raised when a configuration tree is malformed.

    Covers mappings that contain themselves (directly or through a child),
    roots that are not mappings, and rollout stages whose percentage or
    duration cannot be interpreted.
    """

    pass


class ValidationError(ConfigError):
    """Raised when required configuration paths are missing.

    Every missing path is collected before this is raised, so a single
    failure lists all problems at once.

    Attributes:
        missing: Dot-paths that were absent or falsy, in the order checked.
    """

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing required configuration: {', '.join(self.missing)}"
        )
