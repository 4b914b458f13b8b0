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

"""Environment-variable snapshot and environment-name selection.

Process environment variables are read exactly once into an immutable
EnvironmentSnapshot. Everything that builds a configuration tree takes the
snapshot as an argument, so tree construction is a pure function of it and
tests never need to touch os.environ.

Typed lookups mirror how settings are read from the environment: a missing
variable, an empty value, or a value that does not parse as the requested
type falls back to the supplied literal. Unparsable values are reported
through the logger as warnings.

Example:
    ```python
    from stratacfg.environment import EnvironmentSnapshot

    snapshot = EnvironmentSnapshot.from_os()
    port = snapshot.get_int("PORT", 3000)
    model = snapshot.get_str("OPENAI_MODEL", "gpt-4")
    web = snapshot.get_bool("WEB_INTERFACE", False)
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import os
from pathlib import Path
from types import MappingProxyType

from dotenv import dotenv_values

from stratacfg.exceptions import ConfigError
from stratacfg.logging import get_global_logger

__all__ = [
    "DEVELOPMENT",
    "STAGING",
    "PRODUCTION",
    "TEST",
    "KNOWN_ENVIRONMENTS",
    "ENV_NAME_VARIABLES",
    "EnvironmentSnapshot",
    "active_environment",
]

DEVELOPMENT = "development"
STAGING = "staging"
PRODUCTION = "production"
TEST = "test"

KNOWN_ENVIRONMENTS = (DEVELOPMENT, STAGING, PRODUCTION, TEST)

# Checked in order; the first non-empty value names the active environment.
ENV_NAME_VARIABLES = ("STRATA_ENV", "APP_ENV", "NODE_ENV")

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Immutable copy of environment variables taken at one point in time.

    Attributes:
        values: Read-only mapping of variable name to raw string value.
    """

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def from_os(cls, env_file: str | Path | None = None) -> EnvironmentSnapshot:
        """Capture the current process environment.

        Args:
            env_file: Optional .env file. Its values fill in variables the
                process environment does not set.

        Raises:
            ConfigError: If env_file is given but does not exist.
        """
        values: dict[str, str] = {}
        if env_file is not None:
            path = Path(env_file)
            if not path.is_file():
                raise ConfigError(f"env file not found: {path}")
            # Keys without a value (bare "NAME") load as None
            values.update(
                {k: v for k, v in dotenv_values(path).items() if v is not None}
            )
            get_global_logger().verbose(
                "ENV", f"Loaded {len(values)} value(s) from {path}"
            )
        values.update(os.environ)
        return cls(values)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def get_str(self, name: str, default: str | None = None) -> str | None:
        """Return the raw value, or default if unset or empty."""
        raw = self.values.get(name)
        if raw is None or raw == "":
            return default
        return raw

    def get_int(self, name: str, default: int) -> int:
        """Return the value parsed as an int, or default."""
        raw = self.get_str(name)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            get_global_logger().warning(
                "ENV", f"{name}={raw!r} is not an integer; using {default}"
            )
            return default

    def get_float(self, name: str, default: float) -> float:
        """Return the value parsed as a float, or default."""
        raw = self.get_str(name)
        if raw is None:
            return default
        try:
            return float(raw.strip())
        except ValueError:
            get_global_logger().warning(
                "ENV", f"{name}={raw!r} is not a number; using {default}"
            )
            return default

    def get_bool(self, name: str, default: bool) -> bool:
        """Return the value parsed as a boolean, or default.

        Accepts 1/0, true/false, yes/no and on/off (case-insensitive).
        """
        raw = self.get_str(name)
        if raw is None:
            return default
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        get_global_logger().warning(
            "ENV", f"{name}={raw!r} is not a boolean; using {default}"
        )
        return default

    def get_list(self, name: str, default: list[str]) -> list[str]:
        """Return a comma-separated value split into stripped items."""
        raw = self.get_str(name)
        if raw is None:
            return list(default)
        return [item.strip() for item in raw.split(",") if item.strip()]


def active_environment(
    snapshot: EnvironmentSnapshot, default: str = DEVELOPMENT
) -> str:
    """Determine the active environment name from a snapshot.

    Checks STRATA_ENV, APP_ENV and NODE_ENV in that order. The name is
    returned lower-cased and stripped; unknown names are returned as-is
    (they resolve to "no overlay" later, not to an error).

    Args:
        snapshot: Environment snapshot to read from.
        default: Name used when none of the variables is set.

    Returns:
        The active environment name.
    """
    for variable in ENV_NAME_VARIABLES:
        value = snapshot.get_str(variable)
        if value and value.strip():
            return value.strip().lower()
    return default
