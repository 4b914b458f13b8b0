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

"""Required-path validation for resolved configuration.

Startup validation checks that every required dot-path holds a usable
value. Every path is checked before anything is reported, so one failure
lists all missing settings.

Presence rule:
    A path counts as present only if its value is truthy. ABSENT, None,
    "" and numeric zero all count as missing, and so do empty mappings and
    empty lists. A setting that is legitimately 0 is therefore reported as
    missing; keep zero-valued settings out of the required list.

Validation performs no network or filesystem I/O.

Example:
    ```python
    from stratacfg.validation import validate_required
    from stratacfg.exceptions import ValidationError

    try:
        validate_required(cfg, ["apis.govwin.apiKey", "security.jwtSecret"])
    except ValidationError as err:
        print(err)          # Missing required configuration: apis.govwin.apiKey
        print(err.missing)  # ["apis.govwin.apiKey"]
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from stratacfg.exceptions import ConfigError, ValidationError
from stratacfg.logging import get_global_logger
from stratacfg.paths import get_path
from stratacfg.results import ValidationResult

__all__ = [
    "INTEGRATION_REQUIRED_PATHS",
    "is_present",
    "check_required_paths",
    "validate_required",
    "validate_integration",
]

INTEGRATION_REQUIRED_PATHS = (
    "api.baseUrl",
    "api.authentication.clientId",
    "api.authentication.clientSecret",
)


def is_present(value: Any) -> bool:
    """Return whether a looked-up value counts as set (truthy)."""
    return bool(value)


def check_required_paths(
    config: Mapping[str, Any], required_paths: Iterable[str]
) -> ValidationResult:
    """Check required paths without raising.

    Args:
        config: A ResolvedConfig or any nested mapping.
        required_paths: Dot-paths that must be set, in reporting order.

    Returns:
        A ValidationResult listing every missing path.
    """
    logger = get_global_logger()
    missing: list[str] = []
    checked = 0

    for path in required_paths:
        checked += 1
        if is_present(get_path(config, path)):
            logger.debug("VALIDATE", f"[OK] {path}")
        else:
            logger.debug("VALIDATE", f"[MISSING] {path}")
            missing.append(path)

    status = "valid" if not missing else "invalid"
    logger.verbose(
        "VALIDATE", f"Checked {checked} required path(s): {len(missing)} missing"
    )
    return ValidationResult(status=status, missing=missing, checked=checked)


def validate_required(
    config: Mapping[str, Any], required_paths: Iterable[str]
) -> None:
    """Fail fast if any required path is missing.

    Args:
        config: A ResolvedConfig or any nested mapping.
        required_paths: Dot-paths that must be set.

    Raises:
        ValidationError: Listing every missing path, in order.
    """
    result = check_required_paths(config, required_paths)
    if not result.is_valid:
        raise ValidationError(result.missing)


def validate_integration(
    config: Mapping[str, Any],
    name: str,
    required_paths: Iterable[str] = INTEGRATION_REQUIRED_PATHS,
) -> None:
    """Validate the settings of one integration.

    Paths are relative to ``integrations.<name>`` and are reported with
    that prefix.

    Raises:
        ConfigError: If the integration section does not exist.
        ValidationError: If any of its required paths is missing.
    """
    prefix = f"integrations.{name}"
    if not isinstance(get_path(config, prefix), Mapping):
        raise ConfigError(f"Unknown integration: {name}")
    validate_required(config, [f"{prefix}.{path}" for path in required_paths])
