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

"""Deployment profiles per environment.

A deployment profile set has a ``common`` section shared by every
environment plus one section per environment name. The profile for an
environment is the common section with the environment section deep-merged
on top; an environment without a section gets the common settings alone.

A resolved profile must name at least its platform and domain. Every
missing field is collected before ValidationError is raised.

Example:
    ```python
    from stratacfg.deployment import (
        get_deployment_config,
        validate_deployment_config,
    )

    profile = get_deployment_config("production")
    validate_deployment_config(profile)
    profile["scaling"]["maxInstances"]  # 10
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from stratacfg.defaults import DEPLOYMENT_PROFILES
from stratacfg.exceptions import StructuralError
from stratacfg.logging import get_global_logger
from stratacfg.merge import deep_merge
from stratacfg.resolver import thaw
from stratacfg.validation import validate_required

__all__ = [
    "COMMON_PROFILE",
    "DEPLOYMENT_REQUIRED_FIELDS",
    "get_deployment_config",
    "validate_deployment_config",
]

COMMON_PROFILE = "common"

DEPLOYMENT_REQUIRED_FIELDS = ("platform", "domain")


def get_deployment_config(
    environment: str,
    profiles: Mapping[str, Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return the deployment profile for an environment.

    Args:
        environment: Environment name.
        profiles: Profile set with a "common" section. Defaults to
            DEPLOYMENT_PROFILES.

    Returns:
        A new, fully independent dict: common settings overlaid with the
            environment section.

    Raises:
        StructuralError: If the common or environment section is not a
            mapping.
    """
    profiles = DEPLOYMENT_PROFILES if profiles is None else profiles
    common = profiles.get(COMMON_PROFILE) or {}
    section = profiles.get(environment) or {}
    for name, node in ((COMMON_PROFILE, common), (environment, section)):
        if not isinstance(node, Mapping):
            raise StructuralError(
                f"Deployment profile '{name}' must be a mapping, "
                f"got {type(node).__name__}"
            )

    if not section:
        get_global_logger().verbose(
            "CONFIG",
            f"No deployment profile for '{environment}'; using common settings",
        )
    return thaw(deep_merge(common, section))


def validate_deployment_config(
    config: Mapping[str, Any],
    required_fields: Iterable[str] = DEPLOYMENT_REQUIRED_FIELDS,
) -> None:
    """Check that a deployment profile names every required field.

    Raises:
        ValidationError: Listing every missing field, in order.
    """
    validate_required(config, required_fields)
