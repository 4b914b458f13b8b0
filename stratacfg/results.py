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

"""Public API return types for stratacfg.

Dataclasses returned by public API functions. All of them are frozen so
return values cannot be mutated by accident.

Example:
    ```python
    from stratacfg.validation import check_required_paths

    result = check_required_paths(cfg, ["apis.govwin.apiKey"])
    if not result.is_valid:
        print(", ".join(result.missing))
    ```

Note:
    Only public API return types belong in this module. Domain types
    (like RolloutStage or ApiClientConfig) stay with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationResult:
    """Result from checking required configuration paths.

    Attributes:
        status: "valid" or "invalid".
        missing: Paths that were absent or falsy, in the order checked.
        checked: Number of paths checked.
    """

    status: str
    missing: list[str]
    checked: int

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"
