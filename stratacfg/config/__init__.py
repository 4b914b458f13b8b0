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

"""Configuration file loading for stratacfg.

Loads the base tree, per-environment overlays and required paths from a
YAML configuration directory:

  - Base configuration (base.yaml)
  - Environment overlays (environments/<env>.yaml)
  - Required paths (required.yaml)

``${NAME}`` and ``${NAME:-fallback}`` placeholders are filled from an
EnvironmentSnapshot while loading.

Example:
    ```python
    from pathlib import Path
    from stratacfg.config import load_config_dir

    sources = load_config_dir(Path("config"))
    print(sorted(sources.overlays))  # ["development", "production", "staging"]
    ```
"""

from .loader import ConfigSources, interpolate, load_config_dir

__all__ = ["ConfigSources", "interpolate", "load_config_dir"]
