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

"""
stratacfg - layered, environment-aware configuration

stratacfg resolves one validated configuration object per process from:
  - A base tree (built-in tables or config/base.yaml)
  - Environment variables, read once into an immutable snapshot
  - An overlay for the active environment (development, staging,
    production, test, ...)

On top of the resolved tree it provides:
  - Dot-path lookups that never raise (missing paths return ABSENT)
  - Required-path validation that lists every missing setting at once
  - Feature flags with stable, staged percentage rollout
  - Cache-TTL lookup and API-client parameter synthesis

Quick Start
-----------
    from stratacfg import bootstrap

    cfg = bootstrap(env="staging", exit_on_error=True)
    cfg.get("logging.level")
    cfg.is_feature_enabled("webhookProcessing")

From a shell:

    $ strata validate --env production
    $ strata get apis.govwin.timeout

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Startup orchestration (bootstrap).
config : package
    YAML configuration directory loading.
paths, merge : modules
    Dot-path access and deep merge.
resolver, validation : modules
    ResolvedConfig and required-path checks.
features, integrations, schema : modules
    Feature flags, API-client parameters, typed sections.
routes, deployment : modules
    Route table access checks and deployment profiles.
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Layered, environment-aware configuration resolution"

from stratacfg.core import bootstrap
from stratacfg.exceptions import ConfigError, StrataError, StructuralError, ValidationError
from stratacfg.features import FeatureFlags
from stratacfg.merge import deep_merge
from stratacfg.paths import ABSENT, get_path, is_absent
from stratacfg.resolver import ResolvedConfig, resolve
from stratacfg.validation import validate_required

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "ABSENT",
    "ConfigError",
    "FeatureFlags",
    "ResolvedConfig",
    "StrataError",
    "StructuralError",
    "ValidationError",
    "bootstrap",
    "deep_merge",
    "get_path",
    "is_absent",
    "resolve",
    "validate_required",
]
