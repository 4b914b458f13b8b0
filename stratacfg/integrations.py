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

"""API-client parameters derived from resolved configuration.

generate_api_config() collects what an HTTP client needs to talk to an
integration (base URL, timeout, retries, headers, credentials) from the
``integrations.<name>.api`` section. build_session() turns those
parameters into a requests.Session with retry/backoff mounted. Building the
session sends no request.

Timeouts in the configuration tree are in milliseconds, as declared in the
data; ApiClientConfig.timeout_seconds converts for requests.

Example:
    ```python
    from stratacfg.integrations import build_session, generate_api_config

    api = generate_api_config(resolved, "govwin")
    session = build_session(api)
    resp = session.get(api.url_for("/opportunities/search"),
                       timeout=api.timeout_seconds)
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from stratacfg.defaults import APP_NAME, APP_VERSION
from stratacfg.exceptions import ConfigError
from stratacfg.logging import get_global_logger
from stratacfg.paths import get_path

__all__ = ["ApiClientConfig", "user_agent", "generate_api_config", "build_session"]

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_RETRIES = 3


def user_agent(name: str, version: str) -> str:
    """Build a User-Agent product token, e.g. "GovWin-IQ-Chatbot/1.0.0"."""
    return f"{'-'.join(str(name).split())}/{version}"


@dataclass(frozen=True)
class ApiClientConfig:
    """Parameters for an HTTP client of one integration.

    Attributes:
        base_url: Root URL of the API.
        timeout: Request timeout in milliseconds.
        retries: Retry attempts for transient failures.
        headers: Default request headers.
        auth: Authentication parameters (type, clientId, clientSecret, scope).
    """

    base_url: str
    timeout: int
    retries: int
    headers: dict[str, str] = field(default_factory=dict)
    auth: dict[str, Any] = field(default_factory=dict)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000

    def url_for(self, path: str) -> str:
        """Join an endpoint path onto base_url."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def generate_api_config(
    config: Mapping[str, Any], integration: str = "govwin"
) -> ApiClientConfig:
    """Synthesize client parameters for an integration.

    Args:
        config: A ResolvedConfig or plain mapping.
        integration: Name under ``integrations``.

    Returns:
        The client parameters. The User-Agent is ``<app.name>/<app.version>``
        with spaces in the name replaced by hyphens.

    Raises:
        ConfigError: If the integration or its base URL is not configured.
    """
    api = get_path(config, f"integrations.{integration}.api")
    if not isinstance(api, Mapping):
        raise ConfigError(f"Unknown integration: {integration}")

    base_url = api.get("baseUrl")
    if not base_url:
        raise ConfigError(f"integrations.{integration}.api.baseUrl is not set")

    app_name = get_path(config, "app.name", default=None) or APP_NAME
    app_version = get_path(config, "app.version", default=None) or APP_VERSION
    authentication = api.get("authentication") or {}
    timeout = api.get("timeout")
    retries = api.get("retries")

    return ApiClientConfig(
        base_url=base_url,
        timeout=DEFAULT_TIMEOUT_MS if timeout is None else int(timeout),
        retries=DEFAULT_RETRIES if retries is None else int(retries),
        headers={
            "Content-Type": "application/json",
            "User-Agent": user_agent(app_name, app_version),
        },
        auth={
            "type": authentication.get("type"),
            "clientId": authentication.get("clientId"),
            "clientSecret": authentication.get("clientSecret"),
            "scope": authentication.get("scope"),
        },
    )


def build_session(api_config: ApiClientConfig) -> requests.Session:
    """Create a requests.Session configured from client parameters.

    - Applies the default headers.
    - Retries transient status codes with exponential backoff.
    """
    logger = get_global_logger()
    s = requests.Session()
    retries = Retry(
        total=api_config.retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update(api_config.headers)
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    logger.debug(
        "HTTP",
        f"Session for {api_config.base_url} "
        f"(timeout={api_config.timeout}ms, retries={api_config.retries})",
    )
    return s
