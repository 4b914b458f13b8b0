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

"""Typed views of the well-known configuration sections.

Fixed sections (app, logging, cache, security rate limiting) are read once
into frozen dataclasses so consumers get attribute access and types instead
of string paths. Dynamic lookups (feature flags by name, cache TTLs by data
type) stay on the dot-path accessor.

Each ``from_config`` constructor raises ConfigError naming the path when
the section or one of its fields is missing.

Example:
    ```python
    from stratacfg.schema import LoggingSettings

    logging_cfg = LoggingSettings.from_config(resolved)
    print(logging_cfg.level, logging_cfg.destination)
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from stratacfg.exceptions import ConfigError
from stratacfg.paths import get_path, is_absent

__all__ = ["AppSettings", "LoggingSettings", "CacheSettings", "RateLimitSettings"]


def _section(config: Mapping[str, Any], path: str) -> Mapping[str, Any]:
    node = get_path(config, path)
    if not isinstance(node, Mapping):
        raise ConfigError(f"Missing configuration section: {path}")
    return node


def _field(node: Mapping[str, Any], path: str, key: str) -> Any:
    value = get_path(node, key)
    if is_absent(value):
        raise ConfigError(f"Missing configuration field: {path}.{key}")
    return value


@dataclass(frozen=True)
class AppSettings:
    """Application identity and listen address (``app``)."""

    name: str
    version: str
    port: int
    host: str

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> AppSettings:
        node = _section(config, "app")
        return cls(
            name=_field(node, "app", "name"),
            version=_field(node, "app", "version"),
            port=int(_field(node, "app", "port")),
            host=_field(node, "app", "host"),
        )


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and destination (``logging``)."""

    level: str
    format: str
    destination: str
    file_path: str | None = None
    max_size: str | None = None
    max_files: int | None = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> LoggingSettings:
        node = _section(config, "logging")
        return cls(
            level=_field(node, "logging", "level"),
            format=_field(node, "logging", "format"),
            destination=_field(node, "logging", "destination"),
            file_path=get_path(node, "file.path", default=None),
            max_size=get_path(node, "file.maxSize", default=None),
            max_files=get_path(node, "file.maxFiles", default=None),
        )


@dataclass(frozen=True)
class CacheSettings:
    """Cache backend selection (``cache``)."""

    type: str
    redis_url: str | None
    ttl: int

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> CacheSettings:
        node = _section(config, "cache")
        cache_type = _field(node, "cache", "type")
        # TTL comes from the section of the selected backend
        backend = get_path(node, cache_type, default={})
        return cls(
            type=cache_type,
            redis_url=get_path(node, "redis.url", default=None),
            ttl=int(get_path(backend, "ttl", default=0) or 0),
        )


@dataclass(frozen=True)
class RateLimitSettings:
    """Request rate limit (``security.rateLimiting``)."""

    window_ms: int
    max: int

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RateLimitSettings:
        path = "security.rateLimiting"
        node = _section(config, path)
        return cls(
            window_ms=int(_field(node, path, "windowMs")),
            max=int(_field(node, path, "max")),
        )
