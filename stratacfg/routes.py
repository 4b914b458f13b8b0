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

"""Route table lookup and role-based access checks.

The ``endpoints`` section describes the HTTP routes the application serves,
grouped under a common base path::

    endpoints:
      analytics:
        base: /analytics
        routes:
          intents: {path: /intents, method: GET, auth: true, adminOnly: true}

A route may declare ``auth`` (a role is required) and ``adminOnly`` (the
role must be "admin"). Access checks return an AccessDecision instead of
raising, so callers can turn a denial into a 401/403 response with the
reason attached.

Example:
    ```python
    from stratacfg.routes import check_route_access, get_route_config

    route = get_route_config(resolved, "analytics", "intents")
    decision = check_route_access(route, user_role="viewer")
    decision.allowed  # False
    decision.reason   # "Admin access required"
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from stratacfg.paths import ABSENT, get_path

__all__ = [
    "ADMIN_ROLE",
    "AccessDecision",
    "Route",
    "check_route_access",
    "get_route_config",
    "list_routes",
]

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access check.

    Attributes:
        allowed: Whether the caller may use the route.
        reason: Why access was denied, or None when allowed.
    """

    allowed: bool
    reason: str | None = None


@dataclass(frozen=True)
class Route:
    """One method of one route, with its full path."""

    group: str
    name: str
    method: str
    path: str
    auth: bool = False
    admin_only: bool = False
    rate_limit: Mapping[str, Any] | None = field(default=None, compare=False)


def get_route_config(config: Mapping[str, Any], group: str, route: str) -> Any:
    """Return ``endpoints.<group>.routes.<route>``, or ABSENT."""
    if not group or not route:
        return ABSENT
    return get_path(config, f"endpoints.{group}.routes.{route}")


def list_routes(config: Mapping[str, Any]) -> list[Route]:
    """Expand the route table into one Route per HTTP method.

    Groups and routes keep their configured order. Methods are upper-cased
    and paths are the group base joined with the route path.
    """
    routes: list[Route] = []
    groups = get_path(config, "endpoints", default={})
    if not isinstance(groups, Mapping):
        return routes

    for group, group_cfg in groups.items():
        if not isinstance(group_cfg, Mapping):
            continue
        base = group_cfg.get("base") or ""
        for name, route_cfg in (group_cfg.get("routes") or {}).items():
            if not isinstance(route_cfg, Mapping):
                continue
            methods = route_cfg.get("method") or ()
            if isinstance(methods, str):
                methods = (methods,)
            for method in methods:
                routes.append(
                    Route(
                        group=group,
                        name=name,
                        method=str(method).upper(),
                        path=f"{base}{route_cfg.get('path', '')}",
                        auth=bool(route_cfg.get("auth")),
                        admin_only=bool(route_cfg.get("adminOnly")),
                        rate_limit=route_cfg.get("rateLimit"),
                    )
                )
    return routes


def check_route_access(
    route: Route | Mapping[str, Any], user_role: str | None
) -> AccessDecision:
    """Decide whether a caller with user_role may use a route.

    The admin requirement is checked before the authentication requirement,
    so an admin-only route reports "Admin access required" even to an
    anonymous caller.

    Args:
        route: A Route, or a route mapping from the configuration tree.
        user_role: The caller's role, or None when unauthenticated.

    Returns:
        The access decision.
    """
    if isinstance(route, Route):
        auth, admin_only = route.auth, route.admin_only
    elif isinstance(route, Mapping):
        auth, admin_only = bool(route.get("auth")), bool(route.get("adminOnly"))
    else:
        auth = admin_only = False

    if admin_only and user_role != ADMIN_ROLE:
        return AccessDecision(allowed=False, reason="Admin access required")
    if auth and not user_role:
        return AccessDecision(allowed=False, reason="Authentication required")
    return AccessDecision(allowed=True)
