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

"""Built-in configuration tables.

The base tree and the per-environment overlays shipped with stratacfg. These
are data, not logic: URLs, timeouts, TTLs and flag values are constants,
except for the entries that are read from an EnvironmentSnapshot with a
literal fallback.

build_base_config() is a pure function of the snapshot it receives, so the
same snapshot always yields the same tree.

Tables:

- build_base_config(snapshot): Base tree (app, server, database, apis,
  platforms, security, logging, cache, caching, integrations, endpoints,
  featureFlags)
- build_overlays(snapshot): Overlays for development, staging, production
  and test
- DEFAULT_REQUIRED_PATHS: Paths that must be set before startup
- DEFAULT_CACHE_TTL: TTL (seconds) for data types without an entry
- DEPLOYMENT_PROFILES: Deployment settings shared by all environments
  ("common") plus one section per environment
"""

from __future__ import annotations

from typing import Any

from stratacfg.environment import (
    DEVELOPMENT,
    PRODUCTION,
    STAGING,
    TEST,
    EnvironmentSnapshot,
)

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_REQUIRED_PATHS",
    "DEPLOYMENT_PROFILES",
    "build_base_config",
    "build_overlays",
]

APP_NAME = "GovWin IQ Chatbot"
APP_VERSION = "1.0.0"

DEFAULT_CACHE_TTL = 3600

DEFAULT_REQUIRED_PATHS = (
    "apis.govwin.apiKey",
    "apis.openai.apiKey",
    "security.jwtSecret",
)


def build_base_config(snapshot: EnvironmentSnapshot) -> dict[str, Any]:
    """Build the base configuration tree from an environment snapshot.

    Args:
        snapshot: Environment values to read overrides from.

    Returns:
        A new base tree. Unset secrets are None so that required-path
        validation reports them.
    """
    env = snapshot
    return {
        "app": {
            "name": APP_NAME,
            "version": APP_VERSION,
            "port": env.get_int("PORT", 3000),
            "host": env.get_str("HOST", "localhost"),
        },
        "server": {
            "maxConcurrency": env.get_int("MAX_CONCURRENCY", 100),
            "responseTimeout": env.get_int("RESPONSE_TIMEOUT", 15000),
            "workerPool": env.get_int("WORKER_POOL_SIZE", 4),
            "circuitBreaker": {
                "failureThreshold": 5,
                "resetTimeout": 30000,
            },
        },
        "database": {
            "url": env.get_str(
                "DATABASE_URL", "mongodb://localhost:27017/govwin-iq-chatbot"
            ),
            "options": {
                "maxPoolSize": 10,
            },
        },
        "apis": {
            "govwin": {
                "baseUrl": env.get_str("GOVWIN_API_URL", "https://api.govwin.com"),
                "apiKey": env.get_str("GOVWIN_API_KEY"),
                "timeout": env.get_int("API_TIMEOUT", 30000),
                "rateLimit": {"requests": 100, "per": "hour"},
            },
            "openai": {
                "apiKey": env.get_str("OPENAI_API_KEY"),
                "model": env.get_str("OPENAI_MODEL", "gpt-4"),
                "maxTokens": env.get_int("OPENAI_MAX_TOKENS", 2000),
                "temperature": env.get_float("OPENAI_TEMPERATURE", 0.7),
            },
            "webhook": {
                "secret": env.get_str("WEBHOOK_SECRET"),
                "endpoints": {
                    "slack": env.get_str("SLACK_WEBHOOK_URL"),
                    "teams": env.get_str("TEAMS_WEBHOOK_URL"),
                    "generic": env.get_str("GENERIC_WEBHOOK_URL"),
                },
            },
        },
        "platforms": {
            "slack": {
                "botToken": env.get_str("SLACK_BOT_TOKEN"),
                "signingSecret": env.get_str("SLACK_SIGNING_SECRET"),
                "appToken": env.get_str("SLACK_APP_TOKEN"),
            },
            "teams": {
                "appId": env.get_str("TEAMS_APP_ID"),
                "appPassword": env.get_str("TEAMS_APP_PASSWORD"),
                "tenantId": env.get_str("TEAMS_TENANT_ID"),
            },
            "web": {
                "enabled": env.get_bool("WEB_INTERFACE", False),
                "cors": {
                    "origin": env.get_list("CORS_ORIGIN", ["*"]),
                    "credentials": True,
                    "allowedMethods": ["GET", "POST", "PUT", "DELETE"],
                },
            },
        },
        "security": {
            "jwtSecret": env.get_str(
                "JWT_SECRET", "fallback-secret-change-in-production"
            ),
            "jwtExpiry": env.get_str("JWT_EXPIRY", "24h"),
            "bcryptRounds": env.get_int("BCRYPT_ROUNDS", 12),
            "rateLimiting": {
                "windowMs": 15 * 60 * 1000,
                "max": 100,
            },
        },
        "logging": {
            "level": env.get_str("LOG_LEVEL", "info"),
            "format": env.get_str("LOG_FORMAT", "json"),
            "destination": env.get_str("LOG_DESTINATION", "console"),
            "file": {
                "path": env.get_str("LOG_FILE_PATH", "./logs/app.log"),
                "maxSize": env.get_str("LOG_MAX_SIZE", "10MB"),
                "maxFiles": env.get_int("LOG_MAX_FILES", 5),
            },
        },
        "cache": {
            "type": env.get_str("CACHE_TYPE", "memory"),
            "redis": {
                "url": env.get_str("REDIS_URL", "redis://localhost:6379"),
                "ttl": env.get_int("CACHE_TTL", DEFAULT_CACHE_TTL),
            },
            "memory": {
                "max": env.get_int("MEMORY_CACHE_MAX", 100),
                "ttl": env.get_int("MEMORY_CACHE_TTL", DEFAULT_CACHE_TTL),
            },
        },
        "caching": {
            "enabled": True,
            "ttl": {
                "opportunities": 3600,
                "vendors": 86400,
                "agencies": 604800,
                "reports": 1800,
                "userPreferences": 3600,
            },
        },
        "integrations": {
            "govwin": {
                "api": {
                    "baseUrl": env.get_str(
                        "GOVWIN_API_BASE", "https://api.govwin.com/v2"
                    ),
                    "version": "v2",
                    "timeout": env.get_int("GOVWIN_API_TIMEOUT", 30000),
                    "retries": env.get_int("GOVWIN_API_RETRIES", 3),
                    "authentication": {
                        "type": "oauth2",
                        "clientId": env.get_str("GOVWIN_CLIENT_ID"),
                        "clientSecret": env.get_str("GOVWIN_CLIENT_SECRET"),
                        "scope": "read write admin",
                        "tokenEndpoint": "https://auth.govwin.com/oauth2/token",
                        "refreshThreshold": 300,
                    },
                    "rateLimit": {
                        "requestsPerMinute": 100,
                        "burstLimit": 20,
                        "backoffStrategy": "exponential",
                    },
                },
                "endpoints": {
                    "search": {
                        "opportunities": "/opportunities/search",
                        "vendors": "/vendors/search",
                        "agencies": "/agencies/search",
                        "contracts": "/contracts/search",
                    },
                    "data": {
                        "opportunityDetails": "/opportunities/{id}",
                        "vendorProfile": "/vendors/{id}",
                        "agencyDetails": "/agencies/{id}",
                    },
                    "users": {
                        "profile": "/users/profile",
                        "preferences": "/users/preferences",
                        "savedSearches": "/users/saved-searches",
                    },
                    "reports": {
                        "generate": "/reports/generate",
                        "templates": "/reports/templates",
                        "export": "/reports/export",
                    },
                },
            },
        },
        "endpoints": {
            "chat": {
                "base": "/chat",
                "routes": {
                    "message": {
                        "path": "/message",
                        "method": "POST",
                        "auth": True,
                        "rateLimit": {"windowMs": 60000, "max": 30},
                    },
                    "session": {"path": "/session", "method": "POST", "auth": True},
                    "history": {
                        "path": "/session/:sessionId/history",
                        "method": "GET",
                        "auth": True,
                    },
                },
            },
            "govwin": {
                "base": "/govwin",
                "routes": {
                    "search": {
                        "path": "/search",
                        "method": "POST",
                        "auth": True,
                        "rateLimit": {"windowMs": 60000, "max": 20},
                    },
                    "opportunity": {
                        "path": "/opportunity/:id",
                        "method": "GET",
                        "auth": True,
                    },
                    "reports": {"path": "/reports", "method": "GET", "auth": True},
                },
            },
            "users": {
                "base": "/users",
                "routes": {
                    "profile": {"path": "/profile", "method": "GET", "auth": True},
                    "preferences": {
                        "path": "/preferences",
                        "method": ["GET", "PUT"],
                        "auth": True,
                    },
                    "usage": {"path": "/usage", "method": "GET", "auth": True},
                },
            },
            "analytics": {
                "base": "/analytics",
                "routes": {
                    "conversations": {
                        "path": "/conversations",
                        "method": "GET",
                        "auth": True,
                        "adminOnly": True,
                    },
                    "intents": {
                        "path": "/intents",
                        "method": "GET",
                        "auth": True,
                        "adminOnly": True,
                    },
                    "satisfaction": {
                        "path": "/satisfaction",
                        "method": "GET",
                        "auth": True,
                        "adminOnly": True,
                    },
                },
            },
            "system": {
                "base": "/system",
                "routes": {
                    "health": {
                        "path": "/health",
                        "method": "GET",
                        "auth": False,
                        "rateLimit": {"windowMs": 60000, "max": 100},
                    },
                    "ready": {"path": "/ready", "method": "GET", "auth": False},
                    "metrics": {
                        "path": "/metrics",
                        "method": "GET",
                        "auth": False,
                        "adminOnly": True,
                    },
                    "version": {"path": "/version", "method": "GET", "auth": False},
                },
            },
        },
        "featureFlags": {
            "enabled": True,
            "flags": {
                "govwinIntelligenceIntegration": False,
                "crmSync": False,
                "advancedAnalytics": False,
                "realTimeNotifications": True,
                "webhookProcessing": True,
            },
            "rolloutStrategy": {
                "type": "gradual",
                "startedAt": env.get_str("ROLLOUT_STARTED_AT"),
                "stages": [
                    {"percentage": 5, "duration": "1_day"},
                    {"percentage": 25, "duration": "3_days"},
                    {"percentage": 50, "duration": "1_week"},
                    {"percentage": 100, "duration": "ongoing"},
                ],
            },
        },
    }


def build_overlays(snapshot: EnvironmentSnapshot) -> dict[str, dict[str, Any]]:
    """Build the per-environment overlay fragments.

    Args:
        snapshot: Environment values to read overrides from.

    Returns:
        Mapping of environment name to overlay tree.
    """
    return {
        DEVELOPMENT: {
            "logging": {"level": "debug", "format": "pretty"},
            "security": {"rateLimiting": {"max": 1000}},
            "featureFlags": {"flags": {"advancedAnalytics": True}},
        },
        STAGING: {
            "logging": {"level": "debug"},
            "security": {"rateLimiting": {"max": 200}},
            "platforms": {
                "web": {
                    "cors": {
                        "allowedMethods": ["GET", "POST", "PUT", "DELETE", "PATCH"],
                    },
                },
            },
        },
        PRODUCTION: {
            "logging": {"level": "warn", "destination": "file"},
            "security": {"rateLimiting": {"max": 50}},
            "platforms": {
                "web": {"cors": {"allowedMethods": ["GET", "POST"]}},
            },
        },
        TEST: {
            "database": {
                "url": snapshot.get_str(
                    "TEST_DATABASE_URL",
                    "mongodb://localhost:27017/govwin-iq-chatbot-test",
                ),
            },
            "logging": {"level": "silent"},
        },
    }


DEPLOYMENT_PROFILES: dict[str, dict[str, Any]] = {
    "common": {
        "nodeVersion": "18.x",
        "timezone": "UTC",
        "maxMemory": "512MB",
        "timeout": 30,
        "healthCheck": {
            "enabled": True,
            "path": "/health",
            "interval": 30,
            "timeout": 10,
        },
        "monitoring": {
            "enabled": True,
            "metricsPath": "/metrics",
            "logsRetentionDays": 30,
        },
    },
    DEVELOPMENT: {
        "platform": "local",
        "domain": "localhost:3000",
        "ssl": False,
        "scaling": {"instances": 1, "autoScale": False},
        "database": {
            "host": "localhost",
            "port": 27017,
            "name": "govwin-iq-chatbot-dev",
        },
        "redis": {"host": "localhost", "port": 6379, "db": 0},
        "assets": {"serve": "local", "compression": False, "caching": False},
        "debugging": {"enabled": True, "verbose": True, "inspector": True},
    },
    STAGING: {
        "platform": "heroku",
        "domain": "govwin-iq-chatbot-staging.herokuapp.com",
        "ssl": True,
        "scaling": {"instances": 1, "autoScale": False, "dynoType": "standard-1x"},
        "database": {
            "provider": "mongodb_atlas",
            "cluster": "staging-cluster",
            "authSource": "admin",
        },
        "redis": {"provider": "heroku_redis", "plan": "mini"},
        "assets": {
            "serve": "cdn",
            "compression": True,
            "caching": True,
            "cdnProvider": "cloudflare",
        },
        "buildpacks": ["heroku/nodejs"],
        "addons": ["heroku-redis:mini", "papertrail:choklad"],
        "configVars": {"NODE_ENV": "staging", "NPM_CONFIG_PRODUCTION": "false"},
    },
    PRODUCTION: {
        "platform": "aws",
        "domain": "chatbot.govwin.com",
        "ssl": True,
        "scaling": {
            "instances": 3,
            "autoScale": True,
            "minInstances": 2,
            "maxInstances": 10,
            "targetCpu": 70,
        },
        "database": {
            "provider": "aws_documentdb",
            "cluster": "prod-cluster",
            "multiAz": True,
            "backupRetention": 7,
        },
        "redis": {
            "provider": "aws_elasticache",
            "nodeType": "cache.t3.micro",
            "numNodes": 2,
        },
    },
}
