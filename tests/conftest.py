"""
Pytest configuration and shared fixtures for stratacfg tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import yaml

from stratacfg.environment import EnvironmentSnapshot
from stratacfg.logging import SilentLogger, set_global_logger


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Restore the silent global logger after each test."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_base() -> dict[str, Any]:
    """Provide a small base configuration tree."""
    return {
        "app": {"name": "Test App", "version": "2.0.0", "port": 3000, "host": "localhost"},
        "server": {"port": 3000},
        "logging": {"level": "info", "format": "json", "destination": "console"},
        "apis": {
            "govwin": {"baseUrl": "https://api.example.com", "apiKey": "key-123"},
            "openai": {"apiKey": None, "model": "gpt-4"},
        },
        "platforms": {
            "slack": {"botToken": "xoxb-test"},
            "web": {"cors": {"allowedMethods": ["GET"]}},
        },
        "caching": {"ttl": {"opportunities": 3600, "vendors": 86400, "reports": 0}},
        "featureFlags": {
            "flags": {"realTimeNotifications": True, "crmSync": False},
            "rolloutStrategy": {
                "type": "gradual",
                "stages": [
                    {"percentage": 5, "duration": "1_day"},
                    {"percentage": 25, "duration": "3_days"},
                    {"percentage": 100, "duration": "ongoing"},
                ],
            },
        },
    }


@pytest.fixture
def sample_overlays() -> dict[str, dict[str, Any]]:
    """Provide overlays keyed by environment name."""
    return {
        "staging": {"logging": {"level": "debug"}},
        "production": {
            "logging": {"level": "warn", "destination": "file"},
            "platforms": {"web": {"cors": {"allowedMethods": ["GET", "POST"]}}},
        },
    }


@pytest.fixture
def empty_snapshot() -> EnvironmentSnapshot:
    """Provide a snapshot with no environment variables set."""
    return EnvironmentSnapshot({})


@pytest.fixture
def full_snapshot() -> EnvironmentSnapshot:
    """Provide a snapshot with every default required secret set."""
    return EnvironmentSnapshot(
        {
            "GOVWIN_API_KEY": "govwin-key",
            "OPENAI_API_KEY": "openai-key",
            "JWT_SECRET": "jwt-secret",
        }
    )


@pytest.fixture
def fixed_time() -> datetime:
    """Provide a fixed, timezone-aware instant."""
    return datetime(2025, 1, 1, tzinfo=UTC)


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("config/base.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def config_dir(tmp_test_dir: Path, create_yaml_file) -> Path:
    """Provide a configuration directory with base, overlays and required paths."""
    create_yaml_file(
        "config/base.yaml",
        {
            "app": {"name": "From YAML", "version": "1.2.3", "port": "${PORT:-3000}"},
            "logging": {"level": "${LOG_LEVEL:-info}"},
            "apis": {"govwin": {"apiKey": "${GOVWIN_API_KEY}"}},
        },
    )
    create_yaml_file("config/environments/staging.yaml", {"logging": {"level": "debug"}})
    create_yaml_file(
        "config/environments/production.yaml", {"logging": {"level": "warn"}}
    )
    create_yaml_file("config/required.yaml", ["apis.govwin.apiKey", "logging.level"])
    return tmp_test_dir / "config"
