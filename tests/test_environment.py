"""
Tests for stratacfg.environment module.

Tests environment handling including:
- Snapshot immutability and capture from os.environ
- Typed getters with literal fallbacks
- Warnings for unparsable values
- Active environment selection
"""

from __future__ import annotations

import pytest

from stratacfg.environment import (
    DEVELOPMENT,
    PRODUCTION,
    EnvironmentSnapshot,
    active_environment,
)
from stratacfg.exceptions import ConfigError
from stratacfg.logging import DefaultLogger, set_global_logger


class TestEnvironmentSnapshot:
    """Tests for EnvironmentSnapshot construction."""

    def test_values_are_copied(self):
        """Test that later changes to the source dict are not visible."""
        source = {"PORT": "8080"}
        snapshot = EnvironmentSnapshot(source)

        source["PORT"] = "9090"

        assert snapshot.get_str("PORT") == "8080"

    def test_values_are_read_only(self):
        """Test that the snapshot's values cannot be modified."""
        snapshot = EnvironmentSnapshot({"PORT": "8080"})

        with pytest.raises(TypeError):
            snapshot.values["PORT"] = "1"

    def test_from_os(self, monkeypatch):
        """Test capturing the process environment."""
        monkeypatch.setenv("STRATA_TEST_VALUE", "captured")

        snapshot = EnvironmentSnapshot.from_os()

        assert "STRATA_TEST_VALUE" in snapshot
        assert snapshot.get_str("STRATA_TEST_VALUE") == "captured"

    def test_from_os_with_env_file(self, monkeypatch, tmp_test_dir):
        """Test that .env values fill gaps and process variables win."""
        env_file = tmp_test_dir / ".env"
        env_file.write_text(
            "STRATA_FILE_ONLY=from-file\nSTRATA_BOTH=from-file\nSTRATA_BARE\n"
        )
        monkeypatch.setenv("STRATA_BOTH", "from-process")
        monkeypatch.delenv("STRATA_FILE_ONLY", raising=False)
        monkeypatch.delenv("STRATA_BARE", raising=False)

        snapshot = EnvironmentSnapshot.from_os(env_file)

        assert snapshot.get_str("STRATA_FILE_ONLY") == "from-file"
        assert snapshot.get_str("STRATA_BOTH") == "from-process"
        assert "STRATA_BARE" not in snapshot

    def test_from_os_missing_env_file(self, tmp_test_dir):
        with pytest.raises(ConfigError, match="env file not found"):
            EnvironmentSnapshot.from_os(tmp_test_dir / "missing.env")

    def test_contains(self):
        snapshot = EnvironmentSnapshot({"EMPTY": ""})

        assert "EMPTY" in snapshot
        assert "OTHER" not in snapshot


class TestTypedGetters:
    """Tests for get_str / get_int / get_float / get_bool / get_list."""

    def test_get_str(self):
        snapshot = EnvironmentSnapshot({"NAME": "value", "EMPTY": ""})

        assert snapshot.get_str("NAME") == "value"
        assert snapshot.get_str("EMPTY", "fallback") == "fallback"
        assert snapshot.get_str("MISSING") is None

    def test_get_int(self):
        snapshot = EnvironmentSnapshot({"PORT": " 8080 ", "ZERO": "0"})

        assert snapshot.get_int("PORT", 3000) == 8080
        assert snapshot.get_int("ZERO", 3000) == 0
        assert snapshot.get_int("MISSING", 3000) == 3000

    def test_get_int_invalid_falls_back(self):
        snapshot = EnvironmentSnapshot({"PORT": "eighty"})

        assert snapshot.get_int("PORT", 3000) == 3000

    def test_get_int_invalid_warns(self, capsys):
        """Test that an unparsable value is reported as a warning."""
        set_global_logger(DefaultLogger())
        snapshot = EnvironmentSnapshot({"PORT": "eighty"})

        snapshot.get_int("PORT", 3000)

        captured = capsys.readouterr()
        assert "[ENV] WARNING" in captured.err
        assert "PORT" in captured.err

    def test_get_float(self):
        snapshot = EnvironmentSnapshot({"TEMP": "0.7", "BAD": "warm"})

        assert snapshot.get_float("TEMP", 0.5) == pytest.approx(0.7)
        assert snapshot.get_float("BAD", 0.5) == 0.5
        assert snapshot.get_float("MISSING", 0.5) == 0.5

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", "yes", "on"])
    def test_get_bool_true(self, raw):
        assert EnvironmentSnapshot({"FLAG": raw}).get_bool("FLAG", False) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_get_bool_false(self, raw):
        assert EnvironmentSnapshot({"FLAG": raw}).get_bool("FLAG", True) is False

    def test_get_bool_unrecognized_falls_back(self):
        snapshot = EnvironmentSnapshot({"FLAG": "maybe"})

        assert snapshot.get_bool("FLAG", True) is True
        assert snapshot.get_bool("MISSING", False) is False

    def test_get_list(self):
        snapshot = EnvironmentSnapshot({"ORIGINS": "a.com, b.com,,c.com "})

        assert snapshot.get_list("ORIGINS", []) == ["a.com", "b.com", "c.com"]
        assert snapshot.get_list("MISSING", ["*"]) == ["*"]


class TestActiveEnvironment:
    """Tests for active_environment()."""

    def test_default_when_unset(self, empty_snapshot):
        assert active_environment(empty_snapshot) == DEVELOPMENT
        assert active_environment(empty_snapshot, default="test") == "test"

    def test_reads_node_env(self):
        snapshot = EnvironmentSnapshot({"NODE_ENV": "production"})

        assert active_environment(snapshot) == PRODUCTION

    def test_precedence(self):
        """Test that STRATA_ENV wins over APP_ENV and NODE_ENV."""
        snapshot = EnvironmentSnapshot(
            {"STRATA_ENV": "staging", "APP_ENV": "test", "NODE_ENV": "production"}
        )

        assert active_environment(snapshot) == "staging"

    def test_blank_values_skipped(self):
        snapshot = EnvironmentSnapshot({"STRATA_ENV": "  ", "NODE_ENV": "test"})

        assert active_environment(snapshot) == "test"

    def test_normalized(self):
        snapshot = EnvironmentSnapshot({"APP_ENV": " Production "})

        assert active_environment(snapshot) == PRODUCTION

    def test_unknown_name_passed_through(self):
        snapshot = EnvironmentSnapshot({"NODE_ENV": "qa"})

        assert active_environment(snapshot) == "qa"
