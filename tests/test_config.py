"""
Tests for stratacfg.config.loader module.

Tests configuration directory loading including:
- Base, overlay and required-path files
- ${NAME} / ${NAME:-fallback} interpolation and coercion
- Error handling for missing, empty and malformed files
"""

from __future__ import annotations

import pytest

from stratacfg.config import ConfigSources, interpolate, load_config_dir
from stratacfg.environment import EnvironmentSnapshot
from stratacfg.exceptions import ConfigError, StructuralError


class TestInterpolate:
    """Tests for interpolate()."""

    def test_whole_placeholder_coerced(self):
        snapshot = EnvironmentSnapshot(
            {"PORT": "8080", "RATIO": "0.25", "ENABLED": "true"}
        )
        data = {"port": "${PORT}", "ratio": "${RATIO}", "enabled": "${ENABLED}"}

        assert interpolate(data, snapshot) == {
            "port": 8080,
            "ratio": 0.25,
            "enabled": True,
        }

    def test_fallback(self, empty_snapshot):
        data = {"port": "${PORT:-3000}", "level": "${LOG_LEVEL:-info}"}

        assert interpolate(data, empty_snapshot) == {"port": 3000, "level": "info"}

    def test_unset_without_fallback_is_none(self, empty_snapshot):
        assert interpolate({"key": "${API_KEY}"}, empty_snapshot) == {"key": None}

    def test_empty_value_uses_fallback(self):
        snapshot = EnvironmentSnapshot({"HOST": ""})

        assert interpolate("${HOST:-localhost}", snapshot) == "localhost"

    def test_embedded_placeholders_stay_strings(self):
        snapshot = EnvironmentSnapshot({"HOST": "db", "PORT": "5432"})

        result = interpolate("postgres://${HOST}:${PORT}/${DB:-app}", snapshot)

        assert result == "postgres://db:5432/app"

    def test_embedded_unset_becomes_empty(self, empty_snapshot):
        assert interpolate("prefix-${MISSING}", empty_snapshot) == "prefix-"

    def test_nested_structures(self):
        snapshot = EnvironmentSnapshot({"A": "x"})
        data = {"list": ["${A}", 1, None], "nested": {"k": "${A}"}}

        assert interpolate(data, snapshot) == {
            "list": ["x", 1, None],
            "nested": {"k": "x"},
        }

    def test_input_not_mutated(self):
        data = {"k": "${A}"}

        interpolate(data, EnvironmentSnapshot({"A": "x"}))

        assert data == {"k": "${A}"}


class TestLoadConfigDir:
    """Tests for load_config_dir()."""

    def test_loads_all_layers(self, config_dir):
        sources = load_config_dir(config_dir)

        assert isinstance(sources, ConfigSources)
        assert sources.root == config_dir.resolve()
        assert sources.base["app"]["name"] == "From YAML"
        assert sources.base["app"]["port"] == 3000
        assert sorted(sources.overlays) == ["production", "staging"]
        assert sources.overlays["staging"] == {"logging": {"level": "debug"}}
        assert sources.required_paths == ("apis.govwin.apiKey", "logging.level")

    def test_snapshot_values_used(self, config_dir):
        snapshot = EnvironmentSnapshot({"PORT": "9000", "GOVWIN_API_KEY": "k"})

        sources = load_config_dir(config_dir, snapshot)

        assert sources.base["app"]["port"] == 9000
        assert sources.base["apis"]["govwin"]["apiKey"] == "k"

    def test_without_snapshot_placeholders_use_fallbacks(self, config_dir):
        sources = load_config_dir(config_dir)

        assert sources.base["logging"]["level"] == "info"
        assert sources.base["apis"]["govwin"]["apiKey"] is None

    def test_without_optional_files(self, tmp_test_dir, create_yaml_file):
        create_yaml_file("minimal/base.yaml", {"app": {"name": "x"}})

        sources = load_config_dir(tmp_test_dir / "minimal")

        assert sources.overlays == {}
        assert sources.required_paths is None

    def test_yml_overlay_and_case(self, tmp_test_dir, create_yaml_file):
        create_yaml_file("cfg/base.yaml", {"a": 1})
        create_yaml_file("cfg/environments/Production.yml", {"a": 2})
        (tmp_test_dir / "cfg" / "environments" / "notes.txt").write_text("ignored")

        sources = load_config_dir(tmp_test_dir / "cfg")

        assert sources.overlays == {"production": {"a": 2}}

    def test_empty_overlay_allowed(self, tmp_test_dir, create_yaml_file):
        create_yaml_file("cfg/base.yaml", {"a": 1})
        (tmp_test_dir / "cfg" / "environments").mkdir()
        (tmp_test_dir / "cfg" / "environments" / "test.yaml").write_text("")

        sources = load_config_dir(tmp_test_dir / "cfg")

        assert sources.overlays == {"test": {}}

    def test_missing_directory(self, tmp_test_dir):
        with pytest.raises(ConfigError, match="configuration directory not found"):
            load_config_dir(tmp_test_dir / "nope")

    def test_missing_base(self, tmp_test_dir):
        (tmp_test_dir / "cfg").mkdir()

        with pytest.raises(ConfigError, match="file not found"):
            load_config_dir(tmp_test_dir / "cfg")

    def test_empty_base(self, tmp_test_dir):
        (tmp_test_dir / "cfg").mkdir()
        (tmp_test_dir / "cfg" / "base.yaml").write_text("")

        with pytest.raises(ConfigError, match="YAML file is empty"):
            load_config_dir(tmp_test_dir / "cfg")

    def test_invalid_yaml(self, tmp_test_dir):
        (tmp_test_dir / "cfg").mkdir()
        (tmp_test_dir / "cfg" / "base.yaml").write_text("app: [unclosed\n")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_config_dir(tmp_test_dir / "cfg")

    def test_non_mapping_base(self, tmp_test_dir, create_yaml_file):
        create_yaml_file("cfg/base.yaml", ["not", "a", "mapping"])

        with pytest.raises(StructuralError, match="must be a mapping"):
            load_config_dir(tmp_test_dir / "cfg")

    def test_invalid_required_file(self, tmp_test_dir, create_yaml_file):
        create_yaml_file("cfg/base.yaml", {"a": 1})
        create_yaml_file("cfg/required.yaml", {"paths": ["a"]})

        with pytest.raises(StructuralError, match="must be a list of dot-paths"):
            load_config_dir(tmp_test_dir / "cfg")

    def test_structural_error_is_config_error(self, tmp_test_dir, create_yaml_file):
        create_yaml_file("cfg/base.yaml", "scalar")

        with pytest.raises(ConfigError):
            load_config_dir(tmp_test_dir / "cfg")
