"""
Tests for stratacfg.paths module.

Tests dot-path access including:
- Nested lookups
- Absence safety (never raises)
- Empty-path identity
- Defaults
"""

from __future__ import annotations

import copy
import pickle

from stratacfg.paths import ABSENT, get_path, is_absent, split_path


class TestGetPath:
    """Tests for get_path."""

    def test_nested_lookup(self):
        """Test resolving a value several levels deep."""
        tree = {"apis": {"govwin": {"timeout": 30000}}}

        assert get_path(tree, "apis.govwin.timeout") == 30000

    def test_returns_subtree(self):
        """Test that a path to a mapping returns the mapping."""
        tree = {"apis": {"govwin": {"timeout": 30000}}}

        assert get_path(tree, "apis.govwin") == {"timeout": 30000}

    def test_missing_key_is_absent(self):
        """Test that a missing key resolves to ABSENT."""
        assert get_path({"a": 1}, "b") is ABSENT

    def test_through_scalar_is_absent(self):
        """Test that indexing through a non-mapping returns ABSENT, not an error."""
        tree = {"a": {"b": 1}}

        assert get_path(tree, "a.b.c") is ABSENT

    def test_through_none_is_absent(self):
        """Test that an explicit null in the middle of a path returns ABSENT."""
        tree = {"a": None}

        assert get_path(tree, "a.b") is ABSENT

    def test_through_list_is_absent(self):
        """Test that lists are not indexed by path segments."""
        tree = {"methods": ["GET", "POST"]}

        assert get_path(tree, "methods.0") is ABSENT

    def test_explicit_none_is_not_absent(self):
        """Test that a null value is returned as None, distinct from ABSENT."""
        tree = {"apis": {"openai": {"apiKey": None}}}

        value = get_path(tree, "apis.openai.apiKey")

        assert value is None
        assert not is_absent(value)

    def test_empty_path_returns_root(self):
        """Test that the empty path resolves to the root itself."""
        tree = {"a": 1}

        assert get_path(tree, "") is tree

    def test_non_mapping_root(self):
        """Test that a non-mapping root yields ABSENT for any non-empty path."""
        assert get_path(42, "a") is ABSENT
        assert get_path(None, "a.b") is ABSENT

    def test_default_replaces_absent(self):
        """Test that default is returned instead of ABSENT."""
        assert get_path({}, "server.port", default=8080) == 8080

    def test_default_not_used_when_present(self):
        """Test that default does not override a present value."""
        assert get_path({"port": 0}, "port", default=8080) == 0


class TestAbsentSentinel:
    """Tests for the ABSENT sentinel."""

    def test_absent_is_falsy(self):
        """Test that ABSENT is falsy so it composes with `or` defaults."""
        assert not ABSENT
        assert (get_path({}, "x") or "fallback") == "fallback"

    def test_absent_repr(self):
        """Test the sentinel's repr."""
        assert repr(ABSENT) == "ABSENT"

    def test_absent_survives_copy_and_pickle(self):
        """Test that copies of ABSENT are still ABSENT."""
        assert copy.deepcopy(ABSENT) is ABSENT
        assert pickle.loads(pickle.dumps(ABSENT)) is ABSENT


class TestSplitPath:
    """Tests for split_path."""

    def test_split(self):
        assert split_path("a.b.c") == ["a", "b", "c"]

    def test_empty(self):
        assert split_path("") == []
