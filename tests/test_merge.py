"""
Tests for stratacfg.merge module.

Tests deep merging including:
- Recursive mapping merge
- Sequence replacement (not concatenation)
- Override-wins on type mismatches
- Input immutability
- Self-reference detection
"""

from __future__ import annotations

import copy

import pytest

from stratacfg.exceptions import StructuralError
from stratacfg.merge import deep_merge, merge_layers


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_recursive_merge(self):
        """Test that nested mappings merge key by key."""
        result = deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 9}})

        assert result == {"a": {"x": 1, "y": 9}}

    def test_list_replacement(self):
        """Test that lists are replaced, not concatenated."""
        result = deep_merge({"m": ["GET"]}, {"m": ["GET", "POST"]})

        assert result["m"] == ["GET", "POST"]
        assert len(result["m"]) == 2

    def test_shorter_list_replaces_longer(self):
        """Test that an overlay list can shrink the base list."""
        result = deep_merge({"m": ["GET", "POST", "PUT"]}, {"m": ["GET"]})

        assert result["m"] == ["GET"]

    def test_scalar_override_wins(self):
        """Test that scalar overrides replace base values."""
        result = deep_merge({"level": "info", "port": 3000}, {"level": "debug"})

        assert result == {"level": "debug", "port": 3000}

    def test_mapping_replaced_by_scalar(self):
        """Test that a type mismatch is resolved by override-wins, not an error."""
        result = deep_merge({"engine": {"fail_fast": True}}, {"engine": "DEBUG"})

        assert result == {"engine": "DEBUG"}

    def test_scalar_replaced_by_mapping(self):
        """Test that a mapping override replaces a scalar base value wholesale."""
        result = deep_merge({"cache": "memory"}, {"cache": {"type": "redis"}})

        assert result == {"cache": {"type": "redis"}}

    def test_none_override_wins(self):
        """Test that an explicit None in the override replaces the base value."""
        result = deep_merge({"a": {"b": 1}}, {"a": None})

        assert result == {"a": None}

    def test_base_only_keys_retained(self):
        """Test that keys missing from the override are carried over."""
        result = deep_merge({"a": 1, "b": {"c": 2}}, {"d": 3})

        assert result == {"a": 1, "b": {"c": 2}, "d": 3}

    def test_deep_nesting(self):
        """Test merging six levels deep."""
        base = {"l1": {"l2": {"l3": {"l4": {"l5": {"l6": 1, "keep": True}}}}}}
        override = {"l1": {"l2": {"l3": {"l4": {"l5": {"l6": 2}}}}}}

        result = deep_merge(base, override)

        assert result["l1"]["l2"]["l3"]["l4"]["l5"] == {"l6": 2, "keep": True}

    def test_inputs_not_mutated(self):
        """Test that neither input is modified."""
        base = {"a": {"x": 1, "y": 2}, "m": ["GET"]}
        override = {"a": {"y": 9}, "m": ["POST"]}
        base_before = copy.deepcopy(base)
        override_before = copy.deepcopy(override)

        result = deep_merge(base, override)
        result["a"]["x"] = 100

        assert base == base_before
        assert override == override_before

    def test_empty_override_returns_equal_copy(self):
        """Test that merging an empty override yields the base, as a new dict."""
        base = {"a": {"b": 1}}

        result = deep_merge(base, {})

        assert result == base
        assert result is not base

    def test_disjoint_overlays_commute(self):
        """Test that overlays with disjoint keys give the same result in any order."""
        base = {"server": {"port": 3000}, "logging": {"level": "info"}}
        a = {"server": {"host": "0.0.0.0"}}
        b = {"logging": {"format": "json"}}

        assert deep_merge(deep_merge(base, a), b) == deep_merge(deep_merge(base, b), a)

    def test_non_mapping_root_raises(self):
        """Test that non-mapping roots raise StructuralError."""
        with pytest.raises(StructuralError, match="requires mappings"):
            deep_merge({"a": 1}, ["not", "a", "mapping"])

    def test_self_reference_raises(self):
        """Test that a mapping containing itself raises instead of recursing."""
        base = {"a": {"b": 1}}
        override: dict = {"a": {}}
        override["a"]["self"] = override["a"]
        base["a"]["self"] = {"x": 1}

        with pytest.raises(StructuralError, match="contains itself"):
            deep_merge(base, override)

    def test_shared_subtree_is_not_a_cycle(self):
        """Test that the same subtree reused under two keys merges fine."""
        shared = {"ttl": 60}
        base = {"a": shared, "b": shared}
        override = {"a": {"ttl": 120}}

        result = deep_merge(base, override)

        assert result == {"a": {"ttl": 120}, "b": {"ttl": 60}}


class TestMergeLayers:
    """Tests for merge_layers."""

    def test_later_layers_win(self):
        """Test precedence across three layers."""
        result = merge_layers(
            {"level": "info", "a": 1},
            {"level": "debug"},
            {"level": "warn", "b": 2},
        )

        assert result == {"level": "warn", "a": 1, "b": 2}

    def test_no_layers(self):
        """Test that zero layers merge to an empty dict."""
        assert merge_layers() == {}
