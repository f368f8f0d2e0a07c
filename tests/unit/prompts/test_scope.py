"""Unit tests for scope policy loading."""

import pytest

from text2sql.prompts.scope import DEFAULT_IN_SCOPE, DEFAULT_OUT_OF_SCOPE, load_scope_policy


class TestLoadScopePolicy:
    """Test suite for load_scope_policy."""

    def test_defaults_without_path(self):
        """Test that no path yields the built-in lists."""
        policy = load_scope_policy()

        assert policy.in_scope == DEFAULT_IN_SCOPE
        assert policy.out_of_scope == DEFAULT_OUT_OF_SCOPE

    def test_missing_file_falls_back(self, tmp_path):
        """Test that a missing file yields the defaults."""
        policy = load_scope_policy(tmp_path / "missing.yaml")

        assert policy.in_scope == DEFAULT_IN_SCOPE

    def test_loads_yaml(self, tmp_path):
        """Test that both lists are read from YAML."""
        path = tmp_path / "scope.yaml"
        path.write_text("in_scope:\n  - Revenue\nout_of_scope:\n  - Weather\n")

        policy = load_scope_policy(path)

        assert policy.in_scope == ["Revenue"]
        assert policy.out_of_scope == ["Weather"]

    def test_partial_yaml_keeps_defaults(self, tmp_path):
        """Test that an absent key keeps its default list."""
        path = tmp_path / "scope.yaml"
        path.write_text("in_scope:\n  - Revenue\n")

        policy = load_scope_policy(path)

        assert policy.in_scope == ["Revenue"]
        assert policy.out_of_scope == DEFAULT_OUT_OF_SCOPE

    def test_non_mapping_is_rejected(self, tmp_path):
        """Test that a YAML list at the top level is an error."""
        path = tmp_path / "scope.yaml"
        path.write_text("- Revenue\n")

        with pytest.raises(ValueError):
            load_scope_policy(path)

    def test_shipped_config_loads(self):
        """Test that the repository's config/scope.yaml parses."""
        policy = load_scope_policy("config/scope.yaml")

        assert policy.in_scope
        assert policy.out_of_scope
