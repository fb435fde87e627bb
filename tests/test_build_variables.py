"""Tests for build/variables.py module.

Each thread-count precedence level is exercised with only that source set.
"""

import pytest

from platformsh_build.build.variables import (
    BuildVariables,
    load_build_variables,
    resolve_static_content_threads,
)
from platformsh_build.errors import ConfigurationError


class TestResolveStaticContentThreads:
    """Tests for thread count fallback precedence."""

    def test_custom_variable_only(self):
        assert resolve_static_content_threads({"STATIC_CONTENT_THREADS": "6"}, {}) == 6

    def test_process_environment_only(self):
        assert resolve_static_content_threads({}, {"STATIC_CONTENT_THREADS": "4"}) == 4

    def test_enterprise_mode_only(self):
        assert resolve_static_content_threads({}, {"PLATFORM_MODE": "enterprise"}) == 3

    def test_other_mode_only(self):
        assert resolve_static_content_threads({}, {"PLATFORM_MODE": "standard"}) == 1

    def test_nothing_set(self):
        assert resolve_static_content_threads({}, {}) is None

    def test_custom_variable_beats_environment(self):
        threads = resolve_static_content_threads(
            {"STATIC_CONTENT_THREADS": 2},
            {"STATIC_CONTENT_THREADS": "8", "PLATFORM_MODE": "enterprise"},
        )
        assert threads == 2

    def test_environment_beats_platform_mode(self):
        threads = resolve_static_content_threads(
            {}, {"STATIC_CONTENT_THREADS": "8", "PLATFORM_MODE": "enterprise"}
        )
        assert threads == 8

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError):
            resolve_static_content_threads({"STATIC_CONTENT_THREADS": "lots"}, {})


class TestLoadBuildVariables:
    """Tests for load_build_variables function."""

    def test_defaults(self):
        variables = load_build_variables({}, {})
        assert variables == BuildVariables()
        assert variables.clean_static_files is True
        assert variables.verbose_commands == ""

    def test_clean_static_files_disabled(self):
        variables = load_build_variables({"CLEAN_STATIC_FILES": "disabled"}, {})
        assert variables.clean_static_files is False

    def test_clean_static_files_other_value(self):
        variables = load_build_variables({"CLEAN_STATIC_FILES": "enabled"}, {})
        assert variables.clean_static_files is True

    def test_all_variables(self):
        variables = load_build_variables(
            {
                "STATIC_CONTENT_STASH_LOCATION": "init/static",
                "STATIC_CONTENT_EXCLUDE_THEMES": "Magento/luma,Magento/blank",
                "VERBOSE_COMMANDS": "enabled",
            },
            {"PLATFORM_MODE": "enterprise"},
        )
        assert variables.static_content_stash_location == "init/static"
        assert variables.static_content_exclude_themes == ["Magento/luma", "Magento/blank"]
        assert variables.static_content_threads == 3
        assert variables.verbose_commands == "-vvv"

    def test_exclude_themes_as_list(self):
        variables = load_build_variables(
            {"STATIC_CONTENT_EXCLUDE_THEMES": ["Magento/luma", " "]}, {}
        )
        assert variables.static_content_exclude_themes == ["Magento/luma"]
