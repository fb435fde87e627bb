"""Tests for build/options.py module."""

import logging

import pytest

from platformsh_build.build.options import (
    BuildOptions,
    load_build_options,
    parse_options_text,
    split_csv,
)
from platformsh_build.errors import ConfigurationError


class TestSplitCsv:
    """Tests for split_csv function."""

    def test_splits_and_trims(self):
        assert split_csv("Magento/luma, Magento/blank ,") == ["Magento/luma", "Magento/blank"]

    def test_empty(self):
        assert split_csv("") == []
        assert split_csv(None) == []


class TestParseOptionsText:
    """Tests for parse_options_text function."""

    def test_defaults_for_empty_text(self):
        options = parse_options_text("")
        assert options == BuildOptions()
        assert options.skip_di_compilation is False
        assert options.exclude_themes == []
        assert options.scd_threads is None
        assert options.skip_scd is False

    def test_all_keys(self):
        options = parse_options_text(
            "skip_di_compilation = true\n"
            "skip_di_clearing = 1\n"
            'exclude_themes = "Magento/luma, Magento/blank"\n'
            "scd_threads = 4\n"
            "skip_scd = yes\n"
        )
        assert options.skip_di_compilation is True
        assert options.skip_di_clearing is True
        assert options.exclude_themes == ["Magento/luma", "Magento/blank"]
        assert options.scd_threads == 4
        assert options.skip_scd is True

    @pytest.mark.parametrize("value", ["", "0", "false", "Off", "no", "none"])
    def test_false_values(self, value):
        options = parse_options_text(f"skip_di_compilation = {value}\n")
        assert options.skip_di_compilation is False

    def test_unknown_keys_are_ignored_with_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="platformsh_build")
        options = parse_options_text("skip_scd = 1\nsome_future_flag = 1\n")
        assert options.skip_scd is True
        assert "some_future_flag" in caplog.text

    def test_invalid_threads(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_options_text("scd_threads = many\n")
        assert exc_info.value.code == "invalid_build_options"

    def test_inline_comments_are_stripped(self):
        options = parse_options_text(
            "scd_threads = 4 ; tuned for enterprise\n"
            'exclude_themes = "Magento/luma" # keep blank\n'
            "skip_scd = 0 ; deploy everything\n"
        )
        assert options.scd_threads == 4
        assert options.exclude_themes == ["Magento/luma"]
        assert options.skip_scd is False

    def test_repeated_key_keeps_last_value(self):
        options = parse_options_text("scd_threads = 2\nscd_threads = 6\n")
        assert options.scd_threads == 6

    def test_malformed_ini(self):
        with pytest.raises(ConfigurationError):
            parse_options_text("this line has no separator\n")

    def test_options_are_frozen(self):
        options = parse_options_text("skip_scd = 1\n")
        with pytest.raises(Exception):
            options.skip_scd = False


class TestLoadBuildOptions:
    """Tests for load_build_options function."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_build_options(tmp_path / "build_options.ini") == BuildOptions()

    def test_loads_file(self, tmp_path):
        path = tmp_path / "build_options.ini"
        path.write_text("skip_di_compilation = true\n")
        assert load_build_options(path).skip_di_compilation is True
