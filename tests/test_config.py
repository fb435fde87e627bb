"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

from platformsh_build.config import Settings, get_settings, print_settings_json


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        settings = Settings()

        assert settings.magento_root == Path.cwd()
        assert settings.options_file == Path("build_options.ini")
        assert settings.hotfixes_dir == Path("m2-hotfixes")
        assert settings.init_dir == Path("init")
        assert settings.env_snapshot_file == Path("app/etc/env.php")
        assert settings.php_binary == "/usr/bin/php"
        assert settings.default_locale == "en_US"
        assert settings.log_level == "INFO"

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "PLATFORMSH_BUILD_MAGENTO_ROOT": "/app",
                "PLATFORMSH_BUILD_PHP_BINARY": "php8.2",
                "PLATFORMSH_BUILD_LOG_LEVEL": "DEBUG",
            },
        ):
            settings = Settings()
            assert settings.magento_root == Path("/app")
            assert settings.php_binary == "php8.2"
            assert settings.log_level == "DEBUG"

    def test_resolve_relative_and_absolute(self) -> None:
        settings = Settings(magento_root=Path("/app"))
        assert settings.resolve(Path("init")) == Path("/app/init")
        assert settings.resolve(Path("/tmp/x")) == Path("/tmp/x")


class TestGetSettings:
    """Test get_settings function."""

    def test_get_settings_returns_settings(self) -> None:
        """get_settings should return a Settings instance."""
        assert isinstance(get_settings(), Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_print_settings_json(self) -> None:
        """print_settings_json should return valid JSON."""
        parsed = json.loads(print_settings_json(Settings()))

        assert "magento_root" in parsed
        assert "init_dir" in parsed
        assert "php_binary" in parsed

    def test_print_settings_json_default(self) -> None:
        """print_settings_json without args should use default settings."""
        parsed = json.loads(print_settings_json())
        assert "magento_root" in parsed
