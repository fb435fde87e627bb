"""Configuration settings for platformsh_build.

Uses pydantic-settings for config parsing from environment variables
and defaults. Paths are relative to the Magento root unless absolute.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the
    PLATFORMSH_BUILD_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLATFORMSH_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    magento_root: Path = Field(
        default_factory=Path.cwd,
        description="Root of the Magento codebase being built",
    )
    options_file: Path = Field(
        default=Path("build_options.ini"),
        description="Optional INI file with build options",
    )
    hotfixes_dir: Path = Field(
        default=Path("m2-hotfixes"),
        description="Directory of committed patches applied with git",
    )
    vendor_patch_script: Path = Field(
        default=Path("vendor/platformsh/magento2-configuration/patch.php"),
        description="Patch script shipped as a composer dependency",
    )
    init_dir: Path = Field(
        default=Path("init"),
        description="Holding area for writable directories and static content",
    )
    config_snapshot_file: Path = Field(
        default=Path("app/etc/config.local.php"),
        description="Application configuration snapshot (scopes, locales)",
    )
    env_snapshot_file: Path = Field(
        default=Path("app/etc/env.php"),
        description="Environment snapshot regenerated at deploy time",
    )

    # Binaries
    php_binary: str = Field(default="/usr/bin/php", description="PHP CLI binary")
    composer_binary: str = Field(default="composer", description="Composer binary")

    # Behaviour
    default_locale: str = Field(
        default="en_US",
        description="Locale always included in static content deployment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the Magento root."""
        if path.is_absolute():
            return path
        return self.magento_root / path


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
