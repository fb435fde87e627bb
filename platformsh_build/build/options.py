"""Build options loaded from the optional INI file at the Magento root.

The file has no section headers, for example:

    skip_di_compilation = true
    exclude_themes = "Magento/luma, Magento/blank"
    scd_threads = 4

Absence of the file is not an error: every option has a default.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from platformsh_build.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Values parse_ini_file treats as false
_FALSE_VALUES = {"", "0", "false", "off", "no", "none", "null"}
_DEFAULT_SECTION = "build"


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated list, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class BuildOptions(BaseModel):
    """Typed build options.

    Attributes:
        skip_di_compilation: Skip setup:di:compile.
        skip_di_clearing: Accepted for compatibility; clearing always runs.
        exclude_themes: Themes excluded from static content deployment.
        scd_threads: Static content deploy parallelism.
        skip_scd: Skip static content deployment entirely.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    skip_di_compilation: bool = False
    skip_di_clearing: bool = False
    exclude_themes: list[str] = Field(default_factory=list)
    scd_threads: int | None = Field(default=None, ge=0)
    skip_scd: bool = False

    @field_validator(
        "skip_di_compilation", "skip_di_clearing", "skip_scd", mode="before"
    )
    @classmethod
    def parse_ini_bool(cls, v: Any) -> Any:
        """Interpret INI booleans the way parse_ini_file does."""
        if isinstance(v, str):
            return v.strip().lower() not in _FALSE_VALUES
        return v

    @field_validator("exclude_themes", mode="before")
    @classmethod
    def parse_theme_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return split_csv(v)
        return v

    @field_validator("scd_threads", mode="before")
    @classmethod
    def parse_threads(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_options_text(text: str) -> BuildOptions:
    """Parse INI text into BuildOptions.

    Unknown keys are logged as a warning and ignored. Inline `;` and `#`
    comments are stripped and a repeated key keeps its last value.

    Raises:
        ConfigurationError: If the text is not valid INI or a value is invalid.
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        inline_comment_prefixes=(";", "#"),
        strict=False,
    )
    try:
        parser.read_string(f"[{_DEFAULT_SECTION}]\n{text}")
    except configparser.Error as e:
        raise ConfigurationError(
            f"Invalid build options file: {e}", code="invalid_build_options"
        ) from e

    raw: dict[str, str] = {}
    for section in parser.sections():
        for key, value in parser.items(section):
            raw[key] = _strip_quotes(value)

    known = set(BuildOptions.model_fields)
    for key in sorted(set(raw) - known):
        logger.warning("Ignoring unknown build option: %s", key)

    try:
        return BuildOptions.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid build options: {e}", code="invalid_build_options"
        ) from e


def load_build_options(path: Path) -> BuildOptions:
    """Load build options from an INI file.

    Args:
        path: Path to the options file.

    Returns:
        Parsed options, or defaults if the file does not exist.
    """
    if not path.is_file():
        logger.debug("No build options file at %s, using defaults", path)
        return BuildOptions()
    logger.info("Loading build options from %s", path)
    return parse_options_text(path.read_text(encoding="utf-8"))


__all__ = ["BuildOptions", "load_build_options", "parse_options_text", "split_csv"]
