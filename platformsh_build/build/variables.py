"""Run parameters derived from platform variables.

Custom variables set in the Platform.sh project (PLATFORM_VARIABLES)
take precedence over raw process environment variables.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from platformsh_build.build.options import split_csv
from platformsh_build.errors import ConfigurationError

logger = logging.getLogger(__name__)

CLEAN_STATIC_FILES = "CLEAN_STATIC_FILES"
STATIC_CONTENT_STASH_LOCATION = "STATIC_CONTENT_STASH_LOCATION"
STATIC_CONTENT_EXCLUDE_THEMES = "STATIC_CONTENT_EXCLUDE_THEMES"
STATIC_CONTENT_THREADS = "STATIC_CONTENT_THREADS"
VERBOSE_COMMANDS = "VERBOSE_COMMANDS"
PLATFORM_MODE = "PLATFORM_MODE"

ENTERPRISE_MODE = "enterprise"
ENTERPRISE_THREADS = 3
DEFAULT_THREADS = 1


class BuildVariables(BaseModel):
    """Typed run parameters for one build."""

    model_config = ConfigDict(frozen=True)

    clean_static_files: bool = True
    static_content_stash_location: str | None = None
    static_content_exclude_themes: list[str] = Field(default_factory=list)
    static_content_threads: int | None = None
    verbose_commands: str = ""


def _parse_threads(source: str, value: Any) -> int:
    try:
        threads = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{STATIC_CONTENT_THREADS} from {source} is not an integer: {value!r}",
            code="invalid_thread_count",
        ) from e
    if threads < 0:
        raise ConfigurationError(
            f"{STATIC_CONTENT_THREADS} from {source} must be >= 0, got {threads}",
            code="invalid_thread_count",
        )
    return threads


def resolve_static_content_threads(
    variables: Mapping[str, Any],
    environ: Mapping[str, str],
) -> int | None:
    """Resolve static deploy thread count.

    Precedence: custom variable, process environment, platform mode
    (3 for enterprise, else 1). Returns None when none of them is set.
    """
    if variables.get(STATIC_CONTENT_THREADS) not in (None, ""):
        return _parse_threads("platform variables", variables[STATIC_CONTENT_THREADS])
    if environ.get(STATIC_CONTENT_THREADS):
        return _parse_threads("environment", environ[STATIC_CONTENT_THREADS])
    mode = environ.get(PLATFORM_MODE)
    if mode is not None:
        return ENTERPRISE_THREADS if mode == ENTERPRISE_MODE else DEFAULT_THREADS
    return None


def load_build_variables(
    variables: Mapping[str, Any],
    environ: Mapping[str, str],
) -> BuildVariables:
    """Derive BuildVariables from decoded platform variables.

    Args:
        variables: Decoded PLATFORM_VARIABLES.
        environ: Raw process environment.

    Returns:
        BuildVariables for this run.
    """
    exclude = variables.get(STATIC_CONTENT_EXCLUDE_THEMES)
    if isinstance(exclude, list):
        themes = [str(t).strip() for t in exclude if str(t).strip()]
    else:
        themes = split_csv(str(exclude) if exclude is not None else None)

    stash = variables.get(STATIC_CONTENT_STASH_LOCATION)

    result = BuildVariables(
        clean_static_files=variables.get(CLEAN_STATIC_FILES) != "disabled",
        static_content_stash_location=str(stash) if stash else None,
        static_content_exclude_themes=themes,
        static_content_threads=resolve_static_content_threads(variables, environ),
        verbose_commands="-vvv" if variables.get(VERBOSE_COMMANDS) == "enabled" else "",
    )
    logger.debug("Build variables: %s", result.model_dump())
    return result


__all__ = [
    "BuildVariables",
    "load_build_variables",
    "resolve_static_content_threads",
]
