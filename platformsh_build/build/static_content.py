"""Static content deployment.

This module handles:
- Loading and flattening the application configuration snapshot
- Deriving locales and scope counts from the flattened configuration
- Composing per-locale setup:static-content:deploy commands
- Dispatching them through a bounded `xargs -P` fan-out

Any failure inside this stage is reported as StaticContentDeployError so
the process exits with a status distinct from other build failures.
"""

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from platformsh_build.build.staging import (
    clear_directory,
    ensure_directory,
    remove_path,
)
from platformsh_build.errors import ConfigurationError, StaticContentDeployError
from platformsh_build.types import STATIC_DEPLOY_MARKER, StageOutcome

if TYPE_CHECKING:
    from platformsh_build.build.options import BuildOptions
    from platformsh_build.build.variables import BuildVariables
    from platformsh_build.config import Settings
    from platformsh_build.environment import Environment

logger = logging.getLogger(__name__)

LOCALE_KEY_SUFFIX = "general/locale/code"
ADMIN_LOCALE_KEY = "admin_user/locale/code"
WEBSITES_SCOPE = "scopes/websites"
STORES_SCOPE = "scopes/stores"

STATIC_DIR = Path("pub/static")
VIEW_PREPROCESSED_DIR = Path("var/view_preprocessed")


def flatten_config(
    data: Mapping[str, Any] | list[Any],
    prefix: str = "",
) -> dict[str, Any]:
    """Flatten a nested configuration into slash-joined paths.

    Lists are flattened using their indexes as keys. Empty containers
    contribute no entries.

    Args:
        data: Nested mapping (or list) to flatten.
        prefix: Path prefix for recursion.

    Returns:
        Mapping from path to leaf value.
    """
    flattened: dict[str, Any] = {}
    items = data.items() if isinstance(data, Mapping) else enumerate(data)
    for key, value in items:
        path = f"{prefix}/{key}" if prefix else str(key)
        if isinstance(value, (Mapping, list)):
            flattened.update(flatten_config(value, path))
        else:
            flattened[path] = value
    return flattened


def filter_config(flattened: Mapping[str, Any], prefix: str) -> dict[str, Any]:
    """Return entries whose path is prefix or lies below it."""
    return {
        path: value
        for path, value in flattened.items()
        if path == prefix or path.startswith(f"{prefix}/")
    }


def derive_locales(
    flattened: Mapping[str, Any],
    default_locale: str = "en_US",
) -> list[str]:
    """Collect distinct locale codes from global and admin configuration.

    The default locale is always included. Order is first-seen.
    """
    locales: list[str] = []
    for path, value in flattened.items():
        if value in (None, ""):
            continue
        if path.endswith(LOCALE_KEY_SUFFIX) or ADMIN_LOCALE_KEY in path:
            locales.append(str(value))
    locales.append(default_locale)
    return list(dict.fromkeys(locales))


def count_scopes(flattened: Mapping[str, Any]) -> tuple[int, int]:
    """Count configured website and store scope entries.

    Returns:
        Tuple of (websites, stores).
    """
    return (
        len(filter_config(flattened, WEBSITES_SCOPE)),
        len(filter_config(flattened, STORES_SCOPE)),
    )


def exclude_theme_flags(themes: Iterable[str]) -> list[str]:
    """Format one --exclude-theme flag per theme, de-duplicated."""
    return [f"--exclude-theme={theme}" for theme in dict.fromkeys(themes)]


def resolve_threads(options: BuildOptions, variables: BuildVariables) -> int:
    """Pick the fan-out width: option, then variables, then 0 (tool decides)."""
    if options.scd_threads is not None:
        return options.scd_threads
    if variables.static_content_threads is not None:
        return variables.static_content_threads
    return 0


def compose_deploy_command(
    php_binary: str,
    locale: str,
    exclude_flags: list[str],
    verbosity: str = "",
) -> str:
    """Compose a setup:static-content:deploy command for a single locale."""
    parts = [php_binary, "./bin/magento", "setup:static-content:deploy", "-f"]
    parts.extend(exclude_flags)
    if verbosity:
        parts.append(verbosity)
    parts.append(locale)
    return " ".join(shlex.quote(p) for p in parts)


def compose_fanout_command(commands: list[str], threads: int) -> str:
    """Join per-locale commands into one bounded-parallelism xargs call.

    Commands are NUL-separated so xargs passes each one to bash unchanged.

    Args:
        commands: Shell commands to run.
        threads: Maximum concurrent commands; 0 lets xargs decide.

    Returns:
        A single shell command line.
    """
    quoted = " ".join(shlex.quote(c) for c in commands)
    return f"printf '%s\\0' {quoted} | xargs -0 -I CMD -P {threads} bash -c CMD"


def _php_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def load_config_snapshot(
    path: Path,
    env: Environment,
    php_binary: str,
) -> dict[str, Any]:
    """Load the application configuration snapshot.

    PHP snapshots are dumped to JSON through the PHP CLI. JSON and YAML
    snapshots are read directly.

    Raises:
        ConfigurationError: If the snapshot does not decode to a mapping.
        CommandError: If the PHP CLI fails.
    """
    if path.suffix == ".php":
        script = f"echo json_encode(require {_php_string(str(path))});"
        output = env.execute(f"{php_binary} -r {shlex.quote(script)}")
        try:
            data = json.loads("\n".join(output) or "{}")
        except ValueError as e:
            raise ConfigurationError(
                f"Cannot decode configuration snapshot {path}: {e}",
                code="invalid_config_snapshot",
            ) from e
    else:
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Cannot parse configuration snapshot {path}: {e}",
                    code="invalid_config_snapshot",
                ) from e

    # PHP encodes an empty array as []
    if data is None or data == []:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Expected configuration snapshot to be a mapping, "
            f"got {type(data).__name__}",
            code="invalid_config_snapshot",
        )
    return data


def clean_static_files(root: Path) -> None:
    """Remove previously generated static view files."""
    static_dir = root / STATIC_DIR
    clear_directory(static_dir, keep=[static_dir / ".htaccess"])
    remove_path(root / VIEW_PREPROCESSED_DIR)


def _deploy(
    env: Environment,
    settings: Settings,
    options: BuildOptions,
    variables: BuildVariables,
) -> StageOutcome:
    root = settings.magento_root
    snapshot = settings.resolve(settings.config_snapshot_file)
    if not snapshot.exists():
        env.log(f"Skipping static content deploy. {snapshot} does not exist.")
        return StageOutcome.SKIPPED

    flattened = flatten_config(load_config_snapshot(snapshot, env, settings.php_binary))
    websites, stores = count_scopes(flattened)
    if websites == 0 and stores == 0:
        env.log("Skipping static content deploy. No stores or websites are configured.")
        return StageOutcome.SKIPPED

    locales = derive_locales(flattened, settings.default_locale)
    excludes = exclude_theme_flags(
        [*options.exclude_themes, *variables.static_content_exclude_themes]
    )
    threads = resolve_threads(options, variables)

    if variables.clean_static_files:
        env.log("Clearing static view files.")
        clean_static_files(root)

    env.log(
        f"Generating static content for locales: {' '.join(locales)}"
        f" using {threads or 'default'} threads"
    )
    commands = [
        compose_deploy_command(
            settings.php_binary, locale, excludes, variables.verbose_commands
        )
        for locale in locales
    ]
    env.execute(compose_fanout_command(commands, threads))

    marker = root / STATIC_DEPLOY_MARKER
    ensure_directory(marker.parent)
    marker.touch()
    return StageOutcome.COMPLETED


def deploy_static_content(
    env: Environment,
    settings: Settings,
    options: BuildOptions,
    variables: BuildVariables,
) -> StageOutcome:
    """Run static content deployment.

    Returns:
        COMPLETED if content was generated, SKIPPED otherwise.

    Raises:
        StaticContentDeployError: On any failure within the stage.
    """
    if options.skip_scd:
        env.log("Skipping static content deploy. skip_scd is set in build options.")
        return StageOutcome.SKIPPED

    try:
        return _deploy(env, settings, options, variables)
    except Exception as e:
        env.log(f"Static content deploy failed: {e}")
        raise StaticContentDeployError(str(e)) from e


__all__ = [
    "clean_static_files",
    "compose_deploy_command",
    "compose_fanout_command",
    "count_scopes",
    "deploy_static_content",
    "derive_locales",
    "exclude_theme_flags",
    "filter_config",
    "flatten_config",
    "load_config_snapshot",
    "resolve_threads",
]
