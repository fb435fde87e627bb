"""Build service module.

This module provides the build hook pipeline:
- run_build(): main entry point, runs every stage in order
- DI compilation and autoload regeneration
- Staging of static assets and writable directories into init/

Stages run strictly in sequence. A CommandError from any stage aborts the
remaining stages. Static content deployment converts its own failures to
StaticContentDeployError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from platformsh_build.build.options import BuildOptions, load_build_options
from platformsh_build.build.patches import apply_committed_patches, apply_vendor_patches
from platformsh_build.build.staging import (
    clear_directory,
    copy_file,
    copy_tree_contents,
    ensure_directory,
    remove_path,
    stage_writable_directory,
)
from platformsh_build.build.static_content import STATIC_DIR, deploy_static_content
from platformsh_build.build.variables import BuildVariables, load_build_variables
from platformsh_build.types import (
    STATIC_DEPLOY_MARKER,
    WRITABLE_DIRS,
    BuildReport,
    StageOutcome,
)

if TYPE_CHECKING:
    from platformsh_build.config import Settings
    from platformsh_build.environment import Environment

logger = logging.getLogger(__name__)

GENERATED_DIRS = (Path("generated/code"), Path("generated/metadata"))
DEFAULT_STATIC_STASH = Path("pub/static")


@dataclass
class BuildContext:
    """Everything one build run needs, created fresh per run."""

    env: Environment
    settings: Settings
    options: BuildOptions = field(default_factory=BuildOptions)
    variables: BuildVariables = field(default_factory=BuildVariables)
    report: BuildReport = field(default_factory=BuildReport)
    # Paths staged into init/ during this run; survive init clearing
    staged: list[Path] = field(default_factory=list)

    @property
    def root(self) -> Path:
        return self.settings.magento_root

    @property
    def init_dir(self) -> Path:
        return self.settings.resolve(self.settings.init_dir)

    def magento(self, command: str) -> str:
        """Compose a bin/magento command line."""
        parts = [self.settings.php_binary, "./bin/magento", command]
        if self.variables.verbose_commands:
            parts.append(self.variables.verbose_commands)
        return " ".join(parts)


def compile_di(ctx: BuildContext) -> StageOutcome:
    """Clear generated code and, unless skipped, run DI compilation."""
    env = ctx.env
    env.log("Clearing generated code.")
    if ctx.options.skip_di_clearing:
        logger.warning("skip_di_clearing is set but generated code is always cleared")
    for generated in GENERATED_DIRS:
        clear_directory(ctx.root / generated)

    if ctx.options.skip_di_compilation:
        env.log("Skip running DI compilation")
        return StageOutcome.SKIPPED

    env.log("Enabling all modules")
    env.execute(ctx.magento("module:enable --all"))
    env.log("Running DI compilation")
    env.execute(ctx.magento("setup:di:compile"))
    return StageOutcome.COMPLETED


def regenerate_autoload(ctx: BuildContext) -> None:
    ctx.env.log("Regenerating autoloader.")
    ctx.env.execute(f"{ctx.settings.composer_binary} dump-autoload -o")


def stash_location(ctx: BuildContext) -> Path:
    """Where generated static content is held until deploy."""
    location = ctx.variables.static_content_stash_location
    if location:
        path = Path(location)
        return path if path.is_absolute() else ctx.root / path
    return ctx.init_dir / DEFAULT_STATIC_STASH


def stage_static_content(ctx: BuildContext) -> StageOutcome:
    """Copy generated static assets and the deploy marker into init/."""
    marker = ctx.root / STATIC_DEPLOY_MARKER
    deployed = ctx.report.outcome("static_content") == StageOutcome.COMPLETED
    if not deployed or not marker.exists():
        ctx.env.log("Static content was not deployed, nothing to stage.")
        return StageOutcome.SKIPPED

    stash = stash_location(ctx)
    ctx.env.log(f"Moving static content to {stash}")
    ensure_directory(stash.parent)
    # A symlink or stale copy from a previous build must not be written through
    remove_path(stash)
    static_dir = ensure_directory(ctx.root / STATIC_DIR).path
    copy_tree_contents(static_dir, stash)

    held_marker = ctx.init_dir / STATIC_DEPLOY_MARKER
    copy_file(marker, held_marker)

    ctx.staged.extend([stash, held_marker])
    return StageOutcome.COMPLETED


def clear_init_dir(ctx: BuildContext) -> None:
    """Wipe init/ except what this run has already staged."""
    ctx.env.log("Clearing temporary directory.")
    result = clear_directory(ctx.init_dir, keep=ctx.staged)
    logger.debug("Removed from init: %s", result.entries)


def remove_snapshots(ctx: BuildContext) -> None:
    """Delete env and config snapshots so deploy regenerates them."""
    for snapshot in (ctx.settings.env_snapshot_file, ctx.settings.config_snapshot_file):
        path = ctx.settings.resolve(snapshot)
        ctx.env.log(f"Removing {snapshot}")
        remove_path(path)


def stage_writable_directories(ctx: BuildContext) -> None:
    """Back up writable directories to init/ and leave them empty.

    Writable directories will be erased when the writable filesystem is
    mounted to them.
    """
    ctx.env.log("Copying writable directories to temp directory.")
    for relative in WRITABLE_DIRS:
        result = stage_writable_directory(ctx.root, ctx.init_dir, relative)
        logger.debug("Staged %s: %d entries", relative, len(result.entries))


def run_build(
    env: Environment,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> BuildReport:
    """Run the build hook pipeline.

    Args:
        env: Environment accessor.
        settings: Application settings.
        environ: Process environment for variable derivation.
            Defaults to the accessor's environment.

    Returns:
        BuildReport with the outcome of each stage.

    Raises:
        CommandError: If an external command fails.
        StaticContentDeployError: If static content deployment fails.
        ConfigurationError: If options or variables are malformed.
    """
    ctx = BuildContext(env=env, settings=settings)
    env.log("Start build.")

    ctx.options = load_build_options(settings.resolve(settings.options_file))
    ctx.report.record("load_options", StageOutcome.COMPLETED)

    ctx.variables = load_build_variables(
        env.get_variables(), environ if environ is not None else env.environ
    )
    ctx.report.record("load_variables", StageOutcome.COMPLETED)

    apply_vendor_patches(env, settings)
    ctx.report.record("vendor_patches", StageOutcome.COMPLETED)

    ctx.report.record("committed_patches", apply_committed_patches(env, settings))
    ctx.report.record("compile_di", compile_di(ctx))

    regenerate_autoload(ctx)
    ctx.report.record("autoload", StageOutcome.COMPLETED)

    ctx.report.record(
        "static_content",
        deploy_static_content(env, settings, ctx.options, ctx.variables),
    )
    ctx.report.record("stage_static_content", stage_static_content(ctx))

    clear_init_dir(ctx)
    ctx.report.record("clear_init", StageOutcome.COMPLETED)

    remove_snapshots(ctx)
    ctx.report.record("remove_snapshots", StageOutcome.COMPLETED)

    stage_writable_directories(ctx)
    ctx.report.record("writable_dirs", StageOutcome.COMPLETED)

    env.log("Build finished.")
    return ctx.report


__all__ = [
    "GENERATED_DIRS",
    "BuildContext",
    "clear_init_dir",
    "compile_di",
    "regenerate_autoload",
    "remove_snapshots",
    "run_build",
    "stage_static_content",
    "stage_writable_directories",
    "stash_location",
]
