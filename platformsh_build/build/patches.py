"""Patch application and sample data marshalling.

Patches are applied with `git apply` in lexicographic filename order so
that every build applies them in the same sequence.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from platformsh_build.build.staging import mirror_tree
from platformsh_build.types import StageOutcome, StageResult

if TYPE_CHECKING:
    from platformsh_build.config import Settings
    from platformsh_build.environment import Environment

logger = logging.getLogger(__name__)

SAMPLE_DATA_MEDIA_DIR = Path("vendor/magento/sample-data-media")
MEDIA_DIR = Path("pub/media")


def list_patch_files(patches_dir: Path) -> list[Path]:
    """Return patch files in lexicographic filename order.

    Args:
        patches_dir: Directory holding patch files.

    Returns:
        Sorted list of files; empty if the directory does not exist.
    """
    if not patches_dir.is_dir():
        return []
    files = [p for p in patches_dir.iterdir() if p.is_file()]
    return sorted(files, key=lambda p: p.name)


def apply_patch_directory(env: Environment, patches_dir: Path) -> list[Path]:
    """Apply every patch in a directory with git.

    Returns:
        Patch files applied, in order.

    Raises:
        CommandError: If any patch fails to apply.
    """
    files = list_patch_files(patches_dir)
    for patch_file in files:
        env.execute(f"git apply {shlex.quote(str(patch_file))}")
    return files


def apply_vendor_patches(env: Environment, settings: Settings) -> None:
    """Run the patch script shipped as a composer dependency."""
    env.log("Applying patches.")
    script = settings.resolve(settings.vendor_patch_script)
    env.execute(f"{settings.php_binary} {shlex.quote(str(script))}")


def apply_committed_patches(env: Environment, settings: Settings) -> StageOutcome:
    """Apply hotfixes committed to the project repository.

    A missing hotfix directory is not an error.
    """
    patches_dir = settings.resolve(settings.hotfixes_dir)
    env.log(f"Checking if patches exist under {patches_dir}")
    if not patches_dir.is_dir():
        return StageOutcome.SKIPPED
    apply_patch_directory(env, patches_dir)
    return StageOutcome.COMPLETED


def marshal_sample_data(env: Environment, root: Path) -> StageResult | None:
    """Mirror vendor sample data media into pub/media.

    Returns:
        StageResult of the mirror, or None if no sample data is installed.
    """
    sample_data_dir = root / SAMPLE_DATA_MEDIA_DIR
    if not sample_data_dir.exists():
        logger.debug("No sample data media at %s", sample_data_dir)
        return None
    env.log("Sample data media found. Marshalling to pub/media.")
    return mirror_tree(sample_data_dir, root / MEDIA_DIR)


__all__ = [
    "MEDIA_DIR",
    "SAMPLE_DATA_MEDIA_DIR",
    "apply_committed_patches",
    "apply_patch_directory",
    "apply_vendor_patches",
    "list_patch_files",
    "marshal_sample_data",
]
