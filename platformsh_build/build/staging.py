"""Filesystem staging for the build hook.

This module handles:
- Copying directory contents (dotfiles included) into the init holding area
- Removing and recreating writable directories before the remount
- Clearing directories while preserving selected entries
- Mirroring sample data media into pub/media

Each operation returns a StageResult so callers and tests can inspect
what was touched without shelling out.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from platformsh_build.errors import FilesystemOperationError
from platformsh_build.types import FilesystemAction, StageResult

logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> StageResult:
    """Create a directory and its parents if missing.

    Raises:
        FilesystemOperationError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemOperationError(
            f"Failed to create directory {path}: {e}", code="mkdir_error"
        ) from e
    return StageResult(FilesystemAction.CREATED, path)


def remove_path(path: Path) -> StageResult:
    """Remove a file, symlink or directory tree. Missing paths are fine.

    Symlinks are unlinked, never followed.

    Raises:
        FilesystemOperationError: If removal fails.
    """
    entries: list[str] = []
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
            entries.append(path.name)
        elif path.is_dir():
            shutil.rmtree(path)
            entries.append(path.name)
    except OSError as e:
        raise FilesystemOperationError(
            f"Failed to remove {path}: {e}", code="remove_error"
        ) from e
    return StageResult(FilesystemAction.REMOVED, path, entries)


def copy_file(source: Path, dest: Path) -> StageResult:
    """Copy a single file, creating the destination's parent directory.

    Raises:
        FilesystemOperationError: If copying fails.
    """
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
    except OSError as e:
        raise FilesystemOperationError(
            f"Failed to copy {source} -> {dest}: {e}", code="copy_error"
        ) from e
    return StageResult(FilesystemAction.COPIED, dest, [source.name])


def copy_tree_contents(source_dir: Path, dest_dir: Path) -> StageResult:
    """Copy every entry of source_dir, hidden ones included, into dest_dir.

    Existing files in dest_dir are overwritten. Symlinks are copied as
    symlinks.

    Args:
        source_dir: Directory whose contents are copied.
        dest_dir: Destination directory, created if missing.

    Returns:
        StageResult listing top-level entry names copied.

    Raises:
        FilesystemOperationError: If copying fails.
    """
    ensure_directory(dest_dir)
    copied: list[str] = []
    try:
        for item in sorted(source_dir.iterdir()):
            target = dest_dir / item.name
            if item.is_dir() and not item.is_symlink():
                shutil.copytree(item, target, symlinks=True, dirs_exist_ok=True)
            else:
                if target.is_symlink() or target.is_file():
                    target.unlink()
                shutil.copy2(item, target, follow_symlinks=False)
            copied.append(item.name)
    except OSError as e:
        raise FilesystemOperationError(
            f"Failed to copy {source_dir} -> {dest_dir}: {e}", code="copy_error"
        ) from e
    logger.debug("Copied %d entries from %s to %s", len(copied), source_dir, dest_dir)
    return StageResult(FilesystemAction.COPIED, dest_dir, copied)


def _normalize(path: Path) -> Path:
    """Absolute path with `..` segments collapsed, symlinks left alone."""
    return Path(os.path.normpath(Path(path).absolute()))


def clear_directory(path: Path, keep: Iterable[Path] = ()) -> StageResult:
    """Remove everything inside path except the kept paths.

    A kept path nested below path preserves its ancestors, while the
    ancestors' other children are still removed.

    Args:
        path: Directory to clear. Missing directories are fine.
        keep: Paths (anywhere below path) that must survive.

    Returns:
        StageResult listing removed entries relative to path.
    """
    result = StageResult(FilesystemAction.CLEARED, path)
    if not path.is_dir():
        return result

    keep_resolved = {_normalize(k) for k in keep}
    root = _normalize(path)

    def _clear(directory: Path) -> None:
        for item in sorted(directory.iterdir()):
            absolute = _normalize(item)
            if absolute in keep_resolved:
                continue
            if any(absolute in k.parents for k in keep_resolved):
                _clear(item)
                continue
            remove_path(item)
            result.entries.append(absolute.relative_to(root).as_posix())

    _clear(path)
    return result


def recreate_empty_directory(path: Path) -> StageResult:
    """Delete a directory and recreate it empty."""
    remove_path(path)
    ensure_directory(path)
    return StageResult(FilesystemAction.CREATED, path)


def stage_writable_directory(root: Path, init_dir: Path, relative: str) -> StageResult:
    """Back up one writable directory into the init holding area.

    Creates init/<relative>, ensures <relative> exists, copies its contents
    (dotfiles included), then deletes and recreates it empty.

    Args:
        root: Magento root.
        init_dir: Holding area root.
        relative: Writable directory relative to root.

    Returns:
        StageResult of the copy into the holding area.
    """
    live = root / relative
    held = init_dir / relative

    ensure_directory(held)
    ensure_directory(live)
    result = copy_tree_contents(live, held)
    recreate_empty_directory(live)
    return result


def mirror_tree(source_dir: Path, dest_dir: Path) -> StageResult:
    """Mirror a directory tree into dest_dir, parents before children.

    Directories are created when missing; files are copied over any
    existing file of the same name. Nothing in dest_dir is removed.

    Raises:
        FilesystemOperationError: If mirroring fails.
    """
    copied: list[str] = []
    try:
        ensure_directory(dest_dir)
        # sorted() on rglob output lists every parent before its children
        for item in sorted(source_dir.rglob("*")):
            rel_path = item.relative_to(source_dir)
            dest_path = dest_dir / rel_path
            if item.is_dir():
                dest_path.mkdir(exist_ok=True)
            else:
                shutil.copy2(item, dest_path)
            copied.append(rel_path.as_posix())
    except OSError as e:
        raise FilesystemOperationError(
            f"Failed to mirror {source_dir} -> {dest_dir}: {e}", code="mirror_error"
        ) from e
    return StageResult(FilesystemAction.COPIED, dest_dir, copied)


__all__ = [
    "clear_directory",
    "copy_file",
    "copy_tree_contents",
    "ensure_directory",
    "mirror_tree",
    "recreate_empty_directory",
    "remove_path",
    "stage_writable_directory",
]
