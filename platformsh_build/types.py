"""Shared type definitions for platformsh_build.

This module contains dataclasses, enums and constants shared across
subpackages to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Directories that stay writable at runtime. Order matters for staging.
WRITABLE_DIRS: tuple[str, ...] = ("app/etc", "pub/media", "generated")

# Marker written after a successful static content deployment
STATIC_DEPLOY_MARKER = "var/.static_content_deploy"

# Exit status for a failure inside static content deployment
STATIC_DEPLOY_EXIT_CODE = 5


class StageOutcome(str, Enum):
    """Outcome of a single build stage."""

    COMPLETED = "completed"
    SKIPPED = "skipped"


class FilesystemAction(str, Enum):
    """Kind of filesystem operation performed."""

    COPIED = "copied"
    REMOVED = "removed"
    CREATED = "created"
    CLEARED = "cleared"


@dataclass
class StageResult:
    """Result of a filesystem staging operation."""

    action: FilesystemAction
    path: Path
    entries: list[str] = field(default_factory=list)


@dataclass
class BuildReport:
    """Ordered record of stage outcomes for one build run."""

    stages: list[tuple[str, StageOutcome]] = field(default_factory=list)

    def record(self, name: str, outcome: StageOutcome) -> None:
        self.stages.append((name, outcome))

    def outcome(self, name: str) -> StageOutcome | None:
        for stage_name, outcome in self.stages:
            if stage_name == name:
                return outcome
        return None


__all__ = [
    "STATIC_DEPLOY_EXIT_CODE",
    "STATIC_DEPLOY_MARKER",
    "WRITABLE_DIRS",
    "BuildReport",
    "FilesystemAction",
    "StageOutcome",
    "StageResult",
]
