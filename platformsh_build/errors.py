"""Error definitions for platformsh_build.

Every error carries a stable code and the process exit status the CLI
should terminate with.
"""

from __future__ import annotations

from platformsh_build.types import STATIC_DEPLOY_EXIT_CODE

# Error code constants
COMMAND_FAILED = "command_failed"
CONFIGURATION_ERROR = "configuration_error"
STATIC_CONTENT_DEPLOY_FAILED = "static_content_deploy_failed"
FILESYSTEM_ERROR = "filesystem_error"


class BuildError(Exception):
    """Base error for build hook operations."""

    def __init__(
        self,
        message: str,
        code: str = "build_error",
        exit_code: int = 1,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.exit_code = exit_code


class CommandError(BuildError):
    """Raised when an external command returns a non-zero status."""

    def __init__(
        self,
        command: str,
        exit_code: int,
        output: list[str] | None = None,
    ) -> None:
        super().__init__(
            f"Command {command} returned code {exit_code}",
            code=COMMAND_FAILED,
            exit_code=exit_code,
        )
        self.command = command
        self.output = output or []


class ConfigurationError(BuildError):
    """Raised when expected input is absent or malformed."""

    def __init__(self, message: str, code: str = CONFIGURATION_ERROR) -> None:
        super().__init__(message, code=code, exit_code=2)


class StaticContentDeployError(BuildError):
    """Raised when static content deployment fails for any reason."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            code=STATIC_CONTENT_DEPLOY_FAILED,
            exit_code=STATIC_DEPLOY_EXIT_CODE,
        )


class FilesystemOperationError(BuildError):
    """Raised when a copy, delete or recreate operation fails."""

    def __init__(self, message: str, code: str = FILESYSTEM_ERROR) -> None:
        super().__init__(message, code=code, exit_code=1)


__all__ = [
    "COMMAND_FAILED",
    "CONFIGURATION_ERROR",
    "FILESYSTEM_ERROR",
    "STATIC_CONTENT_DEPLOY_FAILED",
    "BuildError",
    "CommandError",
    "ConfigurationError",
    "FilesystemOperationError",
    "StaticContentDeployError",
]
