"""Access to the Platform.sh environment.

This module handles:
- Decoding platform-injected variables, routes and relationships
- Running shell commands synchronously with status and output capture
- Launching fire-and-forget background commands

Platform.sh injects its configuration as base64-encoded JSON in
PLATFORM_* environment variables.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from platformsh_build.errors import CommandError, ConfigurationError

logger = logging.getLogger(__name__)

PLATFORM_VARIABLES = "PLATFORM_VARIABLES"
PLATFORM_ROUTES = "PLATFORM_ROUTES"
PLATFORM_RELATIONSHIPS = "PLATFORM_RELATIONSHIPS"

# Exit status reported when the shell itself cannot be spawned
SPAWN_FAILURE_EXIT_CODE = 127


def decode_platform_value(name: str, raw: str) -> dict[str, Any]:
    """Decode a base64-then-JSON encoded platform variable.

    Args:
        name: Variable name, used in error messages.
        raw: Encoded value.

    Returns:
        Decoded mapping.

    Raises:
        ConfigurationError: If the value is not base64 JSON object.
    """
    try:
        data = json.loads(base64.b64decode(raw, validate=True))
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(
            f"Cannot decode {name}: {e}",
            code="invalid_platform_variable",
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected {name} to decode to an object, got {type(data).__name__}",
            code="invalid_platform_variable",
        )
    return data


class Environment:
    """Server environment accessor for the build hook.

    Args:
        root: Working directory for executed commands.
        environ: Process environment to read platform variables from.
            Defaults to os.environ.
    """

    def __init__(
        self,
        root: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.root = root or Path.cwd()
        self.environ: Mapping[str, str] = (
            environ if environ is not None else os.environ
        )

    def _decode(self, name: str) -> dict[str, Any]:
        raw = self.environ.get(name)
        if raw is None or raw == "":
            logger.debug("%s is not set, using empty mapping", name)
            return {}
        return decode_platform_value(name, raw)

    def get_variables(self) -> dict[str, Any]:
        """Get custom variables from PLATFORM_VARIABLES."""
        return self._decode(PLATFORM_VARIABLES)

    def get_routes(self) -> dict[str, Any]:
        """Get routes information from PLATFORM_ROUTES."""
        return self._decode(PLATFORM_ROUTES)

    def get_relationships(self) -> dict[str, Any]:
        """Get relationships information from PLATFORM_RELATIONSHIPS."""
        return self._decode(PLATFORM_RELATIONSHIPS)

    def log(self, message: str) -> None:
        """Write a single line to the build log."""
        logger.info(message)

    def execute(self, command: str) -> list[str]:
        """Run a shell command and return its stdout lines.

        Logs the command, its status and its output before returning.

        Args:
            command: Shell command line.

        Returns:
            Captured stdout split into lines.

        Raises:
            CommandError: If the command exits with a non-zero status.
        """
        self.log(f"Command:{command}")

        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=self.root,
                stdout=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            self.log(f"Status:{SPAWN_FAILURE_EXIT_CODE}")
            self.log(f"Output:[{e!s}]")
            raise CommandError(command, SPAWN_FAILURE_EXIT_CODE, [str(e)]) from e

        output = result.stdout.splitlines() if result.stdout else []
        self.log(f"Status:{result.returncode}")
        self.log(f"Output:{output!r}")

        if result.returncode != 0:
            raise CommandError(command, result.returncode, output)

        return output

    def background_execute(self, command: str) -> None:
        """Launch a command detached from this process.

        Output is discarded. Only the wrapper shell is reaped; it exits as
        soon as the command is backgrounded.
        """
        command = f"nohup {command} 1>/dev/null 2>&1 &"
        self.log(f"Execute command in background: {command}")
        try:
            wrapper = subprocess.Popen(
                command,
                shell=True,
                cwd=self.root,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
            wrapper.wait()
        except OSError as e:
            logger.warning("Failed to launch background command: %s", e)


__all__ = [
    "PLATFORM_RELATIONSHIPS",
    "PLATFORM_ROUTES",
    "PLATFORM_VARIABLES",
    "Environment",
    "decode_platform_value",
]
