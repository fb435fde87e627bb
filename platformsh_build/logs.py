"""Build log lifecycle.

The build hook writes one timestamped line per event to a single output
stream. BuildLog owns that stream handler: it is attached to the package
logger when a run starts and flushed and detached when the run ends.
"""

from __future__ import annotations

import logging
import sys
from types import TracebackType
from typing import TextIO

LOG_FORMAT = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "platformsh_build"


class BuildLog:
    """Timestamped build log attached to the package logger.

    Usage:
        with BuildLog(level="INFO") as log:
            log.info("Start build.")
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        level: str | int = logging.INFO,
        name: str = PACKAGE_LOGGER,
    ) -> None:
        self._stream = stream
        self._level = level
        self._logger = logging.getLogger(name)
        self._handler: logging.StreamHandler[TextIO] | None = None
        self._previous_level = self._logger.level

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    def open(self) -> BuildLog:
        """Attach the stream handler. Opening twice is a no-op."""
        if self._handler is not None:
            return self
        handler = logging.StreamHandler(self._stream or sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        self._previous_level = self._logger.level
        self._logger.setLevel(self._level)
        self._logger.addHandler(handler)
        self._handler = handler
        return self

    def close(self) -> None:
        """Flush and detach the stream handler."""
        if self._handler is None:
            return
        self._handler.flush()
        self._logger.removeHandler(self._handler)
        self._logger.setLevel(self._previous_level)
        self._handler = None

    def info(self, message: str) -> None:
        self._logger.info(message)

    def __enter__(self) -> BuildLog:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["DATE_FORMAT", "LOG_FORMAT", "PACKAGE_LOGGER", "BuildLog"]
