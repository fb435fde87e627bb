"""Tests for logs.py module."""

import io
import logging
import re

from platformsh_build.logs import PACKAGE_LOGGER, BuildLog

TIMESTAMPED = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] (.*)$")


class TestBuildLog:
    """Tests for BuildLog lifecycle."""

    def test_writes_timestamped_lines(self):
        stream = io.StringIO()
        with BuildLog(stream=stream) as log:
            log.info("Start build.")
            logging.getLogger(f"{PACKAGE_LOGGER}.environment").info("Command:ls")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert TIMESTAMPED.match(lines[0]).group(1) == "Start build."
        assert TIMESTAMPED.match(lines[1]).group(1) == "Command:ls"

    def test_handler_removed_on_close(self):
        stream = io.StringIO()
        log = BuildLog(stream=stream)
        before = list(logging.getLogger(PACKAGE_LOGGER).handlers)

        log.open()
        assert log.is_open
        log.close()

        assert not log.is_open
        assert logging.getLogger(PACKAGE_LOGGER).handlers == before
        logging.getLogger(PACKAGE_LOGGER).info("after close")
        assert "after close" not in stream.getvalue()

    def test_open_is_idempotent(self):
        stream = io.StringIO()
        log = BuildLog(stream=stream)
        log.open()
        log.open()
        log.info("once")
        log.close()
        assert stream.getvalue().count("once") == 1

    def test_level_filters_debug(self):
        stream = io.StringIO()
        with BuildLog(stream=stream, level="INFO") as log:
            log.logger.debug("hidden")
            log.info("shown")
        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()
