#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import io
import logging

import pytest

from zfs_checks import log


def test_default_is_silent() -> None:
    assert log.logger.level == logging.WARNING
    assert all(isinstance(h, logging.NullHandler) for h in log.logger.handlers)


@pytest.mark.parametrize(
    "verbosity, level",
    [
        (0, logging.WARNING),
        (1, log.VERBOSE),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
    ],
)
def test_verbosity_to_log_level(verbosity: int, level: int) -> None:
    assert log.verbosity_to_log_level(verbosity) == level


def test_setup_logging_handler() -> None:
    stream = io.StringIO()
    log.setup_logging_handler(stream)
    log.logger.setLevel(log.VERBOSE)
    log.logger.getChild("config").log(log.VERBOSE, "read %s", "zfs_checks.cfg")
    log.logger.debug("not shown")
    assert stream.getvalue() == "VERBOSE: read zfs_checks.cfg\n"


def test_setup_console_logging(capsys: pytest.CaptureFixture[str]) -> None:
    log.setup_console_logging(1)
    log.logger.warning("to stderr")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "WARNING: to stderr\n"
