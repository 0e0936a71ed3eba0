#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
import sys
from typing import IO

# Just for reference, the predefined logging levels:
#
# syslog        Python         added here
# --------------------------------------------
# crit   2      CRITICAL 50
# err    3      ERROR    40
# warn   4      WARNING  30                 <= default level in Python
# info   6      INFO     20
#                              VERBOSE  15
# debug  7      DEBUG    10
#
# The checks write their results to stdout, so everything logged here has to
# go to stderr.

VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("zfs_checks")


def get_formatter(format_str: str = "%(levelname)s: %(message)s") -> logging.Formatter:
    """Returns a new message formater instance"""
    return logging.Formatter(format_str)


def clear_console_logging() -> None:
    logger.handlers[:] = []
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.WARNING)


# Set default logging handler to avoid "No handler found" warnings.
clear_console_logging()


def setup_logging_handler(stream: IO[str], formatter: logging.Formatter | None = None) -> None:
    """This method enables all log messages to be written to the given
    stream file object.
    """
    if formatter is None:
        formatter = get_formatter()

    handler = logging.StreamHandler(stream=stream)
    handler.setFormatter(formatter)

    del logger.handlers[:]  # Remove all previously existing handlers
    logger.addHandler(handler)


def setup_console_logging(verbosity: int) -> None:
    setup_logging_handler(
        sys.stderr,
        get_formatter(
            "%(levelname)s: %(lineno)s: %(message)s"
            if verbosity > 1
            else "%(levelname)s: %(message)s"
        ),
    )
    logger.setLevel(verbosity_to_log_level(verbosity))


def verbosity_to_log_level(verbosity: int) -> int:
    """Values for "verbosity":

      0: enables WARNING and above
      1: enables VERBOSE and above
      2: enables DEBUG and above (ALL messages)

    >>> verbosity_to_log_level(0) == logging.WARNING
    True
    >>> verbosity_to_log_level(5) == logging.DEBUG
    True
    """
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return VERBOSE
    return logging.DEBUG
