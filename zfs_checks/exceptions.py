#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class ZFSCheckException(Exception):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


# Invalid levels, e.g. a warning threshold above the critical one. Reported
# as UNKNOWN for every entity that is evaluated with these levels.
class ConfigError(ZFSCheckException):
    pass


# No snapshots for a dataset, or none left after applying the filter.
class NoDataError(ZFSCheckException):
    pass


# A zfs or zpool call failed or returned output we do not understand.
class FetchError(ZFSCheckException):
    pass


# This is raised to print an error message and then end the program.
# The program should catch this at top level and exit the program
# with exit code 3, in order to be compatible with monitoring plug-in API.
class BailOut(ZFSCheckException):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
