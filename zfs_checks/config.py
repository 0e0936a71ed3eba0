#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Configuration of the ZFS checks

The checks are configured using an ini-style configuration file, i.e. a file
with sections started by lines of the form '[section]' and consisting of
'key: value' (or 'key = value') lines. Both sections are optional, every key
has a default:

    [snapshots]
    prefix: zfs_snapshots
    pools: tank backup
    important: tank/home "tank/my data"
    snapshot_filter: @zfs-auto-snap_(hourly|daily)
    ignore: /\\.system|/\\.reservation
    newest_warn: 90
    newest_crit: 180
    oldest_warn: 27
    oldest_crit: 180
    count_warn: 200
    count_crit: 500

    [scrub]
    prefix: zfs_scrub
    pools: tank
    runtime_warn: 28800
    runtime_crit: 86400
    lastrun_warn: 60
    lastrun_crit: 90

Lists are split according to shell rules. Ages of the newest snapshot are
given in minutes, ages of the oldest snapshot and of the last scrub in days,
scrub run times in seconds.
"""

from __future__ import annotations

import configparser
import os
import re
import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, field_validator, ValidationError

from zfs_checks.exceptions import BailOut, ConfigError
from zfs_checks.log import logger, VERBOSE

__all__ = [
    "default_config_file",
    "load_config",
    "ScrubConfig",
    "SnapshotConfig",
]

_logger = logger.getChild("config")

CONFIG_FILE_NAME = "zfs_checks.cfg"


def default_config_file() -> Path:
    return Path(os.getenv("MK_CONFDIR", ""), CONFIG_FILE_NAME)


def _split_list(value: object) -> object:
    if isinstance(value, str):
        return tuple(shlex.split(value))
    return value


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"invalid regular expression {pattern!r}: {e}") from e


def _check_levels(levels: Sequence[tuple[str, int, int, str]]) -> None:
    for name, warn, crit, unit in levels:
        if warn > crit:
            raise ConfigError(
                f"warning must be smaller than critical ({name}: {warn} {unit} > {crit} {unit})"
            )


class SnapshotConfig(BaseModel, frozen=True):
    prefix: str = "zfs_snapshots"
    pools: tuple[str, ...] = ()
    important: tuple[str, ...] = ()
    snapshot_filter: str = ""
    ignore: str = ""
    newest_warn: int = 90
    newest_crit: int = 180
    oldest_warn: int = 27
    oldest_crit: int = 180
    count_warn: int = 200
    count_crit: int = 500

    @field_validator("pools", "important", mode="before")
    @classmethod
    def split_lists(cls, value: object) -> object:
        return _split_list(value)

    @field_validator("ignore")
    @classmethod
    def valid_regex(cls, value: str) -> str:
        _compile(value)
        return value

    @field_validator("snapshot_filter")
    @classmethod
    def valid_filter(cls, value: str) -> str:
        if value.startswith("@"):
            _compile(value)
        return value

    def check_levels(self) -> None:
        """Raise a ConfigError if any warning level exceeds its critical level"""
        _check_levels(
            (
                ("newest", self.newest_warn, self.newest_crit, "min"),
                ("oldest", self.oldest_warn, self.oldest_crit, "days"),
                ("count", self.count_warn, self.count_crit, "snapshots"),
            )
        )


class ScrubConfig(BaseModel, frozen=True):
    prefix: str = "zfs_scrub"
    pools: tuple[str, ...] = ()
    runtime_warn: int = 28800
    runtime_crit: int = 86400
    lastrun_warn: int = 60
    lastrun_crit: int = 90

    @field_validator("pools", mode="before")
    @classmethod
    def split_lists(cls, value: object) -> object:
        return _split_list(value)

    def check_levels(self) -> None:
        """Raise a ConfigError if any warning level exceeds its critical level"""
        _check_levels(
            (
                ("runtime", self.runtime_warn, self.runtime_crit, "s"),
                ("last run", self.lastrun_warn, self.lastrun_crit, "days"),
            )
        )


_ConfigT = TypeVar("_ConfigT", SnapshotConfig, ScrubConfig)


def _read_section(cfg_file: Path, section: str) -> dict[str, object]:
    config = configparser.ConfigParser(interpolation=None)
    _logger.debug("trying to read %s", cfg_file)
    try:
        files_read = config.read(cfg_file)
    except configparser.Error as e:
        raise BailOut(f"cannot parse configuration file {cfg_file}: {e}") from e
    _logger.log(VERBOSE, "read configuration file(s): %r", files_read)
    if not config.has_section(section):
        return {}
    return {k: config.get(section, k) for k in config.options(section)}


def load_config(
    model: type[_ConfigT],
    section: str,
    cfg_file: Path | None = None,
    overrides: Mapping[str, object] | None = None,
) -> _ConfigT:
    """Read one section of the configuration file

    Values from ``overrides`` (usually the command line) win over the ones of
    the file. ``None`` values in ``overrides`` are ignored. A missing default
    configuration file means all defaults, a missing explicitly given file is
    an error.
    """
    raw: dict[str, object]
    if cfg_file is None:
        cfg_file = default_config_file()
        raw = _read_section(cfg_file, section) if cfg_file.exists() else {}
    elif not cfg_file.exists():
        raise BailOut(f"configuration file {cfg_file} not found")
    else:
        raw = _read_section(cfg_file, section)

    raw.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise BailOut(
            "invalid configuration in section [%s]: %s"
            % (
                section,
                ", ".join(
                    f"{'.'.join(str(l) for l in err['loc'])}: {err['msg']}" for err in e.errors()
                ),
            )
        ) from e
