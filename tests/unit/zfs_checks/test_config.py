#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from pathlib import Path

import pytest

from zfs_checks.config import default_config_file, load_config, ScrubConfig, SnapshotConfig
from zfs_checks.exceptions import BailOut, ConfigError

_CONFIG = """
[snapshots]
prefix: ZFS_Snapshots
pools: tank backup
important: tank/home "tank/my data"
snapshot_filter: @zfs-auto-snap_(hourly|daily)
ignore: /\\.system
newest_warn = 30
newest_crit = 60

[scrub]
pools: tank
lastrun_warn: 7
lastrun_crit: 14
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "zfs_checks.cfg"
    path.write_text(_CONFIG)
    return path


def test_defaults_without_config_file() -> None:
    assert not default_config_file().exists()
    assert load_config(SnapshotConfig, "snapshots") == SnapshotConfig()
    assert load_config(ScrubConfig, "scrub") == ScrubConfig()


def test_default_values() -> None:
    config = SnapshotConfig()
    assert (config.newest_warn, config.newest_crit) == (90, 180)
    assert (config.oldest_warn, config.oldest_crit) == (27, 180)
    assert (config.count_warn, config.count_crit) == (200, 500)
    assert config.prefix == "zfs_snapshots"
    scrub_config = ScrubConfig()
    assert (scrub_config.lastrun_warn, scrub_config.lastrun_crit) == (60, 90)
    assert scrub_config.prefix == "zfs_scrub"


def test_default_config_file_is_read(isolated_config_dir: Path) -> None:
    (isolated_config_dir / "zfs_checks.cfg").write_text("[scrub]\nprefix: Scrub\n")
    assert load_config(ScrubConfig, "scrub").prefix == "Scrub"


def test_read_snapshot_section(config_file: Path) -> None:
    config = load_config(SnapshotConfig, "snapshots", config_file)
    assert config == SnapshotConfig(
        prefix="ZFS_Snapshots",
        pools=("tank", "backup"),
        important=("tank/home", "tank/my data"),
        snapshot_filter="@zfs-auto-snap_(hourly|daily)",
        ignore=r"/\.system",
        newest_warn=30,
        newest_crit=60,
    )


def test_read_scrub_section(config_file: Path) -> None:
    config = load_config(ScrubConfig, "scrub", config_file)
    assert config == ScrubConfig(pools=("tank",), lastrun_warn=7, lastrun_crit=14)


def test_overrides_win(config_file: Path) -> None:
    config = load_config(
        SnapshotConfig,
        "snapshots",
        config_file,
        {"prefix": None, "pools": ("rpool",), "newest_warn": 5},
    )
    assert config.prefix == "ZFS_Snapshots"
    assert config.pools == ("rpool",)
    assert (config.newest_warn, config.newest_crit) == (5, 60)


def test_missing_section_means_defaults(tmp_path: Path) -> None:
    path = tmp_path / "other.cfg"
    path.write_text("[snapshots]\ncount_warn: 1\n")
    assert load_config(ScrubConfig, "scrub", path) == ScrubConfig()


def test_explicit_config_file_must_exist(tmp_path: Path) -> None:
    with pytest.raises(BailOut, match="not found"):
        load_config(SnapshotConfig, "snapshots", tmp_path / "missing.cfg")


@pytest.mark.parametrize(
    "content",
    [
        "[snapshots]\nnewest_warn: many\n",
        "[snapshots]\nignore: [unclosed\n",
        "[snapshots]\nsnapshot_filter: @(daily\n",
        "no section header\n",
    ],
)
def test_invalid_config_bails_out(tmp_path: Path, content: str) -> None:
    path = tmp_path / "broken.cfg"
    path.write_text(content)
    with pytest.raises(BailOut):
        load_config(SnapshotConfig, "snapshots", path)


def test_literal_filter_is_not_a_regex() -> None:
    assert SnapshotConfig(snapshot_filter="(daily").snapshot_filter == "(daily"


def test_levels_are_not_validated_while_loading(tmp_path: Path) -> None:
    path = tmp_path / "levels.cfg"
    path.write_text("[scrub]\nruntime_warn: 100\nruntime_crit: 10\n")
    config = load_config(ScrubConfig, "scrub", path)
    with pytest.raises(ConfigError, match=r"warning must be smaller than critical \(runtime"):
        config.check_levels()


def test_check_levels_accepts_equal_levels() -> None:
    SnapshotConfig(newest_warn=10, newest_crit=10, count_warn=0, count_crit=0).check_levels()
    ScrubConfig(runtime_warn=1, runtime_crit=1).check_levels()
