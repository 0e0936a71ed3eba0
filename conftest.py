#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# This file initializes the pytest environment
# pylint: disable=redefined-outer-name

from collections.abc import Iterator
from pathlib import Path

import pytest

from zfs_checks.log import clear_console_logging


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Make sure no configuration file of the test system is read"""
    config_dir = tmp_path / "confdir"
    config_dir.mkdir()
    monkeypatch.setenv("MK_CONFDIR", str(config_dir))
    return config_dir


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    clear_console_logging()
