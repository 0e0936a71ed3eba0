#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import doctest
from types import ModuleType

import pytest

from zfs_checks import checkresults, entities, fetchers, log, render, severity, snapshots


@pytest.mark.parametrize(
    "module",
    [checkresults, entities, fetchers, log, render, severity, snapshots],
    ids=lambda m: m.__name__,
)
def test_doctests(module: ModuleType) -> None:
    result = doctest.testmod(module)
    assert result.attempted
    assert not result.failed
