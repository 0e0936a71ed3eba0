#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from zfs_checks.log import logger

_logger = logger.getChild("entities")


def iter_datasets(names: Iterable[str], ignore: str = "") -> list[str]:
    """Drop ignored and duplicate names, sorted

    >>> iter_datasets(["tank/b", "tank/.system/x", "tank/a", "tank/b"], ignore=r"/\\.system")
    ['tank/a', 'tank/b']
    >>> iter_datasets(["tank/b", "tank/a"])
    ['tank/a', 'tank/b']
    """
    ignore_regex = re.compile(ignore) if ignore else None
    datasets = set()
    for name in names:
        if ignore_regex is not None and ignore_regex.search(name):
            _logger.debug("ignoring %s", name)
            continue
        datasets.add(name)
    return sorted(datasets)


def reorder(entities: Sequence[str], important: Sequence[str]) -> list[str]:
    """Put the important entities first, in the given order

    Important entities that are not in ``entities`` are added, so that they
    are reported even if nothing was found for them.

    >>> reorder(["A", "B"], ["X", "A"])
    ['X', 'A', 'B']
    >>> reorder(["A", "B", "C"], ["C", "C"])
    ['C', 'A', 'B']
    """
    head = list(dict.fromkeys(important))
    for name in head:
        if name not in entities:
            _logger.debug("adding important entity without data: %s", name)
    return head + [name for name in entities if name not in head]
