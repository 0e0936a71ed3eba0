#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import pytest

from zfs_checks.entities import iter_datasets, reorder


def test_important_entities_are_injected_and_pulled_to_front() -> None:
    assert reorder(["A", "B"], ["X", "A"]) == ["X", "A", "B"]


@pytest.mark.parametrize(
    "entities, important, expected",
    [
        ([], [], []),
        (["a", "b"], [], ["a", "b"]),
        ([], ["x"], ["x"]),
        (["a", "b", "c"], ["c", "b"], ["c", "b", "a"]),
        (["a", "b", "c"], ["b", "b", "y"], ["b", "y", "a", "c"]),
    ],
)
def test_reorder(entities: list[str], important: list[str], expected: list[str]) -> None:
    assert reorder(entities, important) == expected


def test_reorder_does_not_modify_input() -> None:
    entities = ["a", "b"]
    reorder(entities, ["b"])
    assert entities == ["a", "b"]


@pytest.mark.parametrize(
    "names, ignore, expected",
    [
        (["tank/b", "tank/a", "tank/b"], "", ["tank/a", "tank/b"]),
        (["tank/a", "tank/.system", "tank/.system/cores"], r"/\.system", ["tank/a"]),
        (["tank/a", "backup/a"], "^backup", ["tank/a"]),
        (["tank/a"], ".*", []),
    ],
)
def test_iter_datasets(names: list[str], ignore: str, expected: list[str]) -> None:
    assert iter_datasets(names, ignore) == expected
