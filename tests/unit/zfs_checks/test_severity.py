#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import pytest

from zfs_checks.severity import State


@pytest.mark.parametrize(
    "state, wire",
    [
        (State.OK, 0),
        (State.WARN, 1),
        (State.CRIT, 2),
        (State.UNKNOWN, 3),
    ],
)
def test_wire_format(state: State, wire: int) -> None:
    assert int(state) == wire


@pytest.mark.parametrize(
    "states, expected",
    [
        ((), State.OK),
        ((State.OK, State.OK), State.OK),
        ((State.WARN, State.OK), State.WARN),
        ((State.OK, State.CRIT, State.WARN), State.CRIT),
        ((State.CRIT, State.UNKNOWN), State.CRIT),
        ((State.WARN, State.UNKNOWN), State.UNKNOWN),
    ],
)
def test_worst(states: tuple[State, ...], expected: State) -> None:
    assert State.worst(*states) is expected


def test_markers() -> None:
    assert [s.marker for s in State] == ["", "(!)", "(!!)", "(?)"]
