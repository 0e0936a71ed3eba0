#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

import enum

__all__ = ["State", "state_markers"]


# Symbolic representations of states in check output
state_markers = ("", "(!)", "(!!)", "(?)")


class State(enum.Enum):
    """Monitoring state of a (sub) check

    The value is what ends up in the first column of a result line.
    """

    OK = 0
    WARN = 1
    CRIT = 2
    UNKNOWN = 3

    def __int__(self) -> int:
        return int(self.value)

    @property
    def marker(self) -> str:
        return state_markers[self.value]

    @classmethod
    def worst(cls, *states: State) -> State:
        """Return the 'worst' aggregation of all states

        The order of "badness" is

            OK -> WARN -> UNKNOWN -> CRIT

        so this is just not quite `max`. UNKNOWN is reserved for results that
        could not be evaluated at all, so in practice the sub checks only ever
        aggregate OK, WARN and CRIT.

        >>> State.worst(State.OK, State.WARN)
        <State.WARN: 1>
        >>> State.worst(State.OK, State.WARN, State.CRIT, State.UNKNOWN)
        <State.CRIT: 2>
        >>> State.worst(State.OK, State.WARN, State.UNKNOWN)
        <State.UNKNOWN: 3>
        >>> State.worst()
        <State.OK: 0>
        """
        if cls.CRIT in states:
            return cls.CRIT
        return cls(max((s.value for s in states), default=cls.OK.value))
