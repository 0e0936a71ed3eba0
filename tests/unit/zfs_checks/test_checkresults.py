#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import pytest

from zfs_checks.checkresults import CheckResult, Metric, SubResult
from zfs_checks.severity import State


def _subresults() -> tuple[SubResult, ...]:
    return (
        SubResult(State.OK, "first ok"),
        SubResult(State.WARN, "first warn"),
        SubResult(State.CRIT, "first crit"),
        SubResult(State.WARN, "second warn"),
        SubResult(State.CRIT, "second crit"),
    )


def test_from_subresults_takes_first_summary_of_worst_state() -> None:
    result = CheckResult.from_subresults(
        *_subresults(), label="l", entity="e", ok_summary="all fine"
    )
    assert result.state is State.CRIT
    assert result.summary == "first crit"


def test_from_subresults_warn() -> None:
    result = CheckResult.from_subresults(
        *_subresults()[:2], *_subresults()[3:4], label="l", entity="e", ok_summary="all fine"
    )
    assert result.state is State.WARN
    assert result.summary == "first warn"


def test_from_subresults_ok_uses_consolidated_summary() -> None:
    result = CheckResult.from_subresults(
        SubResult(State.OK, "a"),
        SubResult(State.OK, "b"),
        label="l",
        entity="e",
        ok_summary="a and b",
        metrics=[Metric("m", 1)],
    )
    assert result.state is State.OK
    assert result.summary == "a and b"
    assert result.metrics == (Metric("m", 1),)


def test_unknown() -> None:
    result = CheckResult.unknown("no data", label="zfs_snapshots", entity="tank")
    assert result.as_line() == "3 zfs_snapshots:tank - no data"


@pytest.mark.parametrize(
    "metrics, expected",
    [
        ((), "-"),
        ((Metric("size", 0),), "size=0"),
        ((Metric("age", 60, 5400, 10800), Metric("used", 1024)), "age=60;5400;10800|used=1024"),
        ((Metric("creation", 200, 100),), "creation=200;100"),
        ((Metric("percent", 12.5), Metric("exectime", 3.0)), "percent=12.5|exectime=3"),
    ],
)
def test_metrics_block(metrics: tuple[Metric, ...], expected: str) -> None:
    line = CheckResult(label="l", entity="e", summary="text", metrics=metrics).as_line()
    assert line == f"0 l:e {expected} text"


def test_summary_cannot_break_the_line() -> None:
    line = CheckResult(label="l", entity="e", summary="a|b\nc", state=State.WARN).as_line()
    assert line == "1 l:e - a❘b c"


@pytest.mark.parametrize(
    "entity, expected",
    [
        ("tank/my data", '1 "l:tank/my data" size=0 text'),
        ("tank/tab\there", '1 "l:tank/tab here" size=0 text'),
        ("tank/data", "1 l:tank/data size=0 text"),
    ],
)
def test_service_name_with_whitespace_is_quoted(entity: str, expected: str) -> None:
    result = CheckResult(
        label="l", entity=entity, state=State.WARN, summary="text", metrics=(Metric("size", 0),)
    )
    assert result.as_line() == expected
