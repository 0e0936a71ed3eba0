#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Evaluation of the last (or currently running) scrub of one pool"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import assert_never

from zfs_checks import render
from zfs_checks.checkresults import CheckResult, Metric, SubResult
from zfs_checks.config import ScrubConfig
from zfs_checks.exceptions import ConfigError, NoDataError
from zfs_checks.severity import State

__all__ = [
    "check_scrub",
    "evaluate_scrub",
    "ScanOperation",
    "ScrubCompleted",
    "ScrubFacts",
    "ScrubRunning",
    "ScrubUnknown",
]

SECONDS_PER_DAY = 86400


class ScanOperation(enum.Enum):
    SCRUB = "scrub"
    RESILVER = "resilver"


@dataclass(frozen=True)
class ScrubRunning:
    operation: ScanOperation
    percent_done: float
    seconds_left: int | None
    repaired_bytes: int
    elapsed_seconds: int


@dataclass(frozen=True)
class ScrubCompleted:
    operation: ScanOperation
    repaired_bytes: int
    errors: int
    duration_seconds: int
    seconds_since_completion: int

    @property
    def days_since_completion(self) -> int:
        return self.seconds_since_completion // SECONDS_PER_DAY


@dataclass(frozen=True)
class ScrubUnknown:
    """The pool has never been scrubbed (or the status has no scan line)"""


ScrubFacts = ScrubRunning | ScrubCompleted | ScrubUnknown


def _check_runtime(facts: ScrubRunning, config: ScrubConfig) -> SubResult:
    text = f"{facts.operation.value} running for {render.timespan(facts.elapsed_seconds)}"
    if facts.elapsed_seconds > config.runtime_crit:
        return SubResult(
            State.CRIT, f"{text} (critical at {render.timespan(config.runtime_crit)})"
        )
    if facts.elapsed_seconds > config.runtime_warn:
        return SubResult(State.WARN, f"{text} (warning at {render.timespan(config.runtime_warn)})")
    return SubResult(State.OK, text)


def _check_last_run(facts: ScrubCompleted, config: ScrubConfig) -> SubResult:
    days = facts.days_since_completion
    text = f"last {facts.operation.value} finished {days} days ago"
    if days > config.lastrun_crit:
        return SubResult(State.CRIT, f"{text} (critical at {config.lastrun_crit} days)")
    if days > config.lastrun_warn:
        return SubResult(State.WARN, f"{text} (warning at {config.lastrun_warn} days)")
    return SubResult(State.OK, text)


def _check_repaired(facts: ScrubCompleted) -> SubResult:
    text = f"{facts.operation.value} repaired {render.fmt_bytes(facts.repaired_bytes)}"
    return SubResult(State.WARN if facts.repaired_bytes else State.OK, text)


def _check_errors(facts: ScrubCompleted) -> SubResult:
    text = f"{facts.operation.value} finished with {facts.errors} errors"
    return SubResult(State.CRIT if facts.errors > 0 else State.OK, text)


def evaluate_scrub(pool: str, facts: ScrubFacts, config: ScrubConfig) -> tuple[SubResult, ...]:
    """Return the sub results in the order in which they are reported

    Raises a ConfigError for invalid levels and a NoDataError if no pool
    name is given.
    """
    if not pool:
        raise NoDataError("no pool given")
    config.check_levels()

    match facts:
        case ScrubUnknown():
            return (SubResult(State.WARN, "no scrubbing information."),)
        case ScrubRunning():
            return (_check_runtime(facts, config),)
        case ScrubCompleted():
            return (
                _check_last_run(facts, config),
                _check_repaired(facts),
                _check_errors(facts),
            )
        case _:
            assert_never(facts)


def _metrics(facts: ScrubFacts, config: ScrubConfig) -> tuple[Metric, ...]:
    match facts:
        case ScrubUnknown():
            return ()
        case ScrubRunning():
            return (
                Metric("exectime", facts.elapsed_seconds, config.runtime_warn, config.runtime_crit),
                Metric("errors", 0),
                Metric("percent", facts.percent_done),
                Metric("timeleft", facts.seconds_left or 0),
                Metric("repaired", facts.repaired_bytes),
            )
        case ScrubCompleted():
            return (
                Metric(
                    "lastrun",
                    facts.seconds_since_completion,
                    config.lastrun_warn * SECONDS_PER_DAY,
                    config.lastrun_crit * SECONDS_PER_DAY,
                ),
                Metric("exectime", facts.duration_seconds),
                Metric("errors", facts.errors),
                Metric("repaired", facts.repaired_bytes),
            )
        case _:
            assert_never(facts)


def _ok_summary(facts: ScrubFacts) -> str:
    match facts:
        case ScrubUnknown():
            return "no scrubbing information."
        case ScrubRunning():
            time_left = (
                "no estimated completion time"
                if facts.seconds_left is None
                else f"{render.timespan(facts.seconds_left)} to go"
            )
            return (
                f"{facts.operation.value} in progress for {render.timespan(facts.elapsed_seconds)},"
                f" {render.percent(facts.percent_done)} done, {time_left},"
                f" {render.fmt_bytes(facts.repaired_bytes)} repaired"
            )
        case ScrubCompleted():
            return (
                f"last {facts.operation.value} {facts.days_since_completion} days ago,"
                f" took {render.timespan(facts.duration_seconds)},"
                f" repaired {render.fmt_bytes(facts.repaired_bytes)}, {facts.errors} errors"
            )
        case _:
            assert_never(facts)


def check_scrub(pool: str, facts: ScrubFacts, config: ScrubConfig) -> CheckResult:
    """Evaluate the scan state of one pool and aggregate the outcome"""
    try:
        subresults = evaluate_scrub(pool, facts, config)
    except (ConfigError, NoDataError) as e:
        return CheckResult.unknown(str(e), label=config.prefix, entity=pool)

    return CheckResult.from_subresults(
        *subresults,
        label=config.prefix,
        entity=pool,
        ok_summary=_ok_summary(facts),
        metrics=_metrics(facts, config),
    )
