#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Evaluation of the snapshots of one dataset

Three things are checked per dataset:

* the age of the newest snapshot must stay below the levels (in minutes),
* the age of the oldest snapshot must lie *inside* a band (in days): if it is
  older than the critical level, snapshots are not cleaned up and will fill
  the pool; if it is younger than the warning level, there is not enough
  history yet,
* the number of snapshots must stay below the levels.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from zfs_checks import render
from zfs_checks.checkresults import CheckResult, Metric, SubResult
from zfs_checks.config import SnapshotConfig
from zfs_checks.exceptions import ConfigError, NoDataError
from zfs_checks.severity import State

__all__ = [
    "check_snapshots",
    "evaluate_snapshot_age",
    "filter_snapshots",
    "Snapshot",
    "SnapshotFacts",
]

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class Snapshot:
    name: str
    creation: int


@dataclass(frozen=True)
class SnapshotFacts:
    """The snapshots of one dataset, already restricted by the snapshot filter"""

    dataset: str
    snapshots: Sequence[Snapshot]
    used_bytes: int = 0

    @property
    def count(self) -> int:
        return len(self.snapshots)

    @property
    def newest(self) -> Snapshot | None:
        """The snapshot created last, the last listed one in case of a tie

        >>> SnapshotFacts("tank", [Snapshot("a", 20), Snapshot("b", 10), Snapshot("c", 20)]).newest
        Snapshot(name='c', creation=20)
        """
        newest = None
        for snapshot in self.snapshots:
            if newest is None or snapshot.creation >= newest.creation:
                newest = snapshot
        return newest

    @property
    def oldest(self) -> Snapshot | None:
        """The snapshot created first, the last listed one in case of a tie

        >>> SnapshotFacts("tank", [Snapshot("a", 10), Snapshot("b", 20), Snapshot("c", 10)]).oldest
        Snapshot(name='c', creation=10)
        """
        oldest = None
        for snapshot in self.snapshots:
            if oldest is None or snapshot.creation <= oldest.creation:
                oldest = snapshot
        return oldest


def matches_filter(snapshot_name: str, snapshot_filter: str) -> bool:
    """Check a snapshot name (the part after the '@') against the filter

    A filter starting with '@' is a regular expression matched against
    '@<snapshot name>', anything else is a literal prefix of the name.

    >>> matches_filter("zfs-auto-snap_daily-2024-10-13", "zfs-auto-snap_daily")
    True
    >>> matches_filter("zfs-auto-snap_hourly-2024-10-13", "@zfs-auto-snap_(daily|weekly)")
    False
    >>> matches_filter("manual", "")
    True
    """
    if snapshot_filter.startswith("@"):
        return re.match(snapshot_filter, f"@{snapshot_name}") is not None
    return snapshot_name.startswith(snapshot_filter)


def filter_snapshots(snapshots: Iterable[Snapshot], snapshot_filter: str) -> tuple[Snapshot, ...]:
    return tuple(s for s in snapshots if matches_filter(s.name, snapshot_filter))


def _check_newest(snapshot: Snapshot, config: SnapshotConfig, now: int) -> SubResult:
    diff = now - snapshot.creation
    if diff > config.newest_crit * 60:
        return SubResult(
            State.CRIT,
            f"newest snapshot @{snapshot.name} is {render.age(diff)} old"
            f" (critical at {config.newest_crit} min)",
        )
    if diff > config.newest_warn * 60:
        return SubResult(
            State.WARN,
            f"newest snapshot @{snapshot.name} is {render.age(diff)} old"
            f" (warning at {config.newest_warn} min)",
        )
    return SubResult(State.OK, f"newest snapshot @{snapshot.name} is {render.age(diff)} old")


def _age_in_days(now: int, creation: int) -> int:
    """Full days, truncated towards zero

    >>> _age_in_days(10 * 86400 - 1, 0)
    9
    >>> _age_in_days(0, 86400 + 1)
    -1
    """
    return int((now - creation) / SECONDS_PER_DAY)


def _check_oldest(snapshot: Snapshot, config: SnapshotConfig, now: int) -> SubResult:
    days = _age_in_days(now, snapshot.creation)
    if days > config.oldest_crit:
        return SubResult(
            State.CRIT,
            f"oldest snapshot @{snapshot.name} is older than {config.oldest_crit} days"
            f" ({days} days)",
        )
    if days < config.oldest_warn:
        return SubResult(
            State.WARN,
            f"oldest snapshot @{snapshot.name} is younger than {config.oldest_warn} days"
            f" ({days} days)",
        )
    return SubResult(State.OK, f"oldest snapshot @{snapshot.name} is {days} days old")


def _check_count(count: int, config: SnapshotConfig) -> SubResult:
    if count > config.count_crit:
        return SubResult(State.CRIT, f"{count} snapshots (critical at {config.count_crit})")
    if count > config.count_warn:
        return SubResult(State.WARN, f"{count} snapshots (warning at {config.count_warn})")
    return SubResult(State.OK, f"{count} snapshots")


def _check_preconditions(facts: SnapshotFacts, config: SnapshotConfig) -> None:
    if not facts.dataset:
        raise NoDataError("no dataset given")
    config.check_levels()
    if not facts.count:
        if config.snapshot_filter:
            raise NoDataError(f"no snapshots found with filter {config.snapshot_filter}")
        raise NoDataError("no snapshots found")


def evaluate_snapshot_age(
    facts: SnapshotFacts, config: SnapshotConfig, now: int
) -> tuple[SubResult, SubResult, SubResult]:
    """Return the results for the newest snapshot, the oldest one and the count

    Raises a ConfigError for invalid levels and a NoDataError if there is
    nothing to evaluate.
    """
    _check_preconditions(facts, config)
    newest, oldest = facts.newest, facts.oldest
    assert newest is not None and oldest is not None
    return (
        _check_newest(newest, config, now),
        _check_oldest(oldest, config, now),
        _check_count(facts.count, config),
    )


def check_snapshots(facts: SnapshotFacts, config: SnapshotConfig, now: int) -> CheckResult:
    """Evaluate the snapshots of one dataset and aggregate the outcome"""
    try:
        subresults = evaluate_snapshot_age(facts, config, now)
    except (ConfigError, NoDataError) as e:
        return CheckResult.unknown(str(e), label=config.prefix, entity=facts.dataset)

    newest, oldest = facts.newest, facts.oldest
    assert newest is not None and oldest is not None
    newest_age = now - newest.creation
    return CheckResult.from_subresults(
        *subresults,
        label=config.prefix,
        entity=facts.dataset,
        ok_summary=(
            f"newest {newest_age // 60} min (@{newest.name}),"
            f" oldest {_age_in_days(now, oldest.creation)} days (@{oldest.name}),"
            f" count {facts.count}, used {render.fmt_bytes(facts.used_bytes)}"
        ),
        metrics=(
            Metric("age", newest_age, config.newest_warn * 60, config.newest_crit * 60),
            Metric("creation", newest.creation, oldest.creation),
            Metric("size", 0),
            Metric("used", facts.used_bytes),
            Metric("count", facts.count, config.count_warn, config.count_crit),
        ),
    )
