#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from zfs_checks.severity import State

__all__ = ["CheckResult", "Metric", "SubResult"]


MetricValue = int | float


@dataclasses.dataclass(frozen=True)
class Metric:
    name: str
    value: MetricValue
    warn: MetricValue | None = None
    crit: MetricValue | None = None

    def as_text(self) -> str:
        """
        >>> Metric("age", 60, 5400, 10800).as_text()
        'age=60;5400;10800'
        >>> Metric("size", 0).as_text()
        'size=0'
        >>> Metric("percent", 31.25).as_text()
        'percent=31.25'
        >>> Metric("errors", 0, None, 1).as_text()
        'errors=0;;1'
        """
        fields = [_render_value(self.value), *(_render_value(v) for v in (self.warn, self.crit))]
        while fields[-1] == "":
            fields.pop()
        return f"{self.name}={';'.join(fields)}"


def _render_value(value: MetricValue | None) -> str:
    """
    >>> [_render_value(v) for v in (None, 3, 3.0, 2.5, 1 / 3)]
    ['', '3', '3', '2.5', '0.33']
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return ("%.2f" % value).rstrip("0").rstrip(".")
    return str(value)


@dataclasses.dataclass(frozen=True)
class SubResult:
    """Outcome of one axis of a check, e.g. the age of the newest snapshot"""

    state: State
    summary: str


@dataclasses.dataclass(frozen=True, kw_only=True)
class CheckResult:
    label: str
    entity: str
    state: State = State.OK
    summary: str = ""
    metrics: tuple[Metric, ...] = ()

    @property
    def service_name(self) -> str:
        return f"{self.label}:{self.entity}"

    def as_line(self) -> str:
        """Render the result as one local check line

        >>> CheckResult(label="zfs_snapshots", entity="tank/data", summary="no snapshots found",
        ...     state=State.UNKNOWN).as_line()
        '3 zfs_snapshots:tank/data - no snapshots found'
        >>> CheckResult(label="zfs_scrub", entity="tank", summary="all fine",
        ...     metrics=(Metric("errors", 0), Metric("percent", 100))).as_line()
        '0 zfs_scrub:tank errors=0|percent=100 all fine'
        >>> CheckResult(label="zfs_snapshots", entity="tank/my data", summary="fine").as_line()
        '0 "zfs_snapshots:tank/my data" - fine'
        """
        metrics = "|".join(m.as_text() for m in self.metrics) or "-"
        return (
            f"{int(self.state)} {self._quoted(self.service_name)} {metrics}"
            f" {self._safe_text(self.summary)}"
        )

    @staticmethod
    def _quoted(name: str) -> str:
        # Service names with whitespace are double quoted, as in local check output.
        # Dataset names cannot contain double quotes.
        if any(c.isspace() for c in name):
            return '"%s"' % "".join(" " if c.isspace() else c for c in name)
        return name

    @classmethod
    def from_subresults(
        cls,
        *subresults: SubResult,
        label: str,
        entity: str,
        ok_summary: str,
        metrics: Sequence[Metric] = (),
    ) -> CheckResult:
        """Combine the sub results of one entity

        The worst state wins. If everything is fine the consolidated
        ``ok_summary`` is used, otherwise the summary of the first sub result
        that has the worst state.
        """
        state = State.worst(*(s.state for s in subresults))
        if state is State.OK:
            summary = ok_summary
        else:
            summary = next(s.summary for s in subresults if s.state is state)
        return cls(
            label=label,
            entity=entity,
            state=state,
            summary=summary,
            metrics=tuple(metrics),
        )

    @classmethod
    def unknown(cls, reason: str, *, label: str, entity: str) -> CheckResult:
        return cls(label=label, entity=entity, state=State.UNKNOWN, summary=reason)

    @staticmethod
    def _safe_text(txt: str) -> str:
        """The vertical bar indicates the start of metrics and a newline would
        end the result. Replace the bar by a Unicode "Light vertical bar".

        >>> CheckResult._safe_text("a|b\\nc")
        'a❘b c'
        """
        return " ".join(txt.replace("|", "\u2758").splitlines())
