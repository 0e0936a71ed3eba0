#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# Example output of "zfs list -H -p -t snapshot -o name,creation":
# tank/home@zfs-auto-snap_daily-2024-10-12-0000	1728691200
# tank/home@zfs-auto-snap_daily-2024-10-13-0000	1728777600
# tank/vm@manual	1700000000

# Example output of "zpool status tank" (only the part we are interested in):
#   pool: tank
#  state: ONLINE
#   scan: scrub repaired 0B in 02:13:45 with 0 errors on Sun Oct 13 02:37:46 2024
# config:

# While a scrub is running:
#   scan: scrub in progress since Sun Oct 13 00:24:01 2024
#         1.23T scanned at 1.20G/s, 800G issued at 500M/s, 2.50T total
#         0B repaired, 31.25% done, 01:02:03 to go

# After a resilver, and with older versions of ZFS on Linux:
#   scan: resilvered 1.20G in 0 days 00:10:02 with 0 errors on Sun Oct 13 02:37:46 2024
#   scan: scrub repaired 0 in 2h13m with 0 errors on Sun Oct 13 02:37:46 2024

from __future__ import annotations

import os
import re
import subprocess
from collections.abc import Mapping, Sequence
from typing import Protocol

import dateutil.parser

from zfs_checks.exceptions import FetchError
from zfs_checks.log import logger
from zfs_checks.scrub import (
    ScanOperation,
    ScrubCompleted,
    ScrubFacts,
    ScrubRunning,
    ScrubUnknown,
)
from zfs_checks.snapshots import Snapshot

_logger = logger.getChild("fetchers")

SIZE_UNITS = "BKMGTPEZY"

_SIZE_PATTERN = re.compile(r"^(\d+(?:[.,]\d+)?)([%s])?$" % SIZE_UNITS)
_CLOCK = r"(?:(\d+) days? )?(\d+):(\d\d):(\d\d)"
_DATE = r"(\w{3} \w{3} +\d+ \d+:\d\d:\d\d \d{4})"


class SnapshotListerProto(Protocol):
    def __call__(self, pools: Sequence[str]) -> Mapping[str, Sequence[Snapshot]]: ...


class UsedBytesProto(Protocol):
    def __call__(self, dataset: str) -> int: ...


class PoolListerProto(Protocol):
    def __call__(self) -> Sequence[str]: ...


class ScanStatusProto(Protocol):
    def __call__(self, pool: str, now: int) -> ScrubFacts: ...


def _run(cmd: Sequence[str]) -> str:
    _logger.debug("running %s", " ".join(cmd))
    try:
        completed_process = subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf8",
            check=False,
            env={**{k: v for k, v in os.environ.items() if k != "LANG"}, "LC_ALL": "C"},
        )
    except FileNotFoundError as e:
        raise FetchError(f"{cmd[0]}: command not found") from e
    if completed_process.returncode:
        reason = completed_process.stderr.strip() or f"exit code {completed_process.returncode}"
        raise FetchError(f"{' '.join(cmd)} failed: {reason}")
    return completed_process.stdout


def parse_size(size: str) -> int:
    """Convert a human readable size as printed by zfs to bytes

    >>> parse_size("12.3G")
    13207024435
    >>> parse_size("512")
    512
    >>> parse_size("0B")
    0
    >>> parse_size("-")
    0
    >>> parse_size("1,5K")
    1536
    """
    size = size.strip()
    if size in ("", "-"):
        return 0
    if (match := _SIZE_PATTERN.match(size.upper())) is None:
        raise FetchError(f"invalid size: {size!r}")
    value, unit = match.groups()
    return int(float(value.replace(",", ".")) * 1024 ** SIZE_UNITS.index(unit or "B"))


def parse_snapshot_list(output: str) -> dict[str, list[Snapshot]]:
    """Group the snapshots by dataset, keeping the listing order

    >>> parse_snapshot_list("tank/a@s1\\t100\\ntank/b@s1\\t200\\ntank/a@s2\\t300\\n")
    {'tank/a': [Snapshot(name='s1', creation=100), Snapshot(name='s2', creation=300)], \
'tank/b': [Snapshot(name='s1', creation=200)]}
    """
    snapshots: dict[str, list[Snapshot]] = {}
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            full_name, creation = line.split("\t")
            dataset, name = full_name.split("@", 1)
            snapshot = Snapshot(name, int(creation))
        except ValueError:
            _logger.warning("ignoring unexpected line: %r", line)
            continue
        snapshots.setdefault(dataset, []).append(snapshot)
    return snapshots


def _seconds(days: str | None, hours: str, minutes: str, seconds: str) -> int:
    return int(days or 0) * 86400 + int(hours) * 3600 + int(minutes) * 60 + int(seconds)


def _parse_duration(text: str) -> int:
    """
    >>> _parse_duration("scrub repaired 0B in 02:13:45 with 0 errors")
    8025
    >>> _parse_duration("resilvered 1.20G in 1 days 00:10:02 with 0 errors")
    87002
    >>> _parse_duration("scrub repaired 0 in 2h13m with 0 errors")
    7980
    """
    if match := re.search(rf"\bin {_CLOCK}", text):
        return _seconds(*match.groups())
    if match := re.search(r"\bin (\d+)h(\d+)m", text):
        return int(match.group(1)) * 3600 + int(match.group(2)) * 60
    raise FetchError(f"cannot find duration in {text!r}")


def _parse_timestamp(text: str) -> int:
    try:
        return int(dateutil.parser.parse(text).timestamp())
    except (ValueError, OverflowError) as e:
        raise FetchError(f"cannot parse date {text!r}") from e


def _extract_scan_block(status: str) -> str:
    """Return the text of the 'scan:' entry, joined into one line

    >>> _extract_scan_block("  pool: tank\\n  scan: scrub in progress\\n\\tsince x\\nconfig:\\n")
    'scrub in progress since x'
    """
    block: list[str] = []
    for line in status.splitlines():
        if block and re.match(r"^\s*[a-z]+:", line):
            break
        if block:
            block.append(line.strip())
        elif match := re.match(r"^\s*scan:\s*(.*)$", line):
            block.append(match.group(1).strip())
    return " ".join(b for b in block if b)


def parse_scan(status: str, now: int) -> ScrubFacts:
    """Turn the output of 'zpool status <pool>' into scrub facts"""
    scan = _extract_scan_block(status)
    _logger.debug("scan: %r", scan)

    if match := re.match(rf"(scrub|resilver) in progress since {_DATE}", scan):
        started = _parse_timestamp(match.group(2))
        done = re.search(r"([\d.]+)% done", scan)
        left = re.search(rf"{_CLOCK} to go", scan)
        repaired = re.search(r"(\S+) (?:repaired|resilvered)", scan)
        return ScrubRunning(
            operation=ScanOperation(match.group(1)),
            percent_done=float(done.group(1)) if done else 0.0,
            seconds_left=_seconds(*left.groups()) if left else None,
            repaired_bytes=parse_size(repaired.group(1)) if repaired else 0,
            elapsed_seconds=now - started,
        )

    if match := re.match(
        rf"(scrub repaired|resilvered) (\S+) in .+ with (\d+) errors on {_DATE}", scan
    ):
        finished = _parse_timestamp(match.group(4))
        return ScrubCompleted(
            operation=(
                ScanOperation.SCRUB
                if match.group(1) == "scrub repaired"
                else ScanOperation.RESILVER
            ),
            repaired_bytes=parse_size(match.group(2)),
            errors=int(match.group(3)),
            duration_seconds=_parse_duration(scan),
            seconds_since_completion=now - finished,
        )

    return ScrubUnknown()


class ZFSSnapshotLister:
    def __call__(self, pools: Sequence[str]) -> Mapping[str, Sequence[Snapshot]]:
        cmd = ["zfs", "list", "-H", "-p", "-t", "snapshot", "-o", "name,creation"]
        if pools:
            cmd += ["-r", *pools]
        return parse_snapshot_list(_run(cmd))


class ZFSUsedBySnapshots:
    def __call__(self, dataset: str) -> int:
        return parse_size(_run(["zfs", "get", "-H", "-o", "value", "usedbysnapshots", dataset]))


class ZPoolLister:
    def __call__(self) -> Sequence[str]:
        output = _run(["zpool", "list", "-H", "-o", "name"])
        return [line.strip() for line in output.splitlines() if line.strip()]


class ZPoolScanStatus:
    def __call__(self, pool: str, now: int) -> ScrubFacts:
        return parse_scan(_run(["zpool", "status", pool]), now)
