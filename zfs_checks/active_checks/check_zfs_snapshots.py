#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# This check lists all snapshots of the configured pools (or of all pools) and
# reports one line per dataset that has snapshots matching the filter. The
# datasets configured as important are always reported, even if there are no
# snapshots for them at all. Example output:
#
# 0 zfs_snapshots:tank/home age=1260;5400;10800|creation=1728777600;1726358400|size=0|\
# used=1288490188|count=28;200;500 newest 21 min (@daily-2024-10-13), oldest 28 days ...
# 3 zfs_snapshots:tank/vm - no snapshots found

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from zfs_checks.checkresults import CheckResult
from zfs_checks.config import load_config, SnapshotConfig
from zfs_checks.entities import iter_datasets, reorder
from zfs_checks.exceptions import BailOut, FetchError
from zfs_checks.fetchers import (
    SnapshotListerProto,
    UsedBytesProto,
    ZFSSnapshotLister,
    ZFSUsedBySnapshots,
)
from zfs_checks.log import logger, setup_console_logging, VERBOSE
from zfs_checks.snapshots import check_snapshots, filter_snapshots, Snapshot, SnapshotFacts

_logger = logger.getChild("check_zfs_snapshots")


def main(
    argv: Sequence[str] | None = None,
    snapshot_lister: SnapshotListerProto | None = None,
    used_bytes: UsedBytesProto | None = None,
    now: int | None = None,
) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    if args.verbose:
        setup_console_logging(args.verbose)

    prefix = args.prefix or SnapshotConfig().prefix
    try:
        config = load_config(SnapshotConfig, "snapshots", args.config_file, _overrides(args))
        prefix = config.prefix
        snapshots = _collect_snapshots(snapshot_lister or ZFSSnapshotLister(), config)
    except BailOut as e:
        sys.stdout.write("3 %s - %s\n" % (prefix, e.reason))
        return 3

    now = int(time.time()) if now is None else now
    used_bytes = used_bytes or ZFSUsedBySnapshots()
    for dataset, dataset_snapshots in snapshots.items():
        result = _check_dataset(
            dataset,
            dataset_snapshots,
            config,
            used_bytes,
            now,
            debug=args.debug,
        )
        sys.stdout.write("%s\n" % result.as_line())
    return 0


def _parse_arguments(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="check_zfs_snapshots",
        description="Check age and number of the ZFS snapshots of every dataset.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose mode (log to stderr), use -vv for debug output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug mode: let Python exceptions come through.",
    )
    parser.add_argument(
        "-c",
        "--config-file",
        type=Path,
        metavar="CONFIGFILE",
        help="Read the [snapshots] section of this file (Default: $MK_CONFDIR/zfs_checks.cfg)",
    )
    parser.add_argument(
        "-p",
        "--pool",
        dest="pools",
        action="append",
        metavar="POOL",
        help="Only check the datasets of this pool. Can be given multiple times.",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        metavar="PREFIX",
        help="Label of the service names (Default: zfs_snapshots)",
    )
    parser.add_argument(
        "-i",
        "--important",
        action="append",
        metavar="DATASET",
        help="Always report this dataset, even without snapshots. Can be given multiple times.",
    )
    parser.add_argument(
        "-f",
        "--filter",
        dest="snapshot_filter",
        type=str,
        metavar="FILTER",
        help="Only consider snapshots whose name starts with FILTER. "
        "A FILTER starting with '@' is a regular expression.",
    )
    parser.add_argument(
        "--ignore",
        type=str,
        metavar="REGEX",
        help="Do not report datasets matching this regular expression.",
    )
    parser.add_argument(
        "--newest",
        type=int,
        nargs=2,
        metavar=("WARNING", "CRITICAL"),
        help="Maximum age of the newest snapshot in minutes (Defaults: 90 and 180)",
    )
    parser.add_argument(
        "--oldest",
        type=int,
        nargs=2,
        metavar=("WARNING", "CRITICAL"),
        help="The oldest snapshot must be at least WARNING and at most CRITICAL days old "
        "(Defaults: 27 and 180)",
    )
    parser.add_argument(
        "--count",
        type=int,
        nargs=2,
        metavar=("WARNING", "CRITICAL"),
        help="Maximum number of snapshots per dataset (Defaults: 200 and 500)",
    )
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> Mapping[str, object]:
    overrides: dict[str, object] = {
        "prefix": args.prefix,
        "pools": tuple(args.pools) if args.pools else None,
        "important": tuple(args.important) if args.important else None,
        "snapshot_filter": args.snapshot_filter,
        "ignore": args.ignore,
    }
    for name in ("newest", "oldest", "count"):
        if (levels := getattr(args, name)) is not None:
            overrides[f"{name}_warn"], overrides[f"{name}_crit"] = levels
    return overrides


def _collect_snapshots(
    snapshot_lister: SnapshotListerProto, config: SnapshotConfig
) -> dict[str, Sequence[Snapshot]]:
    """Return the matching snapshots per dataset, in the order of reporting"""
    try:
        all_snapshots = snapshot_lister(config.pools)
    except FetchError as e:
        raise BailOut(str(e)) from e

    matching = {
        dataset: filter_snapshots(snapshots, config.snapshot_filter)
        for dataset, snapshots in all_snapshots.items()
    }
    datasets = reorder(
        iter_datasets((d for d, s in matching.items() if s), config.ignore),
        config.important,
    )
    if not datasets:
        raise BailOut(
            f"no snapshots found with filter {config.snapshot_filter}"
            if config.snapshot_filter
            else "no snapshots found"
        )
    _logger.log(VERBOSE, "checking %d datasets", len(datasets))
    return {dataset: matching.get(dataset, ()) for dataset in datasets}


def _check_dataset(
    dataset: str,
    snapshots: Sequence[Snapshot],
    config: SnapshotConfig,
    used_bytes: UsedBytesProto,
    now: int,
    *,
    debug: bool,
) -> CheckResult:
    try:
        facts = SnapshotFacts(dataset, snapshots, used_bytes(dataset) if snapshots else 0)
        _logger.debug("%s: %d snapshots, %d bytes used", dataset, facts.count, facts.used_bytes)
        return check_snapshots(facts, config, now)

    except FetchError as e:
        if debug:
            raise
        return CheckResult.unknown(str(e), label=config.prefix, entity=dataset)

    except Exception as e:
        if debug:
            raise
        return CheckResult.unknown(
            f"Unhandled exception: {e}", label=config.prefix, entity=dataset
        )


if __name__ == "__main__":
    sys.exit(main())
