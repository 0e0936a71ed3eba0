#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# This check reports the state of the last (or the currently running) scrub
# or resilver of every configured pool, or of all imported pools. Example:
#
# 0 zfs_scrub:tank lastrun=3888000;5184000;7776000|exectime=8025|errors=0|repaired=0 last ...
# 2 zfs_scrub:backup exectime=104400;28800;86400|errors=0|percent=88.2|timeleft=5400|... scrub ...
# 1 zfs_scrub:new - no scrubbing information.

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from zfs_checks.checkresults import CheckResult
from zfs_checks.config import load_config, ScrubConfig
from zfs_checks.exceptions import BailOut, FetchError
from zfs_checks.fetchers import PoolListerProto, ScanStatusProto, ZPoolLister, ZPoolScanStatus
from zfs_checks.log import logger, setup_console_logging, VERBOSE
from zfs_checks.scrub import check_scrub

_logger = logger.getChild("check_zfs_scrub")


def main(
    argv: Sequence[str] | None = None,
    pool_lister: PoolListerProto | None = None,
    scan_status: ScanStatusProto | None = None,
    now: int | None = None,
) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    if args.verbose:
        setup_console_logging(args.verbose)

    prefix = args.prefix or ScrubConfig().prefix
    try:
        config = load_config(ScrubConfig, "scrub", args.config_file, _overrides(args))
        prefix = config.prefix
        pools = _get_pools(pool_lister or ZPoolLister(), config)
    except BailOut as e:
        sys.stdout.write("3 %s - %s\n" % (prefix, e.reason))
        return 3

    now = int(time.time()) if now is None else now
    scan_status = scan_status or ZPoolScanStatus()
    for pool in pools:
        result = _check_pool(pool, config, scan_status, now, debug=args.debug)
        sys.stdout.write("%s\n" % result.as_line())
    return 0


def _parse_arguments(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="check_zfs_scrub",
        description="Check the last or currently running scrub of every ZFS pool.",
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
        help="Read the [scrub] section of this file (Default: $MK_CONFDIR/zfs_checks.cfg)",
    )
    parser.add_argument(
        "-p",
        "--pool",
        dest="pools",
        action="append",
        metavar="POOL",
        help="Check this pool instead of all imported pools. Can be given multiple times.",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        metavar="PREFIX",
        help="Label of the service names (Default: zfs_scrub)",
    )
    parser.add_argument(
        "--runtime",
        type=int,
        nargs=2,
        metavar=("WARNING", "CRITICAL"),
        help="Maximum run time of a running scrub in seconds (Defaults: 28800 and 86400)",
    )
    parser.add_argument(
        "--lastrun",
        type=int,
        nargs=2,
        metavar=("WARNING", "CRITICAL"),
        help="Maximum number of days since the last scrub finished (Defaults: 60 and 90)",
    )
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> Mapping[str, object]:
    overrides: dict[str, object] = {
        "prefix": args.prefix,
        "pools": tuple(args.pools) if args.pools else None,
    }
    for name in ("runtime", "lastrun"):
        if (levels := getattr(args, name)) is not None:
            overrides[f"{name}_warn"], overrides[f"{name}_crit"] = levels
    return overrides


def _get_pools(pool_lister: PoolListerProto, config: ScrubConfig) -> Sequence[str]:
    if config.pools:
        pools = list(dict.fromkeys(config.pools))
    else:
        try:
            pools = sorted(set(pool_lister()))
        except FetchError as e:
            raise BailOut(str(e)) from e
    if not pools:
        raise BailOut("no pools found")
    _logger.log(VERBOSE, "checking pools: %s", ", ".join(pools))
    return pools


def _check_pool(
    pool: str,
    config: ScrubConfig,
    scan_status: ScanStatusProto,
    now: int,
    *,
    debug: bool,
) -> CheckResult:
    try:
        facts = scan_status(pool, now)
        _logger.debug("%s: %r", pool, facts)
        return check_scrub(pool, facts, config)

    except FetchError as e:
        if debug:
            raise
        return CheckResult.unknown(str(e), label=config.prefix, entity=pool)

    except Exception as e:
        if debug:
            raise
        return CheckResult.unknown(f"Unhandled exception: {e}", label=config.prefix, entity=pool)


if __name__ == "__main__":
    sys.exit(main())
