#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Monitoring checks for ZFS snapshots and pool scrubs.

Both checks print one local check line per dataset or pool. The evaluation
code is free of side effects: everything that talks to ``zfs`` and ``zpool``
lives in :mod:`zfs_checks.fetchers`."""
