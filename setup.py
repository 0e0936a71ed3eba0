#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from setuptools import find_packages, setup

setup(
    name="zfs-checks",
    version="1.0.0",
    packages=find_packages(include=["zfs_checks", "zfs_checks.*"]),
    python_requires=">=3.11",
    install_requires=["pydantic>=2", "python-dateutil"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "check_zfs_snapshots=zfs_checks.active_checks.check_zfs_snapshots:main",
            "check_zfs_scrub=zfs_checks.active_checks.check_zfs_scrub:main",
        ],
    },
)
