#!/usr/bin/env python3
# Copyright (C) 2025 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""This module contains functions that transform Python values into
text representations optimized for human beings. The resulting strings are
not meant to be parsed into values again later. They are just for the
summary texts of the checks, the metrics always carry the raw values."""

import math


def timespan(seconds: float) -> str:
    """
    >>> timespan(3723)
    '1:02:03'
    >>> timespan(90061)
    '25:01:01'
    """
    hours, secs = divmod(int(seconds), 3600)
    mins, secs = divmod(secs, 60)
    return "%d:%02d:%02d" % (hours, mins, secs)


def age(seconds: float) -> str:
    """
    >>> age(59)
    '59 sec'
    >>> age(3600)
    '60 min'
    >>> age(3 * 3600 + 60)
    '3 hours 1 min'
    >>> age(30 * 3600)
    '30 hours'
    >>> age(3 * 86400 + 7200)
    '3 days 2 hours'
    >>> age(45 * 86400)
    '45 days'
    """
    if seconds < 240:
        return "%d sec" % seconds
    mins = int(seconds) // 60
    if mins < 120:
        return "%d min" % mins
    hours, mins = divmod(mins, 60)
    if hours < 12 and mins > 0:
        return "%d hours %d min" % (hours, mins)
    if hours < 48:
        return "%d hours" % hours
    days, hours = divmod(hours, 24)
    if days < 7 and hours > 0:
        return "%d days %d hours" % (days, hours)
    return "%d days" % days


def fmt_bytes(v: float) -> str:
    """
    >>> fmt_bytes(0)
    '0.00 B'
    >>> fmt_bytes(1536)
    '1.50 KiB'
    >>> fmt_bytes(12.3 * 1024**3)
    '12.30 GiB'
    """
    for prefix in ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB"):
        if abs(v) < 1024:
            return f"{v:.2f} {prefix}"
        v /= 1024
    return f"{v:.2f} YiB"


def percent(perc: float, drop_zeroes: bool = True) -> str:
    """Renders a given number as string

    >>> percent(31.25)
    '31.2%'
    >>> percent(100)
    '100%'
    >>> percent(0)
    '0%'
    """
    if perc > 0:
        perc_precision = max(1, 2 - int(round(math.log(perc, 10))))
    else:
        perc_precision = 1

    text = "%%.%df" % perc_precision % perc

    if drop_zeroes:
        text = text.rstrip("0").rstrip(".")

    return text + "%"
