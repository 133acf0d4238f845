# companion/core/clock.py
# -*- coding: utf-8 -*-
"""
UTC helpers shared by every component that compares days.

Streaks, memory decay and the daily gate all go through these so that two
requests issued around midnight agree on which day it is.
"""

from __future__ import annotations

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Return `moment` as an aware UTC datetime (naive values are taken as UTC)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_day(moment: datetime) -> date:
    return as_utc(moment).date()


def days_between(earlier: datetime, later: datetime) -> int:
    """Number of UTC calendar days from `earlier` to `later`."""
    return (utc_day(later) - utc_day(earlier)).days


def age_in_days(moment: datetime, now: datetime) -> int:
    """Whole days elapsed since `moment` (floor of the elapsed time)."""
    elapsed = as_utc(now) - as_utc(moment)
    return int(elapsed.total_seconds() // 86400)
