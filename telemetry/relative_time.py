"""Coarse, human-facing ages for the activity feed."""

from datetime import datetime, timedelta
from typing import Any

from .calculations import as_timestamp

ONE_DAY = timedelta(days=1)


def format_date(timestamp: datetime) -> str:
    """Absolute calendar date, e.g. '15 Jun 2024'."""
    return timestamp.strftime("%d %b %Y")


def format_relative(timestamp: Any, now: Any) -> str:
    """
    Describe how long ago timestamp was, relative to an explicit now.

    today / 1 day ago / N days ago within a week, the absolute date beyond
    that or for timestamps more than a day in the future.
    """
    when = as_timestamp(timestamp)
    reference = as_timestamp(now)
    if when is None:
        return "-"
    if reference is None:
        return format_date(when)

    age = reference - when
    if -ONE_DAY < age < ONE_DAY:
        return "today"
    if age < timedelta(0):
        return format_date(when)
    if age < 2 * ONE_DAY:
        return "1 day ago"
    if age < 7 * ONE_DAY:
        return f"{age.days} days ago"
    return format_date(when)
