"""Helper functions for guarded arithmetic and input cleaning."""

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from dateutil import parser as date_parser


class Unavailable(Enum):
    """Marker for a metric that cannot be computed from the data at hand."""

    TOKEN = "unavailable"

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable.TOKEN

Metric = Union[float, Unavailable]


def as_number(value: Any) -> Optional[float]:
    """
    Clean a raw numeric field.

    Returns a finite float, or None when the value is missing or malformed.
    Numeric strings are accepted; booleans, NaN and infinities are not.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def as_timestamp(value: Any) -> Optional[datetime]:
    """Normalise a raw timestamp to an aware UTC datetime, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # offset pushes the instant outside datetime's range
        return None


def safe_divide(numerator: float, denominator: Optional[float]) -> Metric:
    """Divide only when the denominator is positive."""
    if denominator is None or denominator <= 0:
        return UNAVAILABLE
    result = numerator / denominator
    if not math.isfinite(result):
        return UNAVAILABLE
    return result


def is_available(value: Any) -> bool:
    """True when value is a finite number (not UNAVAILABLE, None or NaN)."""
    if value is UNAVAILABLE or value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def sanitize(value: Any, digits: int) -> float:
    """Round a value for presentation, defaulting anything unusable to 0."""
    if not is_available(value):
        return 0.0
    rounded = round(float(value), digits)
    # avoid "-0.0" leaking into output
    return rounded + 0.0


def sanitize_metric(value: Any, digits: int) -> Metric:
    """Round a tagged metric, keeping UNAVAILABLE distinct from zero."""
    if not is_available(value):
        return UNAVAILABLE
    return round(float(value), digits) + 0.0
