"""Deterministic ordering of fuel events."""

from datetime import datetime, timezone
from typing import Iterable, List, Tuple

from .events import FuelEvent

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def sequence_key(event: FuelEvent) -> Tuple:
    """
    Total ordering key: odometer, then timestamp, then id.

    Missing odometers sort after every valid reading and missing timestamps
    after every valid timestamp. The trailing volume/cost fields only matter
    for duplicate ids.
    """
    odometer = event.odometer_value
    timestamp = event.timestamp
    volume = event.volume_value
    cost = event.cost_value
    return (
        odometer is None,
        odometer if odometer is not None else 0.0,
        timestamp is None,
        timestamp if timestamp is not None else _EARLIEST,
        str(event.id),
        volume if volume is not None else 0.0,
        cost if cost is not None else 0.0,
    )


def sequence_fuel_events(events: Iterable[FuelEvent]) -> List[FuelEvent]:
    """Order fuel events ascending, independent of input order."""
    return sorted(events, key=sequence_key)
