"""Sparse calendar-month buckets for charting."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List

from .events import FuelEvent, MaintenanceEvent


@dataclass
class TrendBucket:
    """Volume and spend for one calendar month ("YYYY-MM")."""

    period_key: str
    total_volume: float = 0.0
    total_spend: float = 0.0


def period_key(timestamp: datetime) -> str:
    return f"{timestamp.year:04d}-{timestamp.month:02d}"


def bucketize(
    fuel_events: Iterable[FuelEvent],
    maintenance_events: Iterable[MaintenanceEvent] = (),
) -> List[TrendBucket]:
    """
    Group events by the month of their own timestamp.

    Months with no events get no bucket. Fuel events contribute volume and
    spend, maintenance events spend only. Untimestamped events are skipped.
    """
    buckets: Dict[str, TrendBucket] = {}

    def bucket_for(timestamp: datetime) -> TrendBucket:
        key = period_key(timestamp)
        if key not in buckets:
            buckets[key] = TrendBucket(key)
        return buckets[key]

    for event in fuel_events:
        timestamp = event.timestamp
        if timestamp is None:
            continue
        bucket = bucket_for(timestamp)
        if event.volume_value is not None:
            bucket.total_volume += event.volume_value
        if event.cost_value is not None:
            bucket.total_spend += event.cost_value

    for event in maintenance_events:
        timestamp = event.timestamp
        if timestamp is None:
            continue
        bucket = bucket_for(timestamp)
        if event.cost_value is not None:
            bucket.total_spend += event.cost_value

    return [buckets[key] for key in sorted(buckets)]
