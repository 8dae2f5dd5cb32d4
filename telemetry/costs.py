"""Cost totals over time windows."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, TypeVar

from .calculations import Metric, as_timestamp, safe_divide
from .events import FuelEvent, MaintenanceEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", FuelEvent, MaintenanceEvent)


class CostWindow:
    """
    Inclusive time window. An open bound is unbounded.

    The all-time window (no bounds) also covers events without a timestamp;
    a bounded window cannot place them and leaves them out.
    """

    def __init__(self, start: Optional[datetime] = None, end: Optional[datetime] = None):
        self.start = as_timestamp(start)
        self.end = as_timestamp(end)

    @classmethod
    def all_time(cls) -> "CostWindow":
        return cls()

    @property
    def is_all_time(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, timestamp: Optional[datetime]) -> bool:
        if timestamp is None:
            return self.is_all_time
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True

    def select(self, events: Iterable[E]) -> List[E]:
        return [e for e in events if self.contains(e.timestamp)]


@dataclass
class CostSummary:
    """Full-precision cost totals for one window."""

    total_fuel_cost: float
    total_maintenance_cost: float
    total_volume: float
    cost_per_distance: Metric
    average_unit_cost: Metric

    @property
    def total_cost(self) -> float:
        return self.total_fuel_cost + self.total_maintenance_cost


def sum_fuel_cost(events: Iterable[FuelEvent]) -> float:
    total = 0.0
    for event in events:
        cost = event.cost_value
        if cost is None:
            logger.warning("Excluding fuel event %s from spend: malformed cost", event.id)
            continue
        total += cost
    return total


def sum_fuel_volume(events: Iterable[FuelEvent]) -> float:
    total = 0.0
    for event in events:
        volume = event.volume_value
        if volume is None:
            logger.warning("Excluding fuel event %s from volume: malformed volume", event.id)
            continue
        total += volume
    return total


def sum_maintenance_cost(events: Iterable[MaintenanceEvent]) -> float:
    total = 0.0
    for event in events:
        cost = event.cost_value
        if cost is None:
            logger.warning("Excluding maintenance event %s from spend: malformed cost", event.id)
            continue
        total += cost
    return total


def aggregate_costs(
    fuel_events: Iterable[FuelEvent],
    maintenance_events: Iterable[MaintenanceEvent],
    current_odometer: Optional[float],
    window: Optional[CostWindow] = None,
) -> CostSummary:
    """
    Total fuel and maintenance cost within a window.

    cost_per_distance divides by the vehicle's current odometer and
    average_unit_cost by the volume of fills that carry both a usable cost
    and a usable volume; both are UNAVAILABLE when the divisor is not
    positive.
    """
    window = window or CostWindow.all_time()
    fuel = window.select(fuel_events)
    maintenance = window.select(maintenance_events)

    fuel_cost = sum_fuel_cost(fuel)
    maintenance_cost = sum_maintenance_cost(maintenance)
    # Unit price average only over events where both figures are usable
    priced = [e for e in fuel if e.cost_value is not None and e.volume_value is not None]
    priced_cost = sum(e.cost_value for e in priced)
    priced_volume = sum(e.volume_value for e in priced)

    return CostSummary(
        total_fuel_cost=fuel_cost,
        total_maintenance_cost=maintenance_cost,
        total_volume=sum_fuel_volume(fuel),
        cost_per_distance=safe_divide(fuel_cost + maintenance_cost, current_odometer),
        average_unit_cost=safe_divide(priced_cost, priced_volume),
    )
