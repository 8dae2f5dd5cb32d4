"""TelemetryEngine - the entry points callers use."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from .calculations import as_timestamp, sanitize
from .config import EngineConfig
from .events import FuelEvent, MaintenanceEvent
from .maintenance import MaintenanceTask, upcoming_tasks
from .relative_time import format_relative
from .report import Report, assemble_report
from .store import EventStore

logger = logging.getLogger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class Activity:
    """One fuel or maintenance event in the activity feed."""

    id: str
    kind: str
    description: str
    date: str
    when: str
    amount: float


def _require_now(now: Any) -> datetime:
    parsed = as_timestamp(now)
    if parsed is None:
        raise ValueError(f"now must be a datetime or ISO-8601 string, got {now!r}")
    return parsed


class TelemetryEngine:
    """
    Computes reports, upcoming tasks and activity feeds.

    The engine holds no state besides its injected store and config; every
    call reads a fresh snapshot and takes ``now`` explicitly.
    """

    def __init__(self, store: EventStore, config: Optional[EngineConfig] = None):
        self.store = store
        self.config = config or EngineConfig()

    def compute_report(self, vehicle_id: str, now: Union[datetime, str]) -> Report:
        """Full dashboard report. Raises VehicleNotFound for unknown ids."""
        now = _require_now(now)
        log = self.store.snapshot(vehicle_id)
        return assemble_report(
            log.vehicle, log.fuel_events, log.maintenance_events, now, self.config
        )

    def compute_upcoming_tasks(
        self, vehicle_id: str, now: Union[datetime, str]
    ) -> List[MaintenanceTask]:
        """Predicted next service plus configured recurring rules, most urgent first."""
        now = _require_now(now)
        log = self.store.snapshot(vehicle_id)
        tasks = upcoming_tasks(
            log.maintenance_events,
            log.vehicle.odometer_value,
            now,
            self.config.recurring_rules,
            self.config.due_soon_distance,
            self.config.due_soon_days,
        )
        logger.debug("Vehicle %s: %d upcoming tasks", vehicle_id, len(tasks))
        return tasks

    def compute_recent_activities(
        self, vehicle_id: str, now: Union[datetime, str], limit: Optional[int] = None
    ) -> List[Activity]:
        """Fuel and maintenance events merged newest first, with relative ages."""
        now = _require_now(now)
        if limit is None:
            limit = self.config.activity_limit
        log = self.store.snapshot(vehicle_id)
        if limit <= 0:
            return []

        events: List[Union[FuelEvent, MaintenanceEvent]] = []
        events.extend(log.fuel_events)
        events.extend(log.maintenance_events)
        events.sort(key=_activity_key, reverse=True)

        return [self._activity(e, now) for e in events[:limit]]

    def _activity(self, event: Union[FuelEvent, MaintenanceEvent], now: datetime) -> Activity:
        timestamp = event.timestamp
        if isinstance(event, FuelEvent):
            volume = event.volume_value
            if volume is not None:
                description = f"Fuel added - {volume:g}{self.config.volume_unit}"
            else:
                description = "Fuel added"
        else:
            description = event.service_kind or "Service"
        return Activity(
            id=str(event.id),
            kind=event.kind,
            description=description,
            date=timestamp.date().isoformat() if timestamp is not None else "",
            when=format_relative(timestamp, now),
            amount=sanitize(event.cost_value, 2),
        )


def _activity_key(event: Union[FuelEvent, MaintenanceEvent]):
    # reverse-sorted: timestamped events first, newest first, then by id
    timestamp = event.timestamp
    return (
        timestamp is not None,
        timestamp if timestamp is not None else _EARLIEST,
        str(event.id),
    )
