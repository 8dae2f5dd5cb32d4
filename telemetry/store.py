"""Event Store collaborators that supply snapshots to the engine."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, Sequence, Union

from .errors import VehicleNotFound
from .events import FuelEvent, MaintenanceEvent
from .loader import VehicleLog, load_vehicle_log
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    """Read-only view of a vehicle's logged events."""

    def vehicle_ids(self) -> List[str]:
        ...

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        ...

    def list_fuel_events(self, vehicle_id: str) -> Sequence[FuelEvent]:
        ...

    def list_maintenance_events(self, vehicle_id: str) -> Sequence[MaintenanceEvent]:
        ...

    def snapshot(self, vehicle_id: str) -> VehicleLog:
        """Vehicle and both event lists from one consistent read."""
        ...


class InMemoryEventStore:
    """Event store over plain lists, keyed by vehicle id."""

    def __init__(
        self,
        vehicles: Iterable[Vehicle] = (),
        fuel_events: Iterable[FuelEvent] = (),
        maintenance_events: Iterable[MaintenanceEvent] = (),
    ):
        self._vehicles: Dict[str, Vehicle] = {v.id: v for v in vehicles}
        self._fuel: Dict[str, List[FuelEvent]] = {}
        self._maintenance: Dict[str, List[MaintenanceEvent]] = {}
        for event in fuel_events:
            self._fuel.setdefault(event.vehicle_id, []).append(event)
        for event in maintenance_events:
            self._maintenance.setdefault(event.vehicle_id, []).append(event)

    @classmethod
    def from_log(cls, log: VehicleLog) -> "InMemoryEventStore":
        return cls([log.vehicle], log.fuel_events, log.maintenance_events)

    def vehicle_ids(self) -> List[str]:
        return sorted(self._vehicles)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        try:
            return self._vehicles[vehicle_id]
        except KeyError:
            raise VehicleNotFound(vehicle_id) from None

    def list_fuel_events(self, vehicle_id: str) -> List[FuelEvent]:
        return list(self._fuel.get(vehicle_id, []))

    def list_maintenance_events(self, vehicle_id: str) -> List[MaintenanceEvent]:
        return list(self._maintenance.get(vehicle_id, []))

    def snapshot(self, vehicle_id: str) -> VehicleLog:
        return VehicleLog(
            self.get_vehicle(vehicle_id),
            self.list_fuel_events(vehicle_id),
            self.list_maintenance_events(vehicle_id),
        )


class YamlEventStore:
    """Event store backed by one ``<vehicle_id>.yaml`` log file per vehicle."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, vehicle_id: str) -> Path:
        return self.directory / f"{vehicle_id}.yaml"

    def vehicle_ids(self) -> List[str]:
        return sorted(p.stem for p in self.directory.glob("*.yaml"))

    def _load(self, vehicle_id: str) -> VehicleLog:
        path = self.path_for(vehicle_id)
        # Ids come from callers; refuse anything that escapes the directory
        if path.parent != self.directory or not path.exists():
            raise VehicleNotFound(vehicle_id)
        logger.debug("Loading vehicle log %s", path)
        return load_vehicle_log(path)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        return self._load(vehicle_id).vehicle

    def list_fuel_events(self, vehicle_id: str) -> List[FuelEvent]:
        return self._load(vehicle_id).fuel_events

    def list_maintenance_events(self, vehicle_id: str) -> List[MaintenanceEvent]:
        return self._load(vehicle_id).maintenance_events

    def snapshot(self, vehicle_id: str) -> VehicleLog:
        """Load vehicle and events in a single read of the log file."""
        return self._load(vehicle_id)
