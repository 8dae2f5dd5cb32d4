"""YAML loading and saving utilities for vehicle logs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import EventNotFound
from .events import FuelEvent, MaintenanceEvent, compute_total_cost
from .vehicle import Vehicle


@dataclass
class VehicleLog:
    """Everything recorded for one vehicle."""

    vehicle: Vehicle
    fuel_events: List[FuelEvent] = field(default_factory=list)
    maintenance_events: List[MaintenanceEvent] = field(default_factory=list)


def _parse_vehicle(dct: Dict[str, Any], vehicle_id: str) -> Vehicle:
    return Vehicle(
        dct.get("id") or vehicle_id,
        dct.get("brand"),
        dct.get("model"),
        dct.get("year"),
        dct.get("currentOdometer", 0),
        dct.get("registrationNumber"),
    )


def _parse_fuel(dct: Dict[str, Any], vehicle_id: str, index: int) -> FuelEvent:
    return FuelEvent(
        str(dct.get("id") or f"fuel-{index}"),
        vehicle_id,
        dct.get("timestamp"),
        dct.get("volume"),
        dct.get("unitCost"),
        dct.get("odometer"),
        dct.get("totalCost"),
        dct.get("note"),
    )


def _parse_maintenance(dct: Dict[str, Any], vehicle_id: str, index: int) -> MaintenanceEvent:
    return MaintenanceEvent(
        str(dct.get("id") or f"service-{index}"),
        vehicle_id,
        dct.get("timestamp"),
        dct.get("serviceKind"),
        dct.get("cost"),
        dct.get("odometer"),
        dct.get("nextDueOdometer"),
        dct.get("description"),
    )


def parse_vehicle_log(data: Optional[Dict[str, Any]], vehicle_id: str) -> VehicleLog:
    """Parse raw YAML data into a VehicleLog. Entries that aren't mappings are dropped."""
    data = data or {}
    vehicle = _parse_vehicle(data.get("vehicle") or {}, vehicle_id)
    fuel = [
        _parse_fuel(d, vehicle.id, i)
        for i, d in enumerate(data.get("fuel") or [])
        if isinstance(d, dict)
    ]
    maintenance = [
        _parse_maintenance(d, vehicle.id, i)
        for i, d in enumerate(data.get("maintenance") or [])
        if isinstance(d, dict)
    ]
    return VehicleLog(vehicle, fuel, maintenance)


def load_vehicle_log(filename: Union[str, Path]) -> VehicleLog:
    """Load a vehicle log from a YAML file. The file stem is the default vehicle id."""
    with open(filename, "rb") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)
    return parse_vehicle_log(data, Path(filename).stem)


def _read(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader) or {}


def _write(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _timestamp_text(value: Any) -> Any:
    """Store timestamps as ISO strings so they survive a round trip unchanged."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _next_id(entries: List[Dict[str, Any]], prefix: str) -> str:
    taken = {str(e.get("id")) for e in entries if isinstance(e, dict)}
    n = len(entries)
    while f"{prefix}-{n}" in taken:
        n += 1
    return f"{prefix}-{n}"


def _find_index(entries: List[Dict[str, Any]], event_id: str, prefix: str) -> int:
    """Locate an entry by explicit id, or by the positional id the loader assigns."""
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        if str(entry.get("id") or f"{prefix}-{i}") == str(event_id):
            return i
    raise EventNotFound(event_id)


def _fuel_to_dict(event: FuelEvent) -> Dict[str, Any]:
    """Serialize a FuelEvent to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": event.id,
        "timestamp": _timestamp_text(event.raw_timestamp),
        "volume": event.volume,
        "unitCost": event.unit_cost,
        "totalCost": compute_total_cost(event.volume, event.unit_cost),
        "odometer": event.odometer,
    }
    if d["totalCost"] is None:
        del d["totalCost"]
    if event.note is not None:
        d["note"] = event.note
    return d


def _maintenance_to_dict(event: MaintenanceEvent) -> Dict[str, Any]:
    """Serialize a MaintenanceEvent to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": event.id,
        "timestamp": _timestamp_text(event.raw_timestamp),
        "serviceKind": event.service_kind,
        "cost": event.cost,
        "odometer": event.odometer,
    }
    if event.next_due_odometer is not None:
        d["nextDueOdometer"] = event.next_due_odometer
    if event.description is not None:
        d["description"] = event.description
    return d


def save_fuel_event(filename: Union[str, Path], event: FuelEvent) -> FuelEvent:
    """
    Append a fuel event to a vehicle log file.

    totalCost is computed from volume and unitCost. An event without an id
    gets the next free positional id. Returns the event as stored.
    """
    data = _read(filename)
    if data.get("fuel") is None:
        data["fuel"] = []

    if not event.id:
        event = event.edited(id=_next_id(data["fuel"], "fuel"))
    data["fuel"].append(_fuel_to_dict(event))

    _write(filename, data)
    return event


def update_fuel_event(filename: Union[str, Path], event: FuelEvent) -> None:
    """Replace the fuel event with the same id, recomputing totalCost."""
    data = _read(filename)
    fuel = data.get("fuel") or []
    index = _find_index(fuel, event.id, "fuel")
    fuel[index] = _fuel_to_dict(event.edited())
    data["fuel"] = fuel
    _write(filename, data)


def delete_fuel_event(filename: Union[str, Path], event_id: str) -> None:
    """Remove a fuel event by id."""
    data = _read(filename)
    fuel = data.get("fuel") or []
    del fuel[_find_index(fuel, event_id, "fuel")]
    data["fuel"] = fuel
    _write(filename, data)


def save_maintenance_event(
    filename: Union[str, Path], event: MaintenanceEvent
) -> MaintenanceEvent:
    """Append a maintenance event to a vehicle log file. Returns the event as stored."""
    data = _read(filename)
    if data.get("maintenance") is None:
        data["maintenance"] = []

    if not event.id:
        event.id = _next_id(data["maintenance"], "service")
    data["maintenance"].append(_maintenance_to_dict(event))

    _write(filename, data)
    return event


def update_maintenance_event(filename: Union[str, Path], event: MaintenanceEvent) -> None:
    """Replace the maintenance event with the same id."""
    data = _read(filename)
    maintenance = data.get("maintenance") or []
    index = _find_index(maintenance, event.id, "service")
    maintenance[index] = _maintenance_to_dict(event)
    data["maintenance"] = maintenance
    _write(filename, data)


def delete_maintenance_event(filename: Union[str, Path], event_id: str) -> None:
    """Remove a maintenance event by id."""
    data = _read(filename)
    maintenance = data.get("maintenance") or []
    del maintenance[_find_index(maintenance, event_id, "service")]
    data["maintenance"] = maintenance
    _write(filename, data)


def save_current_odometer(filename: Union[str, Path], odometer: float) -> None:
    """Update vehicle.currentOdometer in a vehicle log file."""
    data = _read(filename)
    if data.get("vehicle") is None:
        data["vehicle"] = {}
    data["vehicle"]["currentOdometer"] = odometer
    _write(filename, data)


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "brand": vehicle.brand,
        "model": vehicle.model,
        "year": vehicle.year,
        "currentOdometer": vehicle.current_odometer,
    }
    if vehicle.registration_number is not None:
        d["registrationNumber"] = vehicle.registration_number
    return d


def create_vehicle(filename: Union[str, Path], vehicle: Vehicle) -> None:
    """Create a new vehicle log file with empty fuel and maintenance lists."""
    _write(
        filename,
        {"vehicle": _vehicle_to_dict(vehicle), "fuel": [], "maintenance": []},
    )
