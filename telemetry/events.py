"""FuelEvent and MaintenanceEvent classes for logged vehicle usage."""

from datetime import datetime
from typing import Any, List, Optional

from .calculations import as_number, as_timestamp


def compute_total_cost(volume: Any, unit_cost: Any) -> Optional[float]:
    """total cost = volume x unit cost, rounded to cents."""
    volume_value = as_number(volume)
    unit_cost_value = as_number(unit_cost)
    if volume_value is None or unit_cost_value is None:
        return None
    return round(volume_value * unit_cost_value, 2)


class FuelEvent:
    """
    A single refuelling.

    Raw values are kept as logged. The ``*_value`` properties return the
    cleaned number, or None when the field is missing or malformed.
    """

    kind = "fuel"

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            timestamp: Any,
            volume: Any,
            unit_cost: Any,
            odometer: Any,
            total_cost: Any = None,
            note: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.raw_timestamp = timestamp
        self.volume = volume
        self.unit_cost = unit_cost
        self.odometer = odometer
        if as_number(total_cost) is None:
            total_cost = compute_total_cost(volume, unit_cost)
        self.total_cost = total_cost
        self.note = note

    def __repr__(self) -> str:
        return (
            f"FuelEvent(id={self.id!r}, timestamp={self.raw_timestamp!r}, "
            f"volume={self.volume!r}, odometer={self.odometer!r})"
        )

    @property
    def timestamp(self) -> Optional[datetime]:
        return as_timestamp(self.raw_timestamp)

    @property
    def volume_value(self) -> Optional[float]:
        return as_number(self.volume)

    @property
    def unit_cost_value(self) -> Optional[float]:
        return as_number(self.unit_cost)

    @property
    def cost_value(self) -> Optional[float]:
        return as_number(self.total_cost)

    @property
    def odometer_value(self) -> Optional[float]:
        return as_number(self.odometer)

    @property
    def issues(self) -> List[str]:
        """Names of malformed fields."""
        problems = []
        if self.timestamp is None:
            problems.append("timestamp")
        if self.volume_value is None:
            problems.append("volume")
        if self.unit_cost_value is None:
            problems.append("unit_cost")
        if self.cost_value is None:
            problems.append("total_cost")
        if self.odometer_value is None:
            problems.append("odometer")
        return problems

    def edited(self, **changes: Any) -> "FuelEvent":
        """
        Return a copy with the given fields replaced.

        total_cost is always recomputed from volume and unit_cost.
        """
        fields = {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "timestamp": self.raw_timestamp,
            "volume": self.volume,
            "unit_cost": self.unit_cost,
            "odometer": self.odometer,
            "note": self.note,
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"Unknown fuel event fields: {', '.join(sorted(unknown))}")
        fields.update(changes)
        return FuelEvent(**fields)


class MaintenanceEvent:
    """A record of maintenance performed on a vehicle."""

    kind = "service"

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            timestamp: Any,
            service_kind: str,
            cost: Any,
            odometer: Any,
            next_due_odometer: Any = None,
            description: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.raw_timestamp = timestamp
        self.service_kind = service_kind
        self.cost = cost
        self.odometer = odometer
        self.next_due_odometer = next_due_odometer
        self.description = description

    def __repr__(self) -> str:
        return (
            f"MaintenanceEvent(id={self.id!r}, timestamp={self.raw_timestamp!r}, "
            f"service_kind={self.service_kind!r})"
        )

    @property
    def timestamp(self) -> Optional[datetime]:
        return as_timestamp(self.raw_timestamp)

    @property
    def cost_value(self) -> Optional[float]:
        return as_number(self.cost)

    @property
    def odometer_value(self) -> Optional[float]:
        return as_number(self.odometer)

    @property
    def next_due_value(self) -> Optional[float]:
        return as_number(self.next_due_odometer)

    @property
    def issues(self) -> List[str]:
        """Names of malformed fields (next_due_odometer is optional)."""
        problems = []
        if self.timestamp is None:
            problems.append("timestamp")
        if self.cost_value is None:
            problems.append("cost")
        if self.odometer_value is None:
            problems.append("odometer")
        if self.next_due_odometer is not None and self.next_due_value is None:
            problems.append("next_due_odometer")
        return problems

    def matches(self, service_kind: str) -> bool:
        """Case-insensitive service kind comparison."""
        if not self.service_kind or not service_kind:
            return False
        return self.service_kind.strip().lower() == service_kind.strip().lower()
