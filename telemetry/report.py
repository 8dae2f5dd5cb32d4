"""Report assembly: composes every metric into one sanitized object."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from .calculations import (
    Metric,
    UNAVAILABLE,
    as_timestamp,
    is_available,
    sanitize,
    sanitize_metric,
)
from .config import EngineConfig
from .costs import CostWindow, aggregate_costs, sum_maintenance_cost
from .efficiency import EfficiencySample, efficiency_samples, weighted_efficiency
from .events import FuelEvent, MaintenanceEvent
from .trends import bucketize
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

# Presentation precision
SPEND_DIGITS = 0
VOLUME_DIGITS = 1
EFFICIENCY_DIGITS = 1
UNIT_COST_DIGITS = 1
EVENT_COST_DIGITS = 2
COST_PER_DISTANCE_DIGITS = 2


@dataclass
class VehicleSummary:
    id: str
    name: str
    brand: str
    model: str
    year: str
    current_odometer: float
    registration_number: str = ""


@dataclass
class FuelEntry:
    """A fuel event as shown in the recent-events list."""

    id: str
    date: str
    volume: float
    unit_cost: float
    total_cost: float
    odometer: float
    efficiency: Metric = UNAVAILABLE
    note: str = ""


@dataclass
class EfficiencyPoint:
    event_id: str
    distance: float
    volume: float
    ratio: float


@dataclass
class ConsumptionPoint:
    period: str
    volume: float


@dataclass
class SpendPoint:
    period: str
    spend: float


@dataclass
class PricePoint:
    date: str
    unit_cost: float


@dataclass
class CostShare:
    category: str
    value: float


@dataclass
class Report:
    """Presentation-ready report; no field is ever None or NaN."""

    vehicle: VehicleSummary
    generated_at: str
    total_fuel: float = 0.0
    total_fuel_spend: float = 0.0
    total_maintenance_spend: float = 0.0
    total_spend: float = 0.0
    monthly_spending: float = 0.0
    fuel_efficiency: Metric = UNAVAILABLE
    average_unit_cost: Metric = UNAVAILABLE
    cost_per_distance: Metric = UNAVAILABLE
    fuel_event_count: int = 0
    maintenance_event_count: int = 0
    recent_fuel_events: List[FuelEntry] = field(default_factory=list)
    efficiency_history: List[EfficiencyPoint] = field(default_factory=list)
    fuel_consumption_trend: List[ConsumptionPoint] = field(default_factory=list)
    spending_trend: List[SpendPoint] = field(default_factory=list)
    fuel_price_trend: List[PricePoint] = field(default_factory=list)
    cost_breakdown: List[CostShare] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-ready camelCase view.

        Tagged metrics become a number (0 when unavailable) plus an explicit
        ``<name>Available`` flag, so the output never holds null.
        """
        data: Dict[str, Any] = {
            "vehicle": {
                "id": self.vehicle.id,
                "name": self.vehicle.name,
                "brand": self.vehicle.brand,
                "model": self.vehicle.model,
                "year": self.vehicle.year,
                "registrationNumber": self.vehicle.registration_number,
                "currentOdometer": self.vehicle.current_odometer,
            },
            "generatedAt": self.generated_at,
            "totalFuel": self.total_fuel,
            "totalFuelSpend": self.total_fuel_spend,
            "totalMaintenanceSpend": self.total_maintenance_spend,
            "totalSpend": self.total_spend,
            "monthlySpending": self.monthly_spending,
            "fuelEventCount": self.fuel_event_count,
            "maintenanceEventCount": self.maintenance_event_count,
            "recentFuelEvents": [
                {
                    "id": e.id,
                    "date": e.date,
                    "volume": e.volume,
                    "unitCost": e.unit_cost,
                    "totalCost": e.total_cost,
                    "odometer": e.odometer,
                    "note": e.note,
                    **_tagged("efficiency", e.efficiency),
                }
                for e in self.recent_fuel_events
            ],
            "efficiencyHistory": [
                {
                    "eventId": p.event_id,
                    "distance": p.distance,
                    "volume": p.volume,
                    "ratio": p.ratio,
                }
                for p in self.efficiency_history
            ],
            "fuelConsumptionTrend": [
                {"period": p.period, "volume": p.volume}
                for p in self.fuel_consumption_trend
            ],
            "spendingTrend": [
                {"period": p.period, "spend": p.spend} for p in self.spending_trend
            ],
            "fuelPriceTrend": [
                {"date": p.date, "unitCost": p.unit_cost} for p in self.fuel_price_trend
            ],
            "costBreakdown": [
                {"category": c.category, "value": c.value} for c in self.cost_breakdown
            ],
        }
        data.update(_tagged("fuelEfficiency", self.fuel_efficiency))
        data.update(_tagged("averageUnitCost", self.average_unit_cost))
        data.update(_tagged("costPerDistance", self.cost_per_distance))
        return data


def _tagged(name: str, value: Metric) -> Dict[str, Any]:
    available = is_available(value)
    return {name: value if available else 0.0, f"{name}Available": available}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _date_text(timestamp: Optional[datetime]) -> str:
    return timestamp.date().isoformat() if timestamp is not None else ""


def _newest_first_key(event: FuelEvent):
    timestamp = event.timestamp
    odometer = event.odometer_value
    return (
        timestamp is not None,
        timestamp if timestamp is not None else _EARLIEST,
        odometer if odometer is not None else 0.0,
        str(event.id),
    )


def recent_fuel_events(
    events: Iterable[FuelEvent], limit: int, samples: Iterable[EfficiencySample] = ()
) -> List[FuelEntry]:
    """Most recent fuel events, newest first, with their segment efficiency."""
    if limit <= 0:
        return []
    ratios = {id(s.event): s.ratio for s in samples if s.event is not None}
    newest = sorted(events, key=_newest_first_key, reverse=True)[:limit]
    return [
        FuelEntry(
            id=_text(e.id),
            date=_date_text(e.timestamp),
            volume=sanitize(e.volume_value, VOLUME_DIGITS),
            unit_cost=sanitize(e.unit_cost_value, UNIT_COST_DIGITS),
            total_cost=sanitize(e.cost_value, EVENT_COST_DIGITS),
            odometer=sanitize(e.odometer_value, 0),
            efficiency=sanitize_metric(ratios.get(id(e), UNAVAILABLE), EFFICIENCY_DIGITS),
            note=_text(e.note),
        )
        for e in newest
    ]


def fuel_price_trend(events: Iterable[FuelEvent]) -> List[PricePoint]:
    """Unit cost per fuel event, oldest first."""
    priced = [
        e for e in events if e.timestamp is not None and e.unit_cost_value is not None
    ]
    priced.sort(key=lambda e: (e.timestamp, str(e.id)))
    return [
        PricePoint(_date_text(e.timestamp), sanitize(e.unit_cost_value, UNIT_COST_DIGITS))
        for e in priced
    ]


def cost_breakdown(
    fuel_cost: float,
    maintenance_events: Iterable[MaintenanceEvent],
    maintenance_cost: float,
    config: EngineConfig,
) -> List[CostShare]:
    """Fuel / maintenance / parts split; parts is 0 unless configured."""
    parts = [e for e in maintenance_events if config.is_parts_kind(e.service_kind)]
    parts_cost = sum_maintenance_cost(parts)
    return [
        CostShare("fuel", sanitize(fuel_cost, SPEND_DIGITS)),
        CostShare("maintenance", sanitize(maintenance_cost - parts_cost, SPEND_DIGITS)),
        CostShare("parts", sanitize(parts_cost, SPEND_DIGITS)),
    ]


def summarize_vehicle(vehicle: Vehicle) -> VehicleSummary:
    return VehicleSummary(
        id=_text(vehicle.id),
        name=vehicle.name,
        brand=_text(vehicle.brand),
        model=_text(vehicle.model),
        year=_text(vehicle.year),
        current_odometer=sanitize(vehicle.odometer_value, 0),
        registration_number=_text(vehicle.registration_number),
    )


def assemble_report(
    vehicle: Vehicle,
    fuel_events: Iterable[FuelEvent],
    maintenance_events: Iterable[MaintenanceEvent],
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> Report:
    """
    Build the dashboard report for one vehicle at an explicit point in time.

    Internal values keep full precision; rounding happens here, once.
    """
    config = config or EngineConfig()
    now = as_timestamp(now)
    if now is None:
        raise ValueError("now must be a datetime or ISO-8601 string")
    fuel = list(fuel_events)
    maintenance = list(maintenance_events)
    current_odometer = vehicle.odometer_value

    lifetime = aggregate_costs(fuel, maintenance, current_odometer)
    rolling = aggregate_costs(
        fuel,
        maintenance,
        current_odometer,
        CostWindow(now - timedelta(days=config.rolling_window_days), now),
    )
    samples = efficiency_samples(fuel)
    buckets = bucketize(fuel, maintenance)

    logger.debug(
        "Report for %s: %d fuel, %d maintenance, %d samples, %d buckets",
        vehicle.id,
        len(fuel),
        len(maintenance),
        len(samples),
        len(buckets),
    )

    return Report(
        vehicle=summarize_vehicle(vehicle),
        generated_at=now.isoformat(),
        total_fuel=sanitize(lifetime.total_volume, VOLUME_DIGITS),
        total_fuel_spend=sanitize(lifetime.total_fuel_cost, SPEND_DIGITS),
        total_maintenance_spend=sanitize(lifetime.total_maintenance_cost, SPEND_DIGITS),
        total_spend=sanitize(lifetime.total_cost, SPEND_DIGITS),
        monthly_spending=sanitize(rolling.total_cost, SPEND_DIGITS),
        fuel_efficiency=sanitize_metric(weighted_efficiency(samples), EFFICIENCY_DIGITS),
        average_unit_cost=sanitize_metric(lifetime.average_unit_cost, UNIT_COST_DIGITS),
        cost_per_distance=sanitize_metric(
            lifetime.cost_per_distance, COST_PER_DISTANCE_DIGITS
        ),
        fuel_event_count=len(fuel),
        maintenance_event_count=len(maintenance),
        recent_fuel_events=recent_fuel_events(fuel, config.recent_fuel_limit, samples),
        efficiency_history=[
            EfficiencyPoint(
                _text(s.event_id),
                sanitize(s.distance, 0),
                sanitize(s.volume, VOLUME_DIGITS),
                sanitize(s.ratio, EFFICIENCY_DIGITS),
            )
            for s in samples
        ],
        fuel_consumption_trend=[
            ConsumptionPoint(b.period_key, sanitize(b.total_volume, VOLUME_DIGITS))
            for b in buckets
        ],
        spending_trend=[
            SpendPoint(b.period_key, sanitize(b.total_spend, SPEND_DIGITS)) for b in buckets
        ],
        fuel_price_trend=fuel_price_trend(fuel),
        cost_breakdown=cost_breakdown(
            lifetime.total_fuel_cost, maintenance, lifetime.total_maintenance_cost, config
        ),
    )
