"""
Vehicle usage telemetry: aggregation and reporting.

This package turns an unordered, occasionally malformed log of fuel and
maintenance events into dashboard metrics:
- FuelEvent / MaintenanceEvent / Vehicle: logged data
- sequencer: deterministic ordering of fuel events
- efficiency: distance-weighted fuel efficiency
- costs: totals and cost-per-distance over time windows
- trends: sparse calendar-month buckets
- maintenance: next service prediction and recurring rules
- relative_time: "today" / "N days ago" formatting
- report: the sanitized dashboard report
- TelemetryEngine: the entry points, fed by an injected EventStore
"""

from .calculations import UNAVAILABLE, Unavailable, as_number, as_timestamp, safe_divide
from .errors import (
    ConfigError,
    EventNotFound,
    NotFound,
    TelemetryError,
    VehicleNotFound,
)
from .priority import Priority
from .vehicle import Vehicle
from .events import FuelEvent, MaintenanceEvent, compute_total_cost
from .rule import RecurringRule
from .sequencer import sequence_fuel_events
from .efficiency import EfficiencySample, aggregate_efficiency, efficiency_samples
from .costs import CostSummary, CostWindow, aggregate_costs
from .trends import TrendBucket, bucketize
from .maintenance import MaintenanceTask, predict_next_service, upcoming_tasks
from .relative_time import format_relative
from .config import EngineConfig, load_config
from .report import Report, assemble_report
from .loader import VehicleLog, load_vehicle_log
from .store import EventStore, InMemoryEventStore, YamlEventStore
from .engine import Activity, TelemetryEngine

__all__ = [
    "UNAVAILABLE",
    "Unavailable",
    "as_number",
    "as_timestamp",
    "safe_divide",
    "ConfigError",
    "EventNotFound",
    "NotFound",
    "TelemetryError",
    "VehicleNotFound",
    "Priority",
    "Vehicle",
    "FuelEvent",
    "MaintenanceEvent",
    "compute_total_cost",
    "RecurringRule",
    "sequence_fuel_events",
    "EfficiencySample",
    "aggregate_efficiency",
    "efficiency_samples",
    "CostSummary",
    "CostWindow",
    "aggregate_costs",
    "TrendBucket",
    "bucketize",
    "MaintenanceTask",
    "predict_next_service",
    "upcoming_tasks",
    "format_relative",
    "EngineConfig",
    "load_config",
    "Report",
    "assemble_report",
    "VehicleLog",
    "load_vehicle_log",
    "EventStore",
    "InMemoryEventStore",
    "YamlEventStore",
    "Activity",
    "TelemetryEngine",
]
