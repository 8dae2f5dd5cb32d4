"""Exceptions raised by the telemetry package."""


class TelemetryError(Exception):
    """Base class for telemetry errors."""


class NotFound(TelemetryError):
    """An unknown vehicle or event id was requested."""


class VehicleNotFound(NotFound):
    def __init__(self, vehicle_id: str):
        super().__init__(f"Vehicle '{vehicle_id}' not found")
        self.vehicle_id = vehicle_id


class EventNotFound(NotFound):
    def __init__(self, event_id: str):
        super().__init__(f"Event '{event_id}' not found")
        self.event_id = event_id


class ConfigError(TelemetryError):
    """Configuration file is unreadable or violates the config schema."""
