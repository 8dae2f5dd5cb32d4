"""Flask JSON API for vehicle usage telemetry."""
