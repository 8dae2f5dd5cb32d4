"""Flask JSON API for vehicle usage telemetry."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request

from telemetry import (
    EngineConfig,
    NotFound,
    TelemetryEngine,
    YamlEventStore,
    as_timestamp,
    load_config,
)
from telemetry.store import EventStore

logger = logging.getLogger(__name__)

# Path to vehicle logs directory (relative to project root)
LOGS_DIR = Path(__file__).parent.parent / "logs"


class BadRequest(Exception):
    pass


def parse_now(value: Optional[str]) -> datetime:
    """?now= query value; the clock is read here, never inside the engine."""
    if not value:
        return datetime.now(timezone.utc)
    parsed = as_timestamp(value)
    if parsed is None:
        raise BadRequest(f"Invalid 'now' timestamp: {value}")
    return parsed


def parse_limit(value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"Invalid 'limit': {value}") from None


def task_to_dict(task) -> dict:
    return {
        "title": task.title,
        "kind": task.kind,
        "priority": task.priority.label,
        "dueInDistance": task.due_in_distance if task.due_in_distance is not None else 0,
        "dueInDistanceKnown": task.due_in_distance is not None,
        "dueInDays": task.due_in_days if task.due_in_days is not None else 0,
        "dueInDaysKnown": task.due_in_days is not None,
    }


def activity_to_dict(activity) -> dict:
    return {
        "id": activity.id,
        "type": activity.kind,
        "description": activity.description,
        "date": activity.date,
        "when": activity.when,
        "amount": activity.amount,
    }


def create_app(
    store: Optional[EventStore] = None, config: Optional[EngineConfig] = None
) -> Flask:
    """Build the API around an injected event store and engine config."""
    if store is None:
        store = YamlEventStore(os.environ.get("RIDELOG_DIR", LOGS_DIR))
    if config is None:
        config_path = os.environ.get("RIDELOG_CONFIG")
        config = load_config(config_path) if config_path else EngineConfig()

    app = Flask(__name__)
    engine = TelemetryEngine(store, config)

    @app.errorhandler(NotFound)
    def not_found(error):
        return jsonify({"message": str(error)}), 404

    @app.errorhandler(BadRequest)
    def bad_request(error):
        return jsonify({"message": str(error)}), 400

    @app.route("/vehicles")
    def vehicle_list():
        """All known vehicles."""
        vehicles = []
        for vehicle_id in store.vehicle_ids():
            vehicle = store.get_vehicle(vehicle_id)
            vehicles.append({"id": vehicle_id, "name": vehicle.name})
        return jsonify(vehicles)

    @app.route("/vehicles/<vehicle_id>/report")
    def vehicle_report(vehicle_id: str):
        """Dashboard report for one vehicle."""
        now = parse_now(request.args.get("now"))
        report = engine.compute_report(vehicle_id, now)
        return jsonify(report.to_dict())

    @app.route("/vehicles/<vehicle_id>/tasks")
    def vehicle_tasks(vehicle_id: str):
        """Upcoming maintenance tasks, most urgent first."""
        now = parse_now(request.args.get("now"))
        tasks = engine.compute_upcoming_tasks(vehicle_id, now)
        return jsonify([task_to_dict(t) for t in tasks])

    @app.route("/vehicles/<vehicle_id>/activities")
    def vehicle_activities(vehicle_id: str):
        """Recent fuel and maintenance activity, newest first."""
        now = parse_now(request.args.get("now"))
        limit = parse_limit(request.args.get("limit"))
        activities = engine.compute_recent_activities(vehicle_id, now, limit)
        return jsonify([activity_to_dict(a) for a in activities])

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    create_app().run(debug=True, host="0.0.0.0", port=5001)
