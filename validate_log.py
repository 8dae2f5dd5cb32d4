#!/usr/bin/env python3
"""Validate vehicle log YAML files against the schema."""
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml
from jsonschema import validate, ValidationError


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _dates_to_text(value: Any) -> Any:
    """YAML turns unquoted dates into date objects; the schema expects strings."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _dates_to_text(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_dates_to_text(v) for v in value]
    return value


def check_log_consistency(data: dict, stem: str) -> list[str]:
    """
    Checks the schema cannot express.

    The vehicle id, when given, must match the file name the store looks it
    up by, and explicit event ids must be unique within each section.
    """
    errors = []
    vehicle_id = data["vehicle"].get("id")
    if vehicle_id is not None and vehicle_id != stem:
        errors.append(f"Vehicle id '{vehicle_id}' does not match file name '{stem}'")

    for section in ("fuel", "maintenance"):
        seen = set()
        for entry in data.get(section) or []:
            if entry.get("id") is None:
                continue
            event_id = str(entry["id"])
            if event_id in seen:
                errors.append(f"Duplicate {section} id: {event_id}")
            seen.add(event_id)
    return errors


def validate_log_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single vehicle log file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=_dates_to_text(data), schema=schema)
        errors.extend(check_log_consistency(data, Path(filepath).stem))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate all vehicle log files in a directory (default: logs/)."""
    argv = sys.argv[1:] if argv is None else argv
    schema = load_schema()
    logs_dir = Path(argv[0]) if argv else Path(__file__).parent / "logs"

    if not logs_dir.exists():
        print(f"Error: logs directory not found: {logs_dir}")
        return 1

    yaml_files = list(logs_dir.glob("*.yaml")) + list(logs_dir.glob("*.yml"))

    if not yaml_files:
        print(f"Warning: No YAML files found in {logs_dir}")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_log_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
