"""Engine configuration loaded from YAML and checked with a JSON schema."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from jsonschema import Draft7Validator

from .errors import ConfigError
from .priority import Priority
from .rule import RecurringRule

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "recentFuelLimit": {"type": "integer", "minimum": 0},
        "rollingWindowDays": {"type": "integer", "minimum": 1},
        "dueSoonDistance": {"type": "number", "minimum": 0},
        "dueSoonDays": {"type": "number", "minimum": 0},
        "activityLimit": {"type": "integer", "minimum": 0},
        "distanceUnit": {"type": "string"},
        "volumeUnit": {"type": "string"},
        "partsServiceKinds": {"type": "array", "items": {"type": "string"}},
        "recurringRules": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["title"],
                "properties": {
                    "title": {"type": "string", "minLength": 1},
                    "serviceKind": {"type": "string"},
                    "intervalDistance": {"type": "number", "exclusiveMinimum": 0},
                    "intervalDays": {"type": "number", "exclusiveMinimum": 0},
                    "startDistance": {"type": "number", "minimum": 0},
                    "priority": {"enum": ["high", "medium", "low"]},
                },
                "anyOf": [
                    {"required": ["intervalDistance"]},
                    {"required": ["intervalDays"]},
                ],
            },
        },
    },
}


@dataclass(frozen=True)
class EngineConfig:
    """Policy knobs for report assembly and task prediction."""

    recent_fuel_limit: int = 5
    rolling_window_days: int = 30
    due_soon_distance: float = 500
    due_soon_days: float = 7
    activity_limit: int = 10
    distance_unit: str = "km"
    volume_unit: str = "L"
    parts_service_kinds: List[str] = field(default_factory=list)
    recurring_rules: List[RecurringRule] = field(default_factory=list)

    def is_parts_kind(self, service_kind: str) -> bool:
        if not service_kind:
            return False
        wanted = service_kind.strip().lower()
        return any(k.strip().lower() == wanted for k in self.parts_service_kinds)


def validate_config(data: Any) -> List[str]:
    """Return a list of schema violations (empty when valid)."""
    validator = Draft7Validator(CONFIG_SCHEMA)
    errors = []
    for error in sorted(validator.iter_errors(data), key=lambda e: list(e.path)):
        location = ".".join(str(p) for p in error.path)
        errors.append(f"{location}: {error.message}" if location else error.message)
    return errors


def _parse_rule(dct: Dict[str, Any]) -> RecurringRule:
    return RecurringRule(
        dct["title"],
        dct.get("serviceKind"),
        dct.get("intervalDistance"),
        dct.get("intervalDays"),
        dct.get("startDistance") or 0,
        Priority[dct.get("priority", "medium").upper()],
    )


def config_from_dict(data: Dict[str, Any]) -> EngineConfig:
    """Build an EngineConfig from camelCase keys, keeping defaults for the rest."""
    errors = validate_config(data)
    if errors:
        raise ConfigError("Invalid config: " + "; ".join(errors))

    defaults = EngineConfig()
    return EngineConfig(
        recent_fuel_limit=data.get("recentFuelLimit", defaults.recent_fuel_limit),
        rolling_window_days=data.get("rollingWindowDays", defaults.rolling_window_days),
        due_soon_distance=data.get("dueSoonDistance", defaults.due_soon_distance),
        due_soon_days=data.get("dueSoonDays", defaults.due_soon_days),
        activity_limit=data.get("activityLimit", defaults.activity_limit),
        distance_unit=data.get("distanceUnit", defaults.distance_unit),
        volume_unit=data.get("volumeUnit", defaults.volume_unit),
        parts_service_kinds=list(data.get("partsServiceKinds") or []),
        recurring_rules=[_parse_rule(r) for r in data.get("recurringRules") or []],
    )


def load_config(filename: Union[str, Path]) -> EngineConfig:
    """Load an engine config from a YAML file."""
    try:
        with open(filename, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader)
    except OSError as e:
        raise ConfigError(f"Cannot read config {filename}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error in {filename}: {e}") from e
    return config_from_dict(data or {})
