"""Maintenance due prediction and upcoming task calculation."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from .events import MaintenanceEvent
from .priority import Priority
from .rule import RecurringRule

logger = logging.getLogger(__name__)

DUE_SOON_DISTANCE = 500
DUE_SOON_DAYS = 7

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class MaintenanceTask:
    """An upcoming piece of maintenance and how soon it is due."""

    title: str
    priority: Priority
    kind: str = "service"
    due_in_distance: Optional[float] = None
    due_in_days: Optional[int] = None
    source_event_id: Optional[str] = None

    @property
    def is_due(self) -> bool:
        return self.due_in_distance == 0 or self.due_in_days == 0


def classify_priority(
    due_in_distance: Optional[float],
    due_in_days: Optional[int] = None,
    soon_distance: float = DUE_SOON_DISTANCE,
    soon_days: float = DUE_SOON_DAYS,
    baseline: Priority = Priority.MEDIUM,
) -> Priority:
    """HIGH when close on either axis, otherwise the baseline priority."""
    if due_in_distance is not None and due_in_distance < soon_distance:
        return Priority.HIGH
    if due_in_days is not None and due_in_days < soon_days:
        return Priority.HIGH
    return baseline


def _latest_key(event: MaintenanceEvent):
    timestamp = event.timestamp
    odometer = event.odometer_value
    return (
        timestamp is not None,
        timestamp if timestamp is not None else _EARLIEST,
        odometer if odometer is not None else -math.inf,
        str(event.id),
    )


def latest_event(events: Iterable[MaintenanceEvent]) -> Optional[MaintenanceEvent]:
    """Most recent event by timestamp; ties go to the higher odometer, then id."""
    events = list(events)
    if not events:
        return None
    return max(events, key=_latest_key)


def predict_next_service(
    events: Iterable[MaintenanceEvent],
    current_odometer: Optional[float],
    soon_distance: float = DUE_SOON_DISTANCE,
) -> Optional[MaintenanceTask]:
    """
    Distance until the service declared by the latest maintenance event.

    Returns None when there is no maintenance history, when the latest
    event declares no next due odometer, or when the current odometer is
    unknown. The due distance is clamped at 0.
    """
    latest = latest_event(events)
    if latest is None:
        return None
    next_due = latest.next_due_value
    if next_due is None:
        if latest.next_due_odometer is not None:
            logger.warning("Maintenance event %s has a malformed next due odometer", latest.id)
        return None
    if current_odometer is None:
        logger.warning("Cannot predict next service: current odometer unknown")
        return None

    due_in_distance = max(0.0, next_due - current_odometer)
    return MaintenanceTask(
        title=latest.service_kind or "Service",
        priority=classify_priority(due_in_distance, soon_distance=soon_distance),
        kind="service",
        due_in_distance=due_in_distance,
        source_event_id=latest.id,
    )


def calc_due_distance(
    last_odometer: Optional[float], interval: Optional[float], start_distance: float = 0
) -> Optional[float]:
    """
    Calculate the next due odometer reading.

    - With history: last_odometer + interval
    - Without history: start_distance + interval
    """
    if interval is None:
        return None
    if last_odometer is not None:
        return last_odometer + interval
    return start_distance + interval


def calc_due_time(
    last_timestamp: Optional[datetime], interval_days: Optional[float]
) -> Optional[datetime]:
    """Calculate the next due time: last + interval days."""
    if interval_days is None or last_timestamp is None:
        return None
    try:
        return last_timestamp + timedelta(days=interval_days)
    except OverflowError:
        return None


def evaluate_rule(
    rule: RecurringRule,
    events: Iterable[MaintenanceEvent],
    current_odometer: Optional[float],
    now: datetime,
    soon_distance: float = DUE_SOON_DISTANCE,
    soon_days: float = DUE_SOON_DAYS,
) -> Optional[MaintenanceTask]:
    """
    Calculate when a recurring rule is next due.

    Logic:
    - Find the latest event whose service kind matches the rule
    - Due distance from that event's odometer (or start_distance) + interval
    - Due time from that event's timestamp + interval days
    - No computable due point: no task
    """
    matching = [e for e in events if e.matches(rule.service_kind)]
    last = latest_event(matching)
    last_odometer = last.odometer_value if last else None
    # A matching event with a malformed odometer can't anchor the distance
    anchored = last is None or last_odometer is not None

    due_in_distance = None
    if current_odometer is not None and anchored:
        due_distance = calc_due_distance(
            last_odometer, rule.interval_distance, rule.start_distance
        )
        if due_distance is not None:
            due_in_distance = max(0.0, due_distance - current_odometer)

    due_in_days = None
    due_time = calc_due_time(last.timestamp if last else None, rule.interval_days)
    if due_time is not None:
        due_in_days = max(0, (due_time - now).days)

    if due_in_distance is None and due_in_days is None:
        return None

    return MaintenanceTask(
        title=rule.title,
        priority=classify_priority(
            due_in_distance, due_in_days, soon_distance, soon_days, rule.priority
        ),
        kind="maintenance",
        due_in_distance=due_in_distance,
        due_in_days=due_in_days,
        source_event_id=last.id if last else None,
    )


def task_sort_key(task: MaintenanceTask):
    return (
        task.priority.value,
        task.due_in_distance if task.due_in_distance is not None else math.inf,
        task.due_in_days if task.due_in_days is not None else math.inf,
        task.title,
    )


def upcoming_tasks(
    events: Iterable[MaintenanceEvent],
    current_odometer: Optional[float],
    now: datetime,
    rules: Iterable[RecurringRule] = (),
    soon_distance: float = DUE_SOON_DISTANCE,
    soon_days: float = DUE_SOON_DAYS,
) -> List[MaintenanceTask]:
    """Predicted next service plus every recurring rule, most urgent first."""
    events = list(events)
    tasks = []
    predicted = predict_next_service(events, current_odometer, soon_distance)
    if predicted is not None:
        tasks.append(predicted)
    for rule in rules:
        task = evaluate_rule(rule, events, current_odometer, now, soon_distance, soon_days)
        if task is not None:
            tasks.append(task)
    return sorted(tasks, key=task_sort_key)
