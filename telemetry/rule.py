"""RecurringRule class for fixed maintenance intervals."""
from typing import Optional

from .priority import Priority


class RecurringRule:
    """A maintenance task that recurs every N distance and/or N days."""

    def __init__(
            self,
            title: str,
            service_kind: Optional[str] = None,
            interval_distance: Optional[float] = None,
            interval_days: Optional[float] = None,
            start_distance: float = 0,
            priority: Priority = Priority.MEDIUM,
    ):
        self.title = title
        self.service_kind = service_kind or title
        self.interval_distance = interval_distance
        self.interval_days = interval_days
        self.start_distance = start_distance or 0
        self.priority = priority or Priority.MEDIUM

    def __repr__(self) -> str:
        return f"RecurringRule(title={self.title!r}, service_kind={self.service_kind!r})"

    @property
    def key(self) -> str:
        """Natural key used to match maintenance events."""
        return self.service_kind.strip().lower()
