"""Priority enum for upcoming maintenance tasks."""

from enum import Enum


class Priority(Enum):
    """Task priority levels. Lower value = more urgent."""

    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @property
    def label(self) -> str:
        return self.name.lower()
