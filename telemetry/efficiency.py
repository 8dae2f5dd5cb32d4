"""Distance-weighted fuel efficiency from consecutive odometer readings."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .calculations import Metric, UNAVAILABLE, safe_divide
from .events import FuelEvent
from .sequencer import sequence_fuel_events

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EfficiencySample:
    """Distance covered on the fuel bought at the closing event."""

    event_id: str
    distance: float
    volume: float
    # closing event itself; ids are not guaranteed unique
    event: Optional[FuelEvent] = field(default=None, compare=False, repr=False)

    @property
    def ratio(self) -> float:
        return self.distance / self.volume


def efficiency_samples(events: Iterable[FuelEvent]) -> List[EfficiencySample]:
    """
    Build samples from adjacent pairs of sequenced readings.

    A pair only yields a sample when the distance is positive and the
    closing event has a positive volume. Events without a usable odometer
    are skipped entirely; they never break a pair.
    """
    readings = []
    for event in sequence_fuel_events(events):
        if event.odometer_value is None:
            logger.warning("Excluding fuel event %s from efficiency: malformed odometer", event.id)
            continue
        readings.append(event)

    samples = []
    for previous, current in zip(readings, readings[1:]):
        distance = current.odometer_value - previous.odometer_value
        volume = current.volume_value
        if distance <= 0:
            logger.debug(
                "Skipping segment %s -> %s: non-increasing odometer (%s)",
                previous.id,
                current.id,
                distance,
            )
            continue
        if volume is None:
            logger.warning("Skipping segment ending at %s: malformed volume", current.id)
            continue
        if volume <= 0:
            logger.debug("Skipping segment ending at %s: zero volume", current.id)
            continue
        samples.append(EfficiencySample(current.id, distance, volume, current))
    return samples


def aggregate_efficiency(events: Iterable[FuelEvent]) -> Metric:
    """Sum of distances over sum of volumes, or UNAVAILABLE."""
    return weighted_efficiency(efficiency_samples(events))


def weighted_efficiency(samples: List[EfficiencySample]) -> Metric:
    if not samples:
        return UNAVAILABLE
    total_distance = sum(s.distance for s in samples)
    total_volume = sum(s.volume for s in samples)
    return safe_divide(total_distance, total_volume)
