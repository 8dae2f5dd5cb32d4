#!/usr/bin/env python3
"""Tests for distance-weighted fuel efficiency."""

import random

import pytest

from telemetry import UNAVAILABLE, FuelEvent, aggregate_efficiency, efficiency_samples


def fuel(id, odometer, volume, timestamp="2024-01-01"):
    return FuelEvent(id, "bike", timestamp, volume, 100, odometer)


class TestEfficiencySamples:
    """Tests for efficiency_samples."""

    def test_samples_from_adjacent_pairs(self):
        events = [fuel("a", 1000, 4), fuel("b", 1100, 5), fuel("c", 1250, 6)]
        samples = efficiency_samples(events)
        assert [(s.event_id, s.distance, s.volume) for s in samples] == [
            ("b", 100, 5),
            ("c", 150, 6),
        ]
        assert samples[0].ratio == 20.0
        assert samples[1].ratio == 25.0

    def test_first_reading_volume_is_not_used(self):
        """The opening fill only marks the start; its volume is never counted."""
        events = [fuel("a", 1000, 999), fuel("b", 1100, 5)]
        assert [s.volume for s in efficiency_samples(events)] == [5]

    def test_non_increasing_segment_excluded(self):
        events = [fuel("a", 1000, 5), fuel("b", 1000, 5, "2024-01-02"), fuel("c", 1200, 8)]
        samples = efficiency_samples(events)
        assert [(s.event_id, s.distance) for s in samples] == [("c", 200)]

    def test_zero_volume_excluded(self):
        events = [fuel("a", 1000, 5), fuel("b", 1100, 0), fuel("c", 1300, 10)]
        samples = efficiency_samples(events)
        assert [(s.event_id, s.distance) for s in samples] == [("c", 200)]

    def test_malformed_volume_excluded(self):
        events = [fuel("a", 1000, 5), fuel("b", 1100, "?")]
        assert efficiency_samples(events) == []

    def test_malformed_odometer_skipped_without_breaking_chain(self):
        events = [fuel("a", 1000, 5), fuel("bad", None, 5), fuel("c", 1300, 10)]
        samples = efficiency_samples(events)
        assert [(s.event_id, s.distance, s.volume) for s in samples] == [("c", 300, 10)]


class TestAggregateEfficiency:
    """Tests for aggregate_efficiency."""

    def test_weighted_example(self):
        """(100 + 150) / (5 + 6) = 22.7, not the mean of 20 and 25."""
        events = [fuel("a", 1000, 4), fuel("b", 1100, 5), fuel("c", 1250, 6)]
        result = aggregate_efficiency(events)
        assert result == pytest.approx(250 / 11)
        assert round(result, 1) == 22.7

    def test_input_order_does_not_matter(self):
        events = [fuel(str(i), 1000 + i * 100, 4 + i) for i in range(6)]
        expected = aggregate_efficiency(events)
        shuffled = list(events)
        random.Random(7).shuffle(shuffled)
        assert aggregate_efficiency(shuffled) == expected

    def test_no_events_unavailable(self):
        assert aggregate_efficiency([]) is UNAVAILABLE

    def test_single_event_unavailable(self):
        assert aggregate_efficiency([fuel("a", 1000, 5)]) is UNAVAILABLE

    def test_only_excluded_segments_unavailable(self):
        events = [fuel("a", 1000, 5), fuel("b", 1000, 5, "2024-02-01")]
        assert aggregate_efficiency(events) is UNAVAILABLE
