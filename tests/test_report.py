#!/usr/bin/env python3
"""
Tests for report assembly.

Covers:
1. Headline totals from the sample R15 log
2. Empty and single-event logs never produce None or NaN
3. Idempotence and input order independence
4. Serialization to a null-free camelCase dict
"""

import math
import random
from datetime import datetime, timezone
from pathlib import Path

import pytest

from telemetry import (
    UNAVAILABLE,
    EngineConfig,
    FuelEvent,
    MaintenanceEvent,
    Vehicle,
    assemble_report,
    efficiency_samples,
    load_vehicle_log,
)
from telemetry.report import cost_breakdown, fuel_price_trend, recent_fuel_events

SAMPLE_LOG = Path(__file__).parent.parent / "logs" / "r15.yaml"
NOW = datetime(2024, 6, 20, tzinfo=timezone.utc)


def walk(value):
    """Yield every leaf in a nested dict/list structure."""
    if isinstance(value, dict):
        for v in value.values():
            yield from walk(v)
    elif isinstance(value, list):
        for v in value:
            yield from walk(v)
    else:
        yield value


def assert_clean(data):
    for leaf in walk(data):
        assert leaf is not None
        if isinstance(leaf, float):
            assert math.isfinite(leaf)


@pytest.fixture
def sample_log():
    return load_vehicle_log(SAMPLE_LOG)


@pytest.fixture
def sample_report(sample_log):
    return assemble_report(
        sample_log.vehicle, sample_log.fuel_events, sample_log.maintenance_events, NOW
    )


# =============================================================================
# Sample log
# =============================================================================


class TestSampleReport:
    """Totals for the bundled R15 log."""

    def test_totals(self, sample_report):
        assert sample_report.total_fuel == pytest.approx(60.9)
        assert sample_report.total_fuel_spend == 6924.0
        assert sample_report.total_maintenance_spend == 2500.0
        assert sample_report.total_spend == 9424.0
        assert sample_report.fuel_event_count == 8
        assert sample_report.maintenance_event_count == 1

    def test_efficiency_is_distance_weighted(self, sample_report):
        # (15420 - 12850) / (60.9 - 6.9)
        assert sample_report.fuel_efficiency == pytest.approx(47.6)

    def test_ratios(self, sample_report):
        assert sample_report.average_unit_cost == pytest.approx(113.7)
        assert sample_report.cost_per_distance == pytest.approx(0.61)

    def test_rolling_window_spend(self, sample_report):
        # 2024-06-01 and 2024-06-15 fills; the 2024-05-15 service is outside 30 days
        assert sample_report.monthly_spending == 1838.0

    def test_trends_are_monthly(self, sample_report):
        assert [p.period for p in sample_report.spending_trend] == [
            "2024-03",
            "2024-04",
            "2024-05",
            "2024-06",
        ]
        may = sample_report.spending_trend[2]
        assert may.spend == 4195.0
        assert sample_report.fuel_consumption_trend[0].volume == pytest.approx(14.7)

    def test_recent_fuel_events_newest_first(self, sample_report):
        recent = sample_report.recent_fuel_events
        assert [e.id for e in recent] == ["f8", "f7", "f6", "f5", "f4"]
        assert recent[0].date == "2024-06-15"
        assert recent[0].efficiency == pytest.approx(43.5)
        assert recent[0].note == "Full tank before trip"

    def test_cost_breakdown(self, sample_report):
        assert [(c.category, c.value) for c in sample_report.cost_breakdown] == [
            ("fuel", 6924.0),
            ("maintenance", 2500.0),
            ("parts", 0.0),
        ]

    def test_idempotent(self, sample_log, sample_report):
        again = assemble_report(
            sample_log.vehicle, sample_log.fuel_events, sample_log.maintenance_events, NOW
        )
        assert again == sample_report

    def test_input_order_does_not_matter(self, sample_log, sample_report):
        fuel = list(sample_log.fuel_events)
        random.Random(3).shuffle(fuel)
        shuffled = assemble_report(
            sample_log.vehicle, fuel, sample_log.maintenance_events, NOW
        )
        assert shuffled == sample_report

    def test_to_dict_is_clean(self, sample_report):
        data = sample_report.to_dict()
        assert_clean(data)
        assert data["fuelEfficiencyAvailable"] is True
        assert data["vehicle"]["name"] == "2023 Yamaha R15 V4"
        assert data["recentFuelEvents"][0]["unitCost"] == 118.0


# =============================================================================
# Degenerate logs
# =============================================================================


class TestDegenerateReports:
    """Empty, single-event and malformed logs."""

    def test_empty_log(self):
        report = assemble_report(Vehicle("v", "Honda", "Civic", 2020, 0), [], [], NOW)
        assert report.total_fuel == 0.0
        assert report.total_spend == 0.0
        assert report.monthly_spending == 0.0
        assert report.fuel_efficiency is UNAVAILABLE
        assert report.average_unit_cost is UNAVAILABLE
        assert report.cost_per_distance is UNAVAILABLE
        assert report.recent_fuel_events == []
        assert report.spending_trend == []

        data = report.to_dict()
        assert_clean(data)
        assert data["fuelEfficiency"] == 0.0
        assert data["fuelEfficiencyAvailable"] is False

    def test_single_event(self):
        vehicle = Vehicle("v", "Honda", "Civic", 2020, 1000)
        fuel = [FuelEvent("a", "v", "2024-06-01", 5, 100, 1000)]
        report = assemble_report(vehicle, fuel, [], NOW)
        assert report.total_fuel == 5.0
        assert report.total_fuel_spend == 500.0
        assert report.fuel_efficiency is UNAVAILABLE
        assert report.cost_per_distance == 0.5
        assert [e.id for e in report.recent_fuel_events] == ["a"]
        assert report.recent_fuel_events[0].efficiency is UNAVAILABLE
        assert_clean(report.to_dict())

    def test_excluded_segment_still_counts_toward_spend(self):
        vehicle = Vehicle("v", "Honda", "Civic", 2020, 1100)
        fuel = [
            FuelEvent("a", "v", "2024-06-01", 5, 100, 1100),
            FuelEvent("b", "v", "2024-06-02", 4, 100, 1100),
        ]
        report = assemble_report(vehicle, fuel, [], NOW)
        assert report.fuel_efficiency is UNAVAILABLE
        assert report.total_fuel_spend == 900.0
        assert report.total_fuel == 9.0

    def test_malformed_fields_default_to_zero(self):
        vehicle = Vehicle("v", None, None, None, "unknown")
        fuel = [FuelEvent("a", "v", "garbage", "lots", "?", None)]
        maintenance = [MaintenanceEvent("m", "v", None, None, "free", None)]
        report = assemble_report(vehicle, fuel, maintenance, NOW)
        assert report.vehicle.current_odometer == 0.0
        assert report.vehicle.name == "v"
        assert report.total_spend == 0.0
        assert report.recent_fuel_events[0].date == ""
        assert_clean(report.to_dict())

    def test_out_of_range_values_are_excluded(self):
        vehicle = Vehicle("v", "Honda", "Civic", 2020, 2000)
        fuel = [
            FuelEvent("a", "v", "2024-06-01", 5, 100, 1000),
            FuelEvent("huge", "v", "2024-06-02", 5, 100, 10 ** 400),
            FuelEvent("early", "v", "0001-01-01T00:00:00+05:00", 5, 100, 1500),
        ]
        report = assemble_report(vehicle, fuel, [], NOW)
        assert report.fuel_event_count == 3
        assert report.total_fuel_spend == 1500.0
        assert [p.event_id for p in report.efficiency_history] == ["early"]
        assert_clean(report.to_dict())

    def test_rejects_missing_now(self):
        with pytest.raises(ValueError):
            assemble_report(Vehicle("v", "Honda", "Civic", 2020), [], [], None)


# =============================================================================
# Helpers
# =============================================================================


class TestRecentFuelEvents:
    def test_limit(self):
        fuel = [FuelEvent(str(i), "v", f"2024-06-0{i}", 5, 100, 1000 + i) for i in range(1, 8)]
        assert [e.id for e in recent_fuel_events(fuel, 3)] == ["7", "6", "5"]

    def test_zero_limit(self):
        fuel = [FuelEvent("a", "v", "2024-06-01", 5, 100, 1000)]
        assert recent_fuel_events(fuel, 0) == []

    def test_undated_events_last(self):
        fuel = [
            FuelEvent("undated", "v", None, 5, 100, 9000),
            FuelEvent("dated", "v", "2020-01-01", 5, 100, 1000),
        ]
        assert [e.id for e in recent_fuel_events(fuel, 5)] == ["dated", "undated"]


class TestFuelPriceTrend:
    def test_oldest_first_skipping_unpriced(self):
        fuel = [
            FuelEvent("b", "v", "2024-02-01", 5, 112.25, 1100),
            FuelEvent("a", "v", "2024-01-01", 5, 110, 1000),
            FuelEvent("c", "v", "2024-03-01", 5, None, 1200),
        ]
        assert [(p.date, p.unit_cost) for p in fuel_price_trend(fuel)] == [
            ("2024-01-01", 110.0),
            ("2024-02-01", 112.2),
        ]


class TestCostBreakdown:
    def test_parts_split_from_maintenance(self):
        config = EngineConfig(parts_service_kinds=["Tyre Replacement"])
        maintenance = [
            MaintenanceEvent("s", "v", "2024-01-01", "General Service", 2500, 1000),
            MaintenanceEvent("t", "v", "2024-02-01", "tyre replacement", 4200, 1500),
        ]
        breakdown = cost_breakdown(1000.0, maintenance, 6700.0, config)
        assert [(c.category, c.value) for c in breakdown] == [
            ("fuel", 1000.0),
            ("maintenance", 2500.0),
            ("parts", 4200.0),
        ]

    def test_duplicate_ids_keep_their_own_efficiency(self):
        fuel = [
            FuelEvent("x", "v", "2024-06-01", 5, 100, 1000),
            FuelEvent("dup", "v", "2024-06-02", 5, 100, 1100),
            FuelEvent("dup", "v", "2024-06-03", 4, 100, 1300),
        ]
        recent = recent_fuel_events(fuel, 5, efficiency_samples(fuel))
        assert [(e.id, e.odometer, e.efficiency) for e in recent] == [
            ("dup", 1300.0, 50.0),
            ("dup", 1100.0, 20.0),
            ("x", 1000.0, UNAVAILABLE),
        ]
