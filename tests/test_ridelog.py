#!/usr/bin/env python3
"""Tests for the ridelog CLI formatting, table helpers and commands."""

import argparse
import shutil
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from telemetry import UNAVAILABLE, MaintenanceTask, Priority
from telemetry.engine import Activity
from ridelog import (
    format_days,
    format_distance,
    format_metric,
    format_money,
    main,
    make_activity_table,
    make_task_table,
    parse_now,
    truncate,
)

SAMPLE_LOG = Path(__file__).parent.parent / "logs" / "r15.yaml"


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "r15.yaml"
    shutil.copy(SAMPLE_LOG, path)
    return path


# =============================================================================
# Formatting helpers
# =============================================================================


class TestFormatDistance:
    def test_formats_number(self):
        assert format_distance(15420) == "15,420 km"
        assert format_distance(0, "mi") == "0 mi"

    def test_none_returns_dash(self):
        assert format_distance(None) == "-"


class TestFormatMoney:
    def test_formats_number(self):
        assert format_money(1003) == "1,003.00"
        assert format_money(0) == "0.00"

    def test_none_returns_dash(self):
        assert format_money(None) == "-"


class TestFormatMetric:
    def test_available(self):
        assert format_metric(47.6, " km/L") == "47.6 km/L"

    def test_unavailable_is_not_zero(self):
        assert format_metric(UNAVAILABLE) == "n/a"


class TestFormatDays:
    def test_plural(self):
        assert format_days(3) == "3 days"
        assert format_days(0) == "0 days"

    def test_singular(self):
        assert format_days(1) == "1 day"

    def test_none(self):
        assert format_days(None) == "-"


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("hello", 10) == "hello"

    def test_long_text_truncated(self):
        assert truncate("a" * 40, 10) == "aaaaaaa..."

    def test_empty(self):
        assert truncate(None) == "-"
        assert truncate("") == "-"


class TestParseNow:
    def test_parses_iso(self):
        assert parse_now("2024-06-20") == datetime(2024, 6, 20, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_now("someday")

    def test_default_is_aware(self):
        assert parse_now(None).tzinfo is not None


# =============================================================================
# Table builders
# =============================================================================


class TestTables:
    def test_task_table(self):
        tasks = [
            MaintenanceTask("General Service", Priority.HIGH, due_in_distance=180),
            MaintenanceTask("Tire Pressure Check", Priority.LOW, "maintenance", None, 1),
        ]
        assert make_task_table(tasks) == [
            ["HIGH", "General Service", "180 km", "-"],
            ["LOW", "Tire Pressure Check", "-", "1 day"],
        ]

    def test_activity_table(self):
        activities = [
            Activity("f8", "fuel", "Fuel added - 8.5L", "2024-06-15", "5 days ago", 1003.0)
        ]
        assert make_activity_table(activities) == [
            ["5 days ago", "fuel", "Fuel added - 8.5L", "1,003.00"]
        ]


# =============================================================================
# Commands
# =============================================================================


class TestCommands:
    def test_report(self, log_file, capsys):
        assert main([str(log_file), "--now", "2024-06-20", "report"]) == 0
        out = capsys.readouterr().out
        assert "2023 Yamaha R15 V4" in out
        assert "47.6 km/L" in out
        assert "2024-03" in out

    def test_tasks(self, log_file, capsys):
        assert main([str(log_file), "--now", "2024-06-20", "tasks"]) == 0
        out = capsys.readouterr().out
        assert "General Service" in out
        assert "180 km" in out

    def test_tasks_with_config(self, log_file, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("recurringRules:\n  - title: Chain Lubrication\n    intervalDistance: 600\n")
        assert main([str(log_file), "--config", str(config), "--now", "2024-06-20", "tasks"]) == 0
        assert "Chain Lubrication" in capsys.readouterr().out

    def test_bad_config(self, log_file, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("rollingWindowDays: 0\n")
        assert main([str(log_file), "--config", str(config), "report"]) == 1
        assert "Invalid config" in capsys.readouterr().out

    def test_activity(self, log_file, capsys):
        assert main([str(log_file), "--now", "2024-06-20", "activity", "--limit", "2"]) == 0
        out = capsys.readouterr().out
        assert "Fuel added - 8.5L" in out
        assert "Fuel added - 7.2L" in out
        assert "General Service" not in out

    def test_bad_now(self, log_file, capsys):
        assert main([str(log_file), "--now", "someday", "report"]) == 1
        assert "Invalid timestamp" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.yaml"), "report"]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_log_fuel(self, log_file):
        args = [str(log_file), "log-fuel", "--volume", "5", "--unit-cost", "120",
                "--odometer", "15600", "--date", "2024-06-25"]
        assert main(args) == 0
        entry = yaml.safe_load(log_file.read_text())["fuel"][-1]
        assert entry["id"] == "fuel-8"
        assert entry["totalCost"] == 600.0
        assert entry["timestamp"] == "2024-06-25"

    def test_log_fuel_dry_run(self, log_file, capsys):
        before = log_file.read_text()
        args = [str(log_file), "log-fuel", "--volume", "5", "--unit-cost", "120",
                "--odometer", "15600", "--dry-run"]
        assert main(args) == 0
        assert log_file.read_text() == before
        assert "dry run" in capsys.readouterr().out

    def test_log_service(self, log_file):
        args = [str(log_file), "--now", "2024-06-25", "log-service", "Engine Oil Change",
                "--cost", "850", "--odometer", "15600", "--next-due", "17600"]
        assert main(args) == 0
        entry = yaml.safe_load(log_file.read_text())["maintenance"][-1]
        assert entry["serviceKind"] == "Engine Oil Change"
        assert entry["timestamp"] == "2024-06-25"
        assert entry["nextDueOdometer"] == 17600

    def test_update_odometer(self, log_file):
        assert main([str(log_file), "update-odometer", "16000"]) == 0
        assert yaml.safe_load(log_file.read_text())["vehicle"]["currentOdometer"] == 16000
