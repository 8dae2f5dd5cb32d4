#!/usr/bin/env python3
"""
Unified CLI for vehicle usage telemetry.

Commands:
  report          - Show the dashboard report (spend, efficiency, trends)
  tasks           - Show upcoming maintenance tasks
  activity        - Show recent fuel and maintenance activity
  log-fuel        - Add a new fuel event
  log-service     - Add a new maintenance event
  update-odometer - Update the current odometer reading
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from telemetry import (
    ConfigError,
    EngineConfig,
    FuelEvent,
    InMemoryEventStore,
    MaintenanceEvent,
    MaintenanceTask,
    NotFound,
    Report,
    TelemetryEngine,
    as_timestamp,
    load_config,
    load_vehicle_log,
)
from telemetry.calculations import is_available
from telemetry.engine import Activity
from telemetry.loader import (
    save_current_odometer,
    save_fuel_event,
    save_maintenance_event,
)

logger = logging.getLogger("ridelog")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_distance(distance: Optional[float], unit: str = "km") -> str:
    """Format a distance for display."""
    return f"{distance:,.0f} {unit}" if distance is not None else "-"


def format_money(amount: Optional[float]) -> str:
    """Format a spend figure for display."""
    return f"{amount:,.2f}" if amount is not None else "-"


def format_metric(value, suffix: str = "") -> str:
    """Format a tagged metric; unavailable values show as 'n/a', never 0."""
    if not is_available(value):
        return "n/a"
    return f"{value:,.1f}{suffix}"


def format_days(days: Optional[int]) -> str:
    """Format a day count (e.g. '3 days', '1 day')."""
    if days is None:
        return "-"
    return "1 day" if days == 1 else f"{days} days"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_now(value: Optional[str]) -> datetime:
    """--now value, or the wall clock when none was given."""
    if value is None:
        return datetime.now(timezone.utc)
    parsed = as_timestamp(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"Invalid timestamp: {value}")
    return parsed


# =============================================================================
# Table builders
# =============================================================================


def make_summary_table(report: Report, config: EngineConfig) -> List[List[str]]:
    """Headline figures of a report as label/value rows."""
    volume = config.volume_unit
    distance = config.distance_unit
    return [
        ["Total fuel", f"{report.total_fuel:,.1f} {volume}"],
        ["Fuel spend", format_money(report.total_fuel_spend)],
        ["Maintenance spend", format_money(report.total_maintenance_spend)],
        ["Total spend", format_money(report.total_spend)],
        [f"Last {config.rolling_window_days} days", format_money(report.monthly_spending)],
        ["Efficiency", format_metric(report.fuel_efficiency, f" {distance}/{volume}")],
        ["Avg unit cost", format_metric(report.average_unit_cost, f" /{volume}")],
        ["Cost per distance", format_metric(report.cost_per_distance, f" /{distance}")],
    ]


def make_fuel_table(report: Report) -> List[List[str]]:
    """Recent fuel events as table rows."""
    return [
        [
            e.date or "-",
            f"{e.odometer:,.0f}",
            f"{e.volume:,.1f}",
            f"{e.unit_cost:,.1f}",
            format_money(e.total_cost),
            format_metric(e.efficiency),
            truncate(e.note),
        ]
        for e in report.recent_fuel_events
    ]


def make_trend_table(report: Report) -> List[List[str]]:
    """Monthly volume and spend as table rows."""
    spend = {p.period: p.spend for p in report.spending_trend}
    return [
        [p.period, f"{p.volume:,.1f}", format_money(spend.get(p.period, 0.0))]
        for p in report.fuel_consumption_trend
    ]


def make_task_table(tasks: List[MaintenanceTask], unit: str = "km") -> List[List[str]]:
    """Upcoming tasks as table rows."""
    return [
        [
            t.priority.label.upper(),
            t.title,
            format_distance(t.due_in_distance, unit),
            format_days(t.due_in_days),
        ]
        for t in tasks
    ]


def make_activity_table(activities: List[Activity]) -> List[List[str]]:
    """Activity feed as table rows."""
    return [
        [a.when, a.kind, a.description, format_money(a.amount)] for a in activities
    ]


# =============================================================================
# Commands
# =============================================================================


def build_engine(args):
    """Load the vehicle log and config named on the command line."""
    log = load_vehicle_log(args.vehicle_file)
    config = load_config(args.config) if args.config else EngineConfig()
    return log.vehicle, TelemetryEngine(InMemoryEventStore.from_log(log), config)


def cmd_report(args):
    """Show the dashboard report."""
    vehicle, engine = build_engine(args)
    report = engine.compute_report(vehicle.id, parse_now(args.now))
    config = engine.config

    print(f"Vehicle: {vehicle.name}")
    print(f"Current odometer: {format_distance(report.vehicle.current_odometer, config.distance_unit)}")
    print(f"Fuel events: {report.fuel_event_count}")
    print(f"Maintenance events: {report.maintenance_event_count}")
    print()

    print(tabulate(make_summary_table(report, config), tablefmt="simple"))
    print()

    print("COST BREAKDOWN:")
    print(
        tabulate(
            [[c.category, format_money(c.value)] for c in report.cost_breakdown],
            tablefmt="simple",
        )
    )
    print()

    if report.recent_fuel_events:
        print("RECENT FUEL:")
        headers = ["Date", "Odometer", "Volume", "Unit Cost", "Total", "Efficiency", "Note"]
        print(tabulate(make_fuel_table(report), headers=headers, tablefmt="simple"))
        print()

    if report.fuel_consumption_trend:
        print("MONTHLY TREND:")
        headers = ["Month", "Volume", "Spend"]
        print(tabulate(make_trend_table(report), headers=headers, tablefmt="simple"))
        print()

    return 0


def cmd_tasks(args):
    """Show upcoming maintenance tasks."""
    vehicle, engine = build_engine(args)
    tasks = engine.compute_upcoming_tasks(vehicle.id, parse_now(args.now))

    print(f"Vehicle: {vehicle.name}")
    print()
    if not tasks:
        print("No upcoming tasks.")
        return 0

    headers = ["Priority", "Task", "Due In", "Due In (time)"]
    print(
        tabulate(
            make_task_table(tasks, engine.config.distance_unit),
            headers=headers,
            tablefmt="simple",
        )
    )
    return 0


def cmd_activity(args):
    """Show recent activity."""
    vehicle, engine = build_engine(args)
    activities = engine.compute_recent_activities(vehicle.id, parse_now(args.now), args.limit)

    print(f"Vehicle: {vehicle.name}")
    print()
    if not activities:
        print("No activity recorded.")
        return 0

    headers = ["When", "Type", "Description", "Amount"]
    print(tabulate(make_activity_table(activities), headers=headers, tablefmt="simple"))
    return 0


def cmd_log_fuel(args):
    """Add a new fuel event."""
    log = load_vehicle_log(args.vehicle_file)
    timestamp = args.date or parse_now(args.now).date().isoformat()
    event = FuelEvent(
        id=None,
        vehicle_id=log.vehicle.id,
        timestamp=timestamp,
        volume=args.volume,
        unit_cost=args.unit_cost,
        odometer=args.odometer,
        note=args.note,
    )

    print(f"Adding fuel event to {args.vehicle_file}:")
    print(f"  Date:      {timestamp}")
    print(f"  Volume:    {args.volume:,.2f}")
    print(f"  Unit cost: {args.unit_cost:,.2f}")
    print(f"  Total:     {format_money(event.cost_value)}")
    print(f"  Odometer:  {args.odometer:,.0f}")
    if args.note:
        print(f"  Note:      {args.note}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    saved = save_fuel_event(args.vehicle_file, event)
    print(f"Fuel event {saved.id} saved.")
    return 0


def cmd_log_service(args):
    """Add a new maintenance event."""
    log = load_vehicle_log(args.vehicle_file)
    timestamp = args.date or parse_now(args.now).date().isoformat()
    event = MaintenanceEvent(
        id=None,
        vehicle_id=log.vehicle.id,
        timestamp=timestamp,
        service_kind=args.service_kind,
        cost=args.cost,
        odometer=args.odometer,
        next_due_odometer=args.next_due,
        description=args.description,
    )

    print(f"Adding maintenance event to {args.vehicle_file}:")
    print(f"  Service:  {args.service_kind}")
    print(f"  Date:     {timestamp}")
    print(f"  Cost:     {format_money(args.cost)}")
    print(f"  Odometer: {args.odometer:,.0f}")
    if args.next_due is not None:
        print(f"  Next due: {args.next_due:,.0f}")
    if args.description:
        print(f"  Notes:    {args.description}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    saved = save_maintenance_event(args.vehicle_file, event)
    print(f"Maintenance event {saved.id} saved.")
    return 0


def cmd_update_odometer(args):
    """Update the current odometer reading."""
    log = load_vehicle_log(args.vehicle_file)
    old = log.vehicle.odometer_value

    print(f"Vehicle: {log.vehicle.name}")
    print(f"Current odometer: {format_distance(old, '').strip()}")
    print(f"New odometer:     {args.odometer:,.0f}")
    print()

    if old is not None and args.odometer < old:
        print("Warning: new reading is lower than the current one")

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_current_odometer(args.vehicle_file, args.odometer)
    print("Odometer updated.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle usage telemetry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s logs/r15.yaml report
  %(prog)s logs/r15.yaml report --now 2024-06-30
  %(prog)s logs/r15.yaml tasks --config telemetry.yaml
  %(prog)s logs/r15.yaml activity --limit 5
  %(prog)s logs/r15.yaml log-fuel --volume 8.5 --unit-cost 118 --odometer 15420
  %(prog)s logs/r15.yaml log-service "Engine Oil Change" --cost 850 \\
      --odometer 15420 --next-due 17420
  %(prog)s logs/r15.yaml update-odometer 15600
""",
    )
    parser.add_argument(
        "vehicle_file",
        type=Path,
        help="Path to vehicle log YAML file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Engine config YAML (thresholds, recurring rules)",
    )
    parser.add_argument(
        "--now",
        type=str,
        help="Reference time in ISO-8601 (default: current time)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("report", help="Show the dashboard report")
    subparsers.add_parser("tasks", help="Show upcoming maintenance tasks")

    activity_parser = subparsers.add_parser("activity", help="Show recent activity")
    activity_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of entries to show (default: from config)",
    )

    fuel_parser = subparsers.add_parser("log-fuel", help="Add a new fuel event")
    fuel_parser.add_argument("--volume", type=float, required=True, help="Fuel volume")
    fuel_parser.add_argument(
        "--unit-cost", type=float, required=True, help="Cost per unit of volume"
    )
    fuel_parser.add_argument(
        "--odometer", type=float, required=True, help="Odometer reading at refuel"
    )
    fuel_parser.add_argument(
        "--date", type=str, help="Date in YYYY-MM-DD format (default: today)"
    )
    fuel_parser.add_argument("--note", type=str, help="Optional note")
    fuel_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    service_parser = subparsers.add_parser("log-service", help="Add a new maintenance event")
    service_parser.add_argument(
        "service_kind", type=str, help="Service kind (e.g., 'Engine Oil Change')"
    )
    service_parser.add_argument("--cost", type=float, required=True, help="Cost of service")
    service_parser.add_argument(
        "--odometer", type=float, required=True, help="Odometer reading at service"
    )
    service_parser.add_argument(
        "--next-due", type=float, help="Odometer reading when the next service is due"
    )
    service_parser.add_argument(
        "--date", type=str, help="Date in YYYY-MM-DD format (default: today)"
    )
    service_parser.add_argument("--description", type=str, help="Notes about the service")
    service_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    odometer_parser = subparsers.add_parser(
        "update-odometer", help="Update the current odometer reading"
    )
    odometer_parser.add_argument("odometer", type=float, help="Current odometer reading")
    odometer_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be updated without saving"
    )

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate vehicle file exists
    if not args.vehicle_file.exists():
        print(f"Error: File not found: {args.vehicle_file}")
        return 1

    handlers = {
        "report": cmd_report,
        "tasks": cmd_tasks,
        "activity": cmd_activity,
        "log-fuel": cmd_log_fuel,
        "log-service": cmd_log_service,
        "update-odometer": cmd_update_odometer,
    }

    logger.debug("Running %s on %s", args.command, args.vehicle_file)
    try:
        return handlers[args.command](args)
    except (ConfigError, NotFound) as e:
        print(f"Error: {e}")
        return 1
    except argparse.ArgumentTypeError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
