#!/usr/bin/env python3
"""
CLI for viewing a vehicle's service history.

Shows every recorded service entry with date, kilometer reading, parts,
service work and cost.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from servicelog import (
    ServiceEntry,
    StoreError,
    YamlStore,
    entries_from_snapshot,
    normalize_vehicle_number,
    to_cost,
    to_form_date,
)
from servicelog.config import Settings, build_store
from servicelog.logging_config import setup_logging


def format_km(km: Optional[float]) -> str:
    """Format kilometer reading for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_date(timestamp: Optional[str]) -> str:
    """Format a stored timestamp as YYYY-MM-DD, or "-" if it can't be read."""
    try:
        return to_form_date(timestamp) if timestamp else "-"
    except ValueError:
        return "-"


def format_cost(cost) -> str:
    """Format cost for display."""
    value = to_cost(cost)
    if isinstance(value, int):
        return f"₹{value:,}"
    return f"₹{value:,.2f}"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def make_table(entries: List[ServiceEntry]) -> List[List[str]]:
    """Convert service entries to table rows."""
    rows = []
    for entry in entries:
        rows.append(
            [
                format_date(entry.date),
                format_km(entry.kilometer_reading),
                truncate(", ".join(p.name for p in entry.spare_parts)),
                truncate(", ".join(s.description for s in entry.service_items)),
                format_cost(entry.total_cost),
            ]
        )
    return rows


def main(argv=None):
    parser = argparse.ArgumentParser(description="Vehicle service history viewer")
    parser.add_argument("vehicle_number", type=str, help="Vehicle number (e.g., KA01AB1234)")
    parser.add_argument(
        "--store",
        type=Path,
        help="Path to a YAML service store (default: configured store)",
    )
    parser.add_argument(
        "--since", type=str, help="Show only entries since date (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--asc", action="store_true", help="Sort oldest first instead of newest first"
    )
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)
    store = YamlStore(args.store) if args.store else build_store(settings)
    vehicle_number = normalize_vehicle_number(args.vehicle_number)

    try:
        entries = entries_from_snapshot(store.fetch_all(vehicle_number))
    except StoreError as e:
        print(f"Error: could not load service history: {e}")
        return 1

    if args.asc:
        entries.reverse()
    if args.since:
        entries = [
            e for e in entries if format_date(e.date) != "-" and format_date(e.date) >= args.since
        ]

    total_spare = sum(to_cost(e.total_spare_cost) for e in entries)
    total_service = sum(to_cost(e.total_service_cost) for e in entries)

    print(f"Vehicle: {vehicle_number}")
    print(f"Services: {len(entries)}")
    if entries:
        print(f"Spare parts: {format_cost(total_spare)}")
        print(f"Service work: {format_cost(total_service)}")
        print(f"Total cost: {format_cost(total_spare + total_service)}")
    print()

    if not entries:
        print("No service entries found.")
        return 0

    headers = ["Date", "Km", "Spare Parts", "Services", "Total"]
    print(tabulate(make_table(entries), headers=headers, tablefmt="simple"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
