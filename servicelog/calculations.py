"""Helper functions for cost totals, vehicle numbers and service dates."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Union
from urllib.parse import unquote

from dateutil.parser import isoparse

from .line_items import Cost, ServiceItem, SparePart

Number = Union[int, float]


@dataclass(frozen=True)
class Totals:
    """Derived cost totals for one service entry."""

    total_spare_cost: Number = 0
    total_service_cost: Number = 0
    total_cost: Number = 0


def to_cost(value: Cost) -> Number:
    """
    Coerce a cost value to a number.

    Missing, blank and non-numeric values count as 0. Integral values are
    returned as int so totals display as whole rupees.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    if number.is_integer():
        return int(number)
    return number


def calc_totals(
    spare_parts: Iterable[SparePart], service_items: Iterable[ServiceItem]
) -> Totals:
    """Sum spare part and service item costs."""
    total_spare_cost = sum(to_cost(part.cost) for part in spare_parts)
    total_service_cost = sum(to_cost(item.cost) for item in service_items)
    return Totals(
        total_spare_cost=total_spare_cost,
        total_service_cost=total_service_cost,
        total_cost=total_spare_cost + total_service_cost,
    )


def normalize_vehicle_number(raw: str) -> str:
    """Percent-decode and uppercase a vehicle number taken from a URL."""
    return unquote(raw or "").strip().upper()


def to_iso_timestamp(form_date: str) -> str:
    """Convert a YYYY-MM-DD form date to a UTC midnight ISO-8601 timestamp."""
    day = date.fromisoformat(form_date)
    return f"{day.isoformat()}T00:00:00.000Z"


def service_day(timestamp: str) -> date:
    """
    Calendar day a stored timestamp refers to.

    Timestamps carrying an offset are read in UTC, matching how they were
    written by to_iso_timestamp. Naive timestamps are taken as-is.
    """
    parsed = isoparse(timestamp)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def to_form_date(timestamp: str) -> str:
    """Convert a stored timestamp back to the form's YYYY-MM-DD shape."""
    return service_day(timestamp).isoformat()


def is_same_day(timestamp: str, today: date) -> bool:
    """
    True when the stored timestamp falls on ``today`` (time of day ignored).

    A timestamp that can't be parsed is never today.
    """
    try:
        return service_day(timestamp) == today
    except ValueError:
        return False


def new_record_id(now: Union[datetime, None] = None) -> str:
    """Client-side record id: milliseconds since the epoch as a string."""
    now = now or datetime.now(timezone.utc)
    return str(int(now.timestamp() * 1000))
