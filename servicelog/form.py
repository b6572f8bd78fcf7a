"""
Service entry form state.

ServiceEntryForm holds everything the entry page edits: date, odometer
reading, line items and the derived totals. Every line item mutation
recomputes the totals before returning, so a reader never sees totals that
lag behind the items.

The web page rebuilds the form from posted fields on each request
(from_form_data) and calls the add and remove methods for its line item
actions. The cost setters are the API for driving the form from code.
"""

import math
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from jsonschema import Draft7Validator

from .calculations import calc_totals, to_cost, to_form_date, to_iso_timestamp
from .line_items import ServiceItem, SparePart
from .loader import load_schema
from .service_entry import ServiceEntry

# Posted field names look like "spareParts.0.name" / "serviceItems.2.cost"
LINE_FIELD = re.compile(r"^(spareParts|serviceItems)\.(\d+)\.(name|description|cost)$")

FIELD_MESSAGES = {
    "date": "Service date is required",
    "kilometerReading": "Kilometer reading must be a whole number of 0 or more",
    "name": "Part name is required",
    "description": "Service description is required",
    "cost": "Cost must be a number of 0 or more",
}


def _parse_number(raw: Any, blank=None):
    """
    Parse a posted numeric field.

    Unparseable input is returned unchanged and non-finite values (nan, inf)
    come back as text, so schema validation rejects both.
    """
    if raw is None:
        return blank
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, float):
        number = raw
    else:
        text = str(raw).strip()
        if not text:
            return blank
        try:
            number = float(text)
        except ValueError:
            return raw
    if not math.isfinite(number):
        return str(raw)
    return int(number) if number.is_integer() else number


class ServiceEntryForm:
    """Explicit state for one service entry form."""

    def __init__(self, vehicle_number: str, today: Optional[date] = None):
        self.vehicle_number = vehicle_number
        self.date = (today or date.today()).isoformat()
        self.kilometer_reading: Any = 0
        self.spare_parts: List[SparePart] = []
        self.service_items: List[ServiceItem] = []
        self.record_id = ""
        self.store_key: Optional[str] = None
        self.total_spare_cost = 0
        self.total_service_cost = 0
        self.total_cost = 0

    def recompute_totals(self) -> None:
        totals = calc_totals(self.spare_parts, self.service_items)
        self.total_spare_cost = totals.total_spare_cost
        self.total_service_cost = totals.total_service_cost
        self.total_cost = totals.total_cost

    # -- line items --------------------------------------------------------

    def add_spare_part(self) -> None:
        self.spare_parts.append(SparePart("", 0))
        self.recompute_totals()

    def remove_spare_part(self, index: int) -> None:
        """Remove the part at ``index``. Out of range indexes are ignored."""
        if 0 <= index < len(self.spare_parts):
            del self.spare_parts[index]
        self.recompute_totals()

    def set_spare_part_cost(self, index: int, value) -> None:
        if 0 <= index < len(self.spare_parts):
            self.spare_parts[index].cost = _parse_number(value, blank=0)
        self.recompute_totals()

    def add_service_item(self) -> None:
        self.service_items.append(ServiceItem("", 0))
        self.recompute_totals()

    def remove_service_item(self, index: int) -> None:
        """Remove the service item at ``index``. Out of range indexes are ignored."""
        if 0 <= index < len(self.service_items):
            del self.service_items[index]
        self.recompute_totals()

    def set_service_item_cost(self, index: int, value) -> None:
        if 0 <= index < len(self.service_items):
            self.service_items[index].cost = _parse_number(value, blank=0)
        self.recompute_totals()

    # -- loading -----------------------------------------------------------

    @classmethod
    def from_form_data(
        cls, vehicle_number: str, data: Mapping[str, Any], today: Optional[date] = None
    ) -> "ServiceEntryForm":
        """Rebuild form state from posted HTML form fields."""
        form = cls(vehicle_number, today=today)
        form.date = (data.get("date") or "").strip()
        form.kilometer_reading = _parse_number(data.get("kilometerReading"))

        rows: Dict[str, Dict[int, Dict[str, Any]]] = {"spareParts": {}, "serviceItems": {}}
        for field, value in data.items():
            match = LINE_FIELD.match(field)
            if match:
                group, index, attr = match.groups()
                rows[group].setdefault(int(index), {})[attr] = value

        form.spare_parts = [
            SparePart(row.get("name", ""), _parse_number(row.get("cost"), blank=0))
            for _, row in sorted(rows["spareParts"].items())
        ]
        form.service_items = [
            ServiceItem(row.get("description", ""), _parse_number(row.get("cost"), blank=0))
            for _, row in sorted(rows["serviceItems"].items())
        ]
        form.recompute_totals()
        return form

    def load_entry(self, entry: ServiceEntry) -> None:
        """Reset the form from a stored entry, keeping its record id and store key."""
        self.vehicle_number = entry.vehicle_number or self.vehicle_number
        self.date = to_form_date(entry.date)
        self.kilometer_reading = entry.kilometer_reading
        self.spare_parts = [SparePart(p.name, p.cost) for p in entry.spare_parts]
        self.service_items = [ServiceItem(s.description, s.cost) for s in entry.service_items]
        self.record_id = entry.record_id
        self.store_key = entry.store_key
        self.recompute_totals()

    # -- validation and output ---------------------------------------------

    def _validation_input(self) -> Dict[str, Any]:
        return {
            "date": self.date or "",
            "kilometerReading": _parse_number(self.kilometer_reading),
            "spareParts": [
                {"name": part.name, "cost": _parse_number(part.cost, blank=0)}
                for part in self.spare_parts
            ],
            "serviceItems": [
                {"description": item.description, "cost": _parse_number(item.cost, blank=0)}
                for item in self.service_items
            ],
        }

    def validate(self) -> Dict[str, List[str]]:
        """
        Check the form against the "form" schema.

        Returns a mapping of dotted field path (e.g. "spareParts.0.name") to
        messages. An empty mapping means the form may be saved.
        """
        validator = Draft7Validator(load_schema("form"))
        errors: Dict[str, List[str]] = {}
        for err in validator.iter_errors(self._validation_input()):
            path = [str(p) for p in err.absolute_path]
            if err.validator == "required":
                missing = [p for p in err.validator_value if p not in err.instance]
                fields = [".".join(path + [p]) for p in missing]
            else:
                fields = [".".join(path)]
            for field in fields:
                leaf = field.rsplit(".", 1)[-1]
                message = FIELD_MESSAGES.get(leaf, err.message)
                if message not in errors.setdefault(field, []):
                    errors[field].append(message)

        if not errors.get("date"):
            try:
                date.fromisoformat(self.date)
            except ValueError:
                errors["date"] = [FIELD_MESSAGES["date"]]
        return errors

    def to_record(self, record_id: str) -> Dict[str, Any]:
        """
        Format the form as a stored record.

        Text is trimmed and costs coerced to numbers, then the totals are
        recomputed from the cleaned items rather than taken from form state.
        """
        spare_parts = [
            SparePart(part.name.strip(), to_cost(part.cost)) for part in self.spare_parts
        ]
        service_items = [
            ServiceItem(item.description.strip(), to_cost(item.cost))
            for item in self.service_items
        ]
        totals = calc_totals(spare_parts, service_items)
        return {
            "id": record_id,
            "vehicleNumber": self.vehicle_number.upper(),
            "date": to_iso_timestamp(self.date),
            "kilometerReading": _parse_number(self.kilometer_reading, blank=0),
            "spareParts": [part.to_dict() for part in spare_parts],
            "serviceItems": [item.to_dict() for item in service_items],
            "totalSpareCost": totals.total_spare_cost,
            "totalServiceCost": totals.total_service_cost,
            "totalCost": totals.total_cost,
        }
