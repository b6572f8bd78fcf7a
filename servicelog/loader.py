"""Conversion between stored record dicts and ServiceEntry objects."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .line_items import ServiceItem, SparePart
from .service_entry import ServiceEntry

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


@lru_cache(maxsize=None)
def load_schemas() -> Dict[str, Any]:
    """Load the form and record JSON schemas from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def load_schema(name: str) -> Dict[str, Any]:
    """Return one named schema ("form" or "record")."""
    return load_schemas()[name]


def entry_from_dict(dct: Dict[str, Any], store_key: Optional[str] = None) -> ServiceEntry:
    """Parse a stored record (camelCase keys) into a ServiceEntry."""
    return ServiceEntry(
        record_id=str(dct.get("id") or ""),
        vehicle_number=dct.get("vehicleNumber", ""),
        date=str(dct.get("date") or ""),
        kilometer_reading=dct.get("kilometerReading", 0),
        spare_parts=[
            SparePart(p.get("name", ""), p.get("cost", 0))
            for p in dct.get("spareParts") or []
        ],
        service_items=[
            ServiceItem(s.get("description", ""), s.get("cost", 0))
            for s in dct.get("serviceItems") or []
        ],
        store_key=store_key,
    )


def entry_to_dict(entry: ServiceEntry) -> Dict[str, Any]:
    """
    Serialize a ServiceEntry to the stored record format.

    Totals are recomputed from the line items. The store key is not part of
    the record body.
    """
    totals = entry.totals
    return {
        "id": entry.record_id,
        "vehicleNumber": entry.vehicle_number,
        "date": entry.date,
        "kilometerReading": entry.kilometer_reading,
        "spareParts": [part.to_dict() for part in entry.spare_parts],
        "serviceItems": [item.to_dict() for item in entry.service_items],
        "totalSpareCost": totals.total_spare_cost,
        "totalServiceCost": totals.total_service_cost,
        "totalCost": totals.total_cost,
    }


def entries_from_snapshot(snapshot: Dict[str, Dict[str, Any]]) -> List[ServiceEntry]:
    """Parse a ``{store_key: record}`` snapshot, newest service date first."""
    entries = [entry_from_dict(record, key) for key, record in snapshot.items()]
    return sorted(entries, key=lambda e: (e.date, e.record_id), reverse=True)
