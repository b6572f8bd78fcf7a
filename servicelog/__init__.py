"""
Vehicle service log.

This package records workshop service entries against a vehicle number:
- SparePart, ServiceItem: line items with a cost
- ServiceEntry: a stored service record (record id + store key)
- ServiceEntryForm: form state with always-current derived totals
- ServiceStore: YAML file or Firebase Realtime Database backends
- ServiceEntryController: create and same-day edit workflow
"""

from .line_items import SparePart, ServiceItem
from .service_entry import ServiceEntry
from .calculations import (
    Totals,
    calc_totals,
    to_cost,
    normalize_vehicle_number,
    to_iso_timestamp,
    to_form_date,
    is_same_day,
)
from .loader import entry_from_dict, entry_to_dict, entries_from_snapshot, load_schema
from .errors import StoreError, PERMISSION_DENIED, UNAVAILABLE
from .store import ServiceStore, YamlStore, FirebaseStore, PushKeyGenerator
from .form import ServiceEntryForm
from .notification import Notification
from .controller import ServiceEntryController, Outcome, HOME, HISTORY

__all__ = [
    "SparePart",
    "ServiceItem",
    "ServiceEntry",
    "Totals",
    "calc_totals",
    "to_cost",
    "normalize_vehicle_number",
    "to_iso_timestamp",
    "to_form_date",
    "is_same_day",
    "entry_from_dict",
    "entry_to_dict",
    "entries_from_snapshot",
    "load_schema",
    "StoreError",
    "PERMISSION_DENIED",
    "UNAVAILABLE",
    "ServiceStore",
    "YamlStore",
    "FirebaseStore",
    "PushKeyGenerator",
    "ServiceEntryForm",
    "Notification",
    "ServiceEntryController",
    "Outcome",
    "HOME",
    "HISTORY",
]
