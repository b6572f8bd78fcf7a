"""
Service entry page workflow.

ServiceEntryController drives one visit to the service entry page:

1. mount(): check whether the vehicle already has records (decides where
   "back" goes) and, in edit mode, load the record being edited.
2. The page mutates the form through ServiceEntryForm.
3. submit(): validate, then create a new record or overwrite the edited one.

Each step returns an Outcome describing what the page should show next
(notifications, a redirect, field errors) instead of acting on the UI
directly.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from . import notification
from .calculations import is_same_day, new_record_id, normalize_vehicle_number
from .errors import StoreError
from .form import ServiceEntryForm
from .loader import entry_from_dict
from .notification import Notification
from .store import Record, ServiceStore

logger = logging.getLogger(__name__)

# Redirect targets, named after the web endpoints that serve them
HOME = "index"
HISTORY = "service_history"


@dataclass
class Outcome:
    """Result of a controller step."""

    notifications: List[Notification] = field(default_factory=list)
    redirect: Optional[str] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors and not any(n.is_error for n in self.notifications)


class ServiceEntryController:
    """Owns the form state for one vehicle's create or same-day edit flow."""

    def __init__(
        self,
        store: ServiceStore,
        vehicle_number: str,
        edit_id: Optional[str] = None,
        today: Optional[date] = None,
    ):
        self.store = store
        self.vehicle_number = normalize_vehicle_number(vehicle_number)
        self.edit_id = edit_id or None
        self._today = today
        self.is_new_vehicle = True
        self.loading = False
        self.form = ServiceEntryForm(self.vehicle_number, today=self.today)

    @property
    def today(self) -> date:
        """Current calendar day, defaults to the local date."""
        return self._today or date.today()

    @property
    def is_edit_mode(self) -> bool:
        return self.edit_id is not None

    @property
    def back_target(self) -> str:
        """New vehicles go back home, known vehicles to their history."""
        return HOME if self.is_new_vehicle else HISTORY

    def mount(self) -> Optional[Outcome]:
        """Run the page's initial loads. Returns an Outcome if the page must react."""
        self.check_existing_records()
        if self.is_edit_mode:
            return self.load_edit_target()
        return None

    def check_existing_records(self) -> bool:
        try:
            self.is_new_vehicle = not self.store.has_records(self.vehicle_number)
        except StoreError as e:
            logger.error("Error checking existing records for %s: %s", self.vehicle_number, e)
            self.is_new_vehicle = True
        return self.is_new_vehicle

    def find_edit_target(self) -> Optional[Tuple[str, Record]]:
        """Scan the vehicle's records for the one whose ``id`` is the edit id."""
        records = self.store.fetch_all(self.vehicle_number)
        for key, record in records.items():
            if isinstance(record, dict) and str(record.get("id")) == self.edit_id:
                return key, record
        return None

    def _edit_denied(self) -> Outcome:
        return Outcome(
            notifications=[
                notification.error(
                    "You can only edit service entries from today.", title="Cannot Edit"
                )
            ],
            redirect=HISTORY,
        )

    def load_edit_target(self) -> Optional[Outcome]:
        """
        Load the record named by the edit id into the form.

        A record that is not found leaves the form at its defaults. A record
        from another day is refused with a redirect to the history view.
        """
        self.loading = True
        try:
            found = self.find_edit_target()
        except StoreError as e:
            logger.error("Error loading service data for %s: %s", self.vehicle_number, e)
            return Outcome(
                notifications=[notification.error("Failed to load service data for editing.")]
            )
        finally:
            self.loading = False

        if found is None:
            logger.info("Service %s not found for %s", self.edit_id, self.vehicle_number)
            return None

        key, record = found
        entry = entry_from_dict(record, store_key=key)
        if not is_same_day(entry.date, self.today):
            logger.info("Refusing to edit %s/%s dated %r", self.vehicle_number, key, entry.date)
            return self._edit_denied()

        self.form.load_entry(entry)
        return None

    def _resolve_update_target(self) -> Optional[Outcome]:
        """
        Re-check the edit target before overwriting it.

        Sets the form's store key and record id from the stored record.
        """
        found = self.find_edit_target()
        if found is None:
            return Outcome(
                notifications=[
                    notification.error("The service record being edited no longer exists.")
                ]
            )
        key, record = found
        entry = entry_from_dict(record, store_key=key)
        if not is_same_day(entry.date, self.today):
            logger.info("Refusing to update %s/%s dated %r", self.vehicle_number, key, entry.date)
            return self._edit_denied()
        self.form.store_key = key
        self.form.record_id = entry.record_id
        return None

    def submit(self, form: Optional[ServiceEntryForm] = None) -> Outcome:
        """Validate and persist the form, creating or overwriting a record."""
        if form is not None:
            self.form = form
        form = self.form

        if self.loading:
            logger.warning("Ignoring duplicate submit for %s", self.vehicle_number)
            return Outcome()

        errors = form.validate()
        if errors:
            return Outcome(errors=errors)

        self.loading = True
        try:
            if self.is_edit_mode:
                outcome = self._resolve_update_target()
                if outcome is not None:
                    return outcome
                record = form.to_record(form.record_id)
                logger.info("Updating services/%s/%s", self.vehicle_number, form.store_key)
                self.store.set(self.vehicle_number, form.store_key, record)
                message = "Service record updated successfully"
            else:
                record = form.to_record(new_record_id())
                logger.info("Saving new service record for %s", self.vehicle_number)
                form.store_key = self.store.push(self.vehicle_number, record)
                form.record_id = record["id"]
                message = "Service record saved successfully"
        except StoreError as e:
            logger.error("Error saving service for %s: [%s] %s", self.vehicle_number, e.code, e.message)
            prefix = (
                "Failed to update service record. "
                if self.is_edit_mode
                else "Failed to save service record. "
            )
            if e.permission_denied:
                suffix = "Please check if you have write permissions."
            else:
                suffix = "Please check your connection and try again."
            return Outcome(notifications=[notification.error(prefix + suffix)])
        finally:
            self.loading = False

        self.is_new_vehicle = False
        return Outcome(notifications=[notification.success(message)], redirect=HISTORY)
