"""ServiceEntry class for persisted service records."""
from typing import List, Optional

from .calculations import Totals, calc_totals
from .line_items import ServiceItem, SparePart


class ServiceEntry:
    """
    One maintenance record for a vehicle on a given date.

    An entry has two identities:
    - record_id: the ``id`` field stored inside the record, assigned by the
      client when the entry is created. Used to find the entry again.
    - store_key: the address the store assigned when the entry was appended
      under ``services/{vehicle_number}``. Only needed to overwrite it.
    """

    def __init__(
            self,
            record_id: str,
            vehicle_number: str,
            date: str,
            kilometer_reading: int = 0,
            spare_parts: Optional[List[SparePart]] = None,
            service_items: Optional[List[ServiceItem]] = None,
            store_key: Optional[str] = None,
    ):
        self.record_id = record_id
        self.vehicle_number = vehicle_number
        self.date = date
        self.kilometer_reading = kilometer_reading
        self.spare_parts = spare_parts or []
        self.service_items = service_items or []
        self.store_key = store_key

    @property
    def totals(self) -> Totals:
        """Totals are always derived from the line items."""
        return calc_totals(self.spare_parts, self.service_items)

    @property
    def total_spare_cost(self):
        return self.totals.total_spare_cost

    @property
    def total_service_cost(self):
        return self.totals.total_service_cost

    @property
    def total_cost(self):
        return self.totals.total_cost
