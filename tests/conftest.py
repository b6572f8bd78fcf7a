"""Shared fixtures for service log tests."""

from datetime import date

import pytest

from servicelog import StoreError, YamlStore, PERMISSION_DENIED, UNAVAILABLE

TODAY = date(2026, 10, 19)
TODAY_TS = "2026-10-19T00:00:00.000Z"
YESTERDAY_TS = "2026-10-18T00:00:00.000Z"


def make_record(record_id="1760832000000", date=TODAY_TS, vehicle_number="KA01AB1234",
                spare_parts=None, service_items=None, kilometer_reading=42000):
    """A stored record with consistent totals."""
    spare_parts = spare_parts if spare_parts is not None else [{"name": "Oil Filter", "cost": 250}]
    service_items = service_items if service_items is not None else [
        {"description": "Oil Change", "cost": 500}
    ]
    spare = sum(p["cost"] for p in spare_parts)
    service = sum(s["cost"] for s in service_items)
    return {
        "id": record_id,
        "vehicleNumber": vehicle_number,
        "date": date,
        "kilometerReading": kilometer_reading,
        "spareParts": spare_parts,
        "serviceItems": service_items,
        "totalSpareCost": spare,
        "totalServiceCost": service,
        "totalCost": spare + service,
    }


class FailingStore(YamlStore):
    """Store whose reads and/or writes fail with a given error code."""

    def __init__(self, filename, read_code=None, write_code=None):
        super().__init__(filename)
        self.read_code = read_code
        self.write_code = write_code
        self.writes = 0

    def fetch_all(self, vehicle_number):
        if self.read_code:
            raise StoreError(self.read_code, "read failed")
        return super().fetch_all(vehicle_number)

    def push(self, vehicle_number, record):
        self.writes += 1
        if self.write_code:
            raise StoreError(self.write_code, "write failed")
        return super().push(vehicle_number, record)

    def set(self, vehicle_number, store_key, record):
        self.writes += 1
        if self.write_code:
            raise StoreError(self.write_code, "write failed")
        return super().set(vehicle_number, store_key, record)


@pytest.fixture
def store(tmp_path):
    return YamlStore(tmp_path / "services.yaml")


@pytest.fixture
def permission_denied_store(tmp_path):
    return FailingStore(tmp_path / "services.yaml", write_code=PERMISSION_DENIED)


@pytest.fixture
def unavailable_store(tmp_path):
    return FailingStore(tmp_path / "services.yaml", read_code=UNAVAILABLE, write_code=UNAVAILABLE)
