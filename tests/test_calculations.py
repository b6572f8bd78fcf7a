#!/usr/bin/env python3
"""Tests for calculation helper functions."""
from datetime import date, datetime, timezone

import pytest

from servicelog import (
    ServiceItem,
    SparePart,
    calc_totals,
    is_same_day,
    normalize_vehicle_number,
    to_cost,
    to_form_date,
    to_iso_timestamp,
)
from servicelog.calculations import new_record_id


class TestToCost:
    """Tests for to_cost coercion."""

    def test_numbers_pass_through(self):
        assert to_cost(250) == 250
        assert to_cost(99.5) == 99.5

    def test_numeric_strings_are_parsed(self):
        assert to_cost("250") == 250
        assert to_cost(" 12.5 ") == 12.5

    def test_integral_values_become_int(self):
        assert to_cost(250.0) == 250
        assert isinstance(to_cost(250.0), int)
        assert isinstance(to_cost("100"), int)

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", float("nan"), float("inf"), True])
    def test_non_numeric_counts_as_zero(self, value):
        assert to_cost(value) == 0


class TestCalcTotals:
    """Tests for calc_totals."""

    def test_example_entry(self):
        """Oil filter 250 + oil change 500."""
        totals = calc_totals([SparePart("Oil Filter", 250)], [ServiceItem("Oil Change", 500)])
        assert totals.total_spare_cost == 250
        assert totals.total_service_cost == 500
        assert totals.total_cost == 750

    def test_empty_items(self):
        totals = calc_totals([], [])
        assert (totals.total_spare_cost, totals.total_service_cost, totals.total_cost) == (0, 0, 0)

    def test_non_numeric_costs_ignored(self):
        totals = calc_totals(
            [SparePart("Wiper", "abc"), SparePart("Bulb", "80"), SparePart("Fuse", None)],
            [ServiceItem("Wash", "")],
        )
        assert totals.total_spare_cost == 80
        assert totals.total_service_cost == 0
        assert totals.total_cost == 80

    def test_total_is_sum_of_both(self):
        parts = [SparePart("a", 10.5), SparePart("b", 20)]
        items = [ServiceItem("c", 5), ServiceItem("d", 4.5)]
        totals = calc_totals(parts, items)
        assert totals.total_cost == totals.total_spare_cost + totals.total_service_cost
        assert totals.total_cost == 40


class TestNormalizeVehicleNumber:
    """Tests for normalize_vehicle_number."""

    def test_uppercases(self):
        assert normalize_vehicle_number("ka01ab1234") == "KA01AB1234"

    def test_percent_decodes(self):
        assert normalize_vehicle_number("ka%2001%20ab") == "KA 01 AB"

    def test_empty(self):
        assert normalize_vehicle_number("") == ""
        assert normalize_vehicle_number(None) == ""


class TestServiceDates:
    """Tests for date conversion and the same-day edit window."""

    def test_to_iso_timestamp(self):
        assert to_iso_timestamp("2026-10-19") == "2026-10-19T00:00:00.000Z"

    def test_to_iso_timestamp_rejects_bad_date(self):
        with pytest.raises(ValueError):
            to_iso_timestamp("2026-02-30")

    def test_to_form_date_round_trip(self):
        assert to_form_date(to_iso_timestamp("2026-10-19")) == "2026-10-19"

    def test_to_form_date_uses_utc_day(self):
        assert to_form_date("2026-10-19T02:00:00+05:30") == "2026-10-18"

    def test_to_form_date_naive(self):
        assert to_form_date("2026-10-19T15:30:00") == "2026-10-19"

    def test_same_day_ignores_time(self):
        today = date(2026, 10, 19)
        assert is_same_day("2026-10-19T00:00:00.000Z", today)
        assert is_same_day("2026-10-19T23:59:59.999Z", today)

    def test_other_days_are_not_same_day(self):
        today = date(2026, 10, 19)
        assert not is_same_day("2026-10-18T00:00:00.000Z", today)
        assert not is_same_day("2026-10-20T00:00:00.000Z", today)

    @pytest.mark.parametrize("value", ["not-a-date", "", "2026-13-45T00:00:00.000Z"])
    def test_unreadable_date_is_not_same_day(self, value):
        assert not is_same_day(value, date(2026, 10, 19))


class TestNewRecordId:
    """Tests for new_record_id."""

    def test_milliseconds_since_epoch(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert new_record_id(now) == "1704067200000"

    def test_default_is_current_time(self):
        assert new_record_id().isdigit()
