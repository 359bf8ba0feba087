"""Tests for period aggregation and supplemental data."""

from datetime import date

import pytest

from core.categories import index_categories
from core.errors import InvalidInput
from models.timesheets import Category, Period, SupplementalData, TimeEntry
from services.aggregation import (
    aggregate_periods,
    hours_summary,
    merge_supplemental_data,
    sum_by_category,
)

TODAY = date(2024, 3, 15)


@pytest.fixture
def categories():
    return index_categories(
        [
            Category(1, "Overhead"),
            Category(2, "Admin", parent_id=1),
            Category(3, "Client Work"),
        ]
    )


@pytest.fixture
def entries():
    return [
        TimeEntry(date(2024, 3, 1), 3, 3600),
        TimeEntry(date(2024, 3, 1), 2, 1800),
        TimeEntry(date(2024, 3, 15), 3, 7200),
        TimeEntry(date(2024, 3, 20), 3, 3600),
        TimeEntry(date(2024, 3, 21), 2, 1800),
        TimeEntry(date(2024, 3, 21), 3, 1800),
        TimeEntry(date(2024, 4, 2), 3, 900),
    ]


def test_aggregate_periods_sums_per_category(entries, categories):
    march = Period(date(2024, 3, 1), date(2024, 3, 31), "March")

    periods, _ = aggregate_periods(entries, [march], categories, {1}, as_of=TODAY)

    assert periods[0].timesheets == {"Client Work": 16200, "Admin": 3600}
    assert periods[0].title == "March"


def test_empty_period_keeps_empty_timesheets(entries, categories):
    february = Period(date(2024, 2, 1), date(2024, 2, 29), "February")

    periods, _ = aggregate_periods(entries, [february], categories, as_of=TODAY)

    assert len(periods) == 1
    assert periods[0].timesheets == {}
    assert periods[0].to_dict()["timesheets"] == {}


def test_aggregate_periods_does_not_modify_input(entries, categories):
    march = Period(date(2024, 3, 1), date(2024, 3, 31), "March")

    periods, _ = aggregate_periods(entries, [march], categories, as_of=TODAY)

    assert march.timesheets == {}
    assert periods[0] is not march


def test_supplemental_data_over_all_entries(entries, categories):
    march = Period(date(2024, 3, 1), date(2024, 3, 31), "March")

    _, supplemental = aggregate_periods(entries, [march], categories, {1}, as_of=TODAY)

    assert supplemental.today == 7200
    assert supplemental.future_days == 3
    assert supplemental.future_duration == 8100
    assert supplemental.non_billables == frozenset({"Admin"})


def test_invalid_period_is_rejected(entries, categories):
    backwards = Period(date(2024, 3, 31), date(2024, 3, 1), "Backwards")

    with pytest.raises(InvalidInput):
        aggregate_periods(entries, [backwards], categories, as_of=TODAY)


def test_unknown_category_is_reported_by_raw_id():
    totals = sum_by_category([TimeEntry(date(2024, 1, 2), 77, 60)], {})

    assert totals == {"77": 60}


def test_merge_supplemental_data():
    a = SupplementalData(today=100, future_days=1, future_duration=200, non_billables=frozenset({"A"}))
    b = SupplementalData(today=50, future_days=2, future_duration=300, non_billables=frozenset({"B"}))

    merged = merge_supplemental_data(a, b)

    assert merged.today == 150
    assert merged.future_days == 3
    assert merged.future_duration == 500
    assert merged.non_billables == frozenset({"A", "B"})


def test_merge_supplemental_data_unions_leave_data_and_skips_none():
    time_data = SupplementalData(today=10)
    leave_data = SupplementalData(leave_mappings={"PTO": "Paid Time Off"}, planable_keys={"PTO": "PTO"})

    merged = merge_supplemental_data(time_data, None, leave_data)

    assert merged.to_dict() == {
        "today": 10,
        "future": {"days": 0, "duration": 0},
        "nonBillables": [],
        "leaveMappings": {"PTO": "Paid Time Off"},
        "planableKeys": {"PTO": "PTO"},
    }


def test_hours_summary(entries, categories):
    previous = Period(date(2024, 2, 1), date(2024, 2, 29))
    current = Period(date(2024, 3, 1), date(2024, 3, 31))
    entries = entries + [TimeEntry(date(2024, 2, 10), 3, 36000)]

    summary = hours_summary(entries, categories, previous, current, as_of=TODAY)

    assert summary["previousPeriodHours"] == 10
    assert summary["previousHours"] == 1.5
    assert summary["todaysHours"] == 2
    assert summary["futureHours"] == 2
    assert summary["jobcodeHours"] == [
        {"name": "Admin", "hours": 1},
        {"name": "Client Work", "hours": 4.5},
    ]
    assert summary["previousPeriodJobcodeHours"] == [{"name": "Client Work", "hours": 10}]
