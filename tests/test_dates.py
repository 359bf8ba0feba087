"""Tests for date helpers and vendor query batching."""

from datetime import date, timedelta

import pytest

from core.dates import (
    add_months,
    batch_date_range,
    end_of_month,
    is_work_day,
    last_work_day,
    monthly_periods,
    parse_date,
)
from core.errors import InvalidInput
from models.timesheets import DateBatch


def spans(batches):
    return [(b.start_date, b.end_date) for b in batches]


def assert_exact_cover(batches, start, end):
    assert batches[0].start_date == start
    assert batches[-1].end_date == end
    for prev, nxt in zip(batches, batches[1:]):
        assert nxt.start_date == prev.end_date + timedelta(days=1)
    for batch in batches:
        assert batch.start_date <= batch.end_date


def test_batches_in_the_past_cover_two_months_each():
    batches = batch_date_range(date(2024, 1, 15), date(2024, 6, 30), as_of=date(2025, 1, 1))

    assert spans(batches) == [
        (date(2024, 1, 15), date(2024, 2, 29)),
        (date(2024, 3, 1), date(2024, 4, 30)),
        (date(2024, 5, 1), date(2024, 6, 30)),
    ]


def test_batches_stop_splitting_once_caught_up_to_today():
    batches = batch_date_range(date(2024, 1, 1), date(2024, 12, 31), as_of=date(2024, 4, 10))

    assert spans(batches) == [
        (date(2024, 1, 1), date(2024, 2, 29)),
        (date(2024, 3, 1), date(2024, 4, 30)),
        (date(2024, 5, 1), date(2024, 12, 31)),
    ]


def test_first_batch_reaching_today_is_followed_by_one_final_batch():
    batches = batch_date_range(date(2024, 4, 5), date(2024, 9, 30), as_of=date(2024, 4, 20))

    assert spans(batches) == [
        (date(2024, 4, 5), date(2024, 5, 31)),
        (date(2024, 6, 1), date(2024, 9, 30)),
    ]


def test_single_day_range():
    batches = batch_date_range(date(2024, 3, 10), date(2024, 3, 10), as_of=date(2024, 3, 10))

    assert batches == [DateBatch(date(2024, 3, 10), date(2024, 3, 10))]


@pytest.mark.parametrize(
    "start, end, as_of",
    [
        (date(2023, 1, 1), date(2023, 12, 31), date(2024, 6, 1)),
        (date(2023, 11, 30), date(2024, 2, 1), date(2023, 12, 15)),
        (date(2024, 2, 29), date(2024, 3, 1), date(2020, 1, 1)),
        (date(2022, 7, 14), date(2024, 10, 3), date(2023, 5, 5)),
    ],
)
def test_batches_cover_range_without_gaps_or_overlaps(start, end, as_of):
    assert_exact_cover(batch_date_range(start, end, as_of=as_of), start, end)


def test_batch_date_range_rejects_reversed_range():
    with pytest.raises(InvalidInput):
        batch_date_range(date(2024, 2, 1), date(2024, 1, 1))


def test_monthly_periods_are_clipped_to_range():
    periods = monthly_periods(date(2024, 1, 15), date(2024, 3, 10))

    assert [(p.start_date, p.end_date, p.title) for p in periods] == [
        (date(2024, 1, 15), date(2024, 1, 31), "2024-01"),
        (date(2024, 2, 1), date(2024, 2, 29), "2024-02"),
        (date(2024, 3, 1), date(2024, 3, 10), "2024-03"),
    ]
    assert all(p.timesheets == {} for p in periods)


def test_month_arithmetic():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 2) == date(2025, 1, 15)
    assert end_of_month(date(2023, 2, 10)) == date(2023, 2, 28)


def test_work_days():
    assert is_work_day(date(2024, 3, 29))  # Friday
    assert not is_work_day(date(2024, 3, 30))
    assert last_work_day(date(2024, 3, 31)) == date(2024, 3, 29)
    assert last_work_day(date(2024, 4, 30)) == date(2024, 4, 30)


def test_parse_date():
    assert parse_date("2024-03-05") == date(2024, 3, 5)
    assert parse_date("2024-03-05T09:00:00Z") == date(2024, 3, 5)
    with pytest.raises(InvalidInput):
        parse_date("03/05/2024")
