"""
Date utilities: month arithmetic, work days and vendor query batching.
"""

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from core.config import BATCH_MONTHS, TIMEZONE
from core.errors import InvalidInput
from models.timesheets import DateBatch, Period


def today() -> date:
    """Current date in the Portal's timezone."""
    return datetime.now(ZoneInfo(TIMEZONE)).date()


def parse_date(value: str | date | datetime) -> date:
    """Parse 'YYYY-MM-DD' (or a longer ISO timestamp) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise InvalidInput(f"Invalid date '{value}'", details=["Expected format: YYYY-MM-DD"])


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    _, last_day = calendar.monthrange(d.year, d.month)
    return d.replace(day=last_day)


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    _, last_day = calendar.monthrange(year, month + 1)
    return date(year, month + 1, min(d.day, last_day))


def same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def is_work_day(d: date) -> bool:
    """Monday to Friday (ISO weekday 1-5)."""
    return d.isoweekday() <= 5


def last_work_day(d: date) -> date:
    """Roll a weekend day back to the preceding Friday."""
    return d - timedelta(days=max(d.isoweekday() - 5, 0))


def batch_date_range(start: date, end: date, as_of: date | None = None) -> list[DateBatch]:
    """
    Split [start, end] into vendor query windows.

    The first window runs from `start` through the end of the following month,
    later windows cover BATCH_MONTHS whole months each. Once the next window
    would start in (or after) the current month, a single final window runs
    through `end`. Window ends are clipped to `end`, so the batches cover the
    range exactly.

    Args:
        start: first day of the range (inclusive)
        end: last day of the range (inclusive)
        as_of: reference date for "now", defaults to today()

    Returns:
        Ordered, non-overlapping list of DateBatch
    """
    if start > end:
        raise InvalidInput(f"Start date {start} is after end date {end}")
    current = as_of or today()

    batches = []
    batch_start = start
    batch_end = end_of_month(add_months(start, BATCH_MONTHS - 1))
    while batch_start <= end:
        batches.append(DateBatch(batch_start, min(batch_end, end)))

        batch_start = batch_end + timedelta(days=1)
        batch_end = end_of_month(add_months(batch_start, BATCH_MONTHS - 1))

        caught_up = start_of_month(batch_start) >= start_of_month(current)
        if caught_up and batch_start <= end:
            # No point splitting windows that reach into the future
            batches.append(DateBatch(batch_start, end))
            break

    return batches


def monthly_periods(start: date, end: date) -> list[Period]:
    """One period per calendar month between start and end, clipped to the range."""
    if start > end:
        raise InvalidInput(f"Start date {start} is after end date {end}")

    periods = []
    month_start = start_of_month(start)
    while month_start <= end:
        periods.append(
            Period(
                start_date=max(month_start, start),
                end_date=min(end_of_month(month_start), end),
                title=month_start.strftime("%Y-%m"),
            )
        )
        month_start = add_months(month_start, 1)
    return periods
