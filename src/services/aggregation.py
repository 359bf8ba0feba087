"""
Period aggregation of normalized time entries.

Buckets entries into caller-supplied periods, sums seconds per category
display name, and derives supplemental statistics (today's time, future
time, non-billable categories) over the full entry set.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import date
from typing import Any

from core.categories import display_name, is_non_billable
from core.config import BILLABLE_PROJECT_TYPES
from core.dates import today
from core.durations import seconds_to_hours
from models.timesheets import Category, Period, SupplementalData, TimeEntry

logger = logging.getLogger(__name__)


# =============================================================================
# PERIODS
# =============================================================================


def sum_by_category(
    entries: Iterable[TimeEntry], categories: Mapping[str, Category]
) -> dict[str, int]:
    """Sum durations per category display name."""
    totals: dict[str, int] = defaultdict(int)
    for entry in entries:
        totals[display_name(entry.category_id, categories)] += entry.duration_seconds
    return dict(totals)


def aggregate_periods(
    entries: Sequence[TimeEntry],
    periods: Sequence[Period],
    categories: Mapping[str, Category],
    non_billable_root_ids: Iterable = (),
    as_of: date | None = None,
    billable_project_types: Iterable[str] = BILLABLE_PROJECT_TYPES,
) -> tuple[list[Period], SupplementalData]:
    """
    Fill each period's timesheets and compute supplemental data.

    Periods are not modified; new Period objects are returned in the same
    order. A period with no matching entries gets an empty timesheets dict.

    Raises:
        InvalidInput: if a period starts after it ends
    """
    filled = []
    for period in periods:
        period.validate()
        selected = [e for e in entries if period.contains(e.date)]
        filled.append(replace(period, timesheets=sum_by_category(selected, categories)))

    unmatched = sum(1 for e in entries if not any(p.contains(e.date) for p in periods))
    if unmatched:
        logger.debug("%d entries fall outside every requested period", unmatched)

    supplemental = supplemental_data(
        entries,
        categories,
        non_billable_root_ids=non_billable_root_ids,
        as_of=as_of,
        billable_project_types=billable_project_types,
    )
    return filled, supplemental


# =============================================================================
# SUPPLEMENTAL DATA
# =============================================================================


def supplemental_data(
    entries: Iterable[TimeEntry],
    categories: Mapping[str, Category],
    non_billable_root_ids: Iterable = (),
    as_of: date | None = None,
    billable_project_types: Iterable[str] = BILLABLE_PROJECT_TYPES,
) -> SupplementalData:
    """Today's total, future days/duration and non-billable names over all entries."""
    current = as_of or today()
    roots = frozenset(non_billable_root_ids)
    billable_types = frozenset(billable_project_types)

    today_total = 0
    future_days: set[date] = set()
    future_duration = 0
    non_billables: set[str] = set()

    for entry in entries:
        if entry.date == current:
            today_total += entry.duration_seconds
        elif entry.date > current:
            future_days.add(entry.date)
            future_duration += entry.duration_seconds

        if is_non_billable(entry.category_id, categories, roots, billable_types):
            non_billables.add(display_name(entry.category_id, categories))

    return SupplementalData(
        today=today_total,
        future_days=len(future_days),
        future_duration=future_duration,
        non_billables=frozenset(non_billables),
    )


def merge_supplemental_data(*items: SupplementalData | None) -> SupplementalData:
    """
    Combine supplemental data from independent fetches.

    Numeric fields are summed (future days included: each source counts its
    own window), non-billable names are unioned and leave mappings merged.
    """
    today_total = 0
    future_days = 0
    future_duration = 0
    non_billables: set[str] = set()
    leave_mappings: dict[str, str] = {}
    planable_keys: dict[str, str] = {}

    for item in items:
        if item is None:
            continue
        today_total += item.today
        future_days += item.future_days
        future_duration += item.future_duration
        non_billables |= item.non_billables
        leave_mappings.update(item.leave_mappings)
        planable_keys.update(item.planable_keys)

    return SupplementalData(
        today=today_total,
        future_days=future_days,
        future_duration=future_duration,
        non_billables=frozenset(non_billables),
        leave_mappings=leave_mappings,
        planable_keys=planable_keys,
    )


# =============================================================================
# HOURS SUMMARY
# =============================================================================


def _hours_list(totals: Mapping[str, int]) -> list[dict[str, Any]]:
    return [
        {"name": name, "hours": seconds_to_hours(seconds)}
        for name, seconds in sorted(totals.items())
    ]


def hours_summary(
    entries: Iterable[TimeEntry],
    categories: Mapping[str, Category],
    previous_period: Period,
    current_period: Period,
    as_of: date | None = None,
) -> dict[str, Any]:
    """
    Break hours down relative to today for the previous and current pay period.

    Returns:
        Dict with previousPeriodHours, previousHours (current period, before
        today), todaysHours, futureHours and per-category hour lists for both
        periods, sorted by category name
    """
    current = as_of or today()
    buckets = {"previousPeriod": 0, "previous": 0, "today": 0, "future": 0}
    previous_entries = []
    current_entries = []

    for entry in entries:
        if previous_period.contains(entry.date):
            buckets["previousPeriod"] += entry.duration_seconds
            previous_entries.append(entry)
            continue
        if not current_period.contains(entry.date):
            continue
        current_entries.append(entry)
        if entry.date < current:
            buckets["previous"] += entry.duration_seconds
        elif entry.date > current:
            buckets["future"] += entry.duration_seconds
        else:
            buckets["today"] += entry.duration_seconds

    return {
        "previousPeriodHours": seconds_to_hours(buckets["previousPeriod"]),
        "previousHours": seconds_to_hours(buckets["previous"]),
        "todaysHours": seconds_to_hours(buckets["today"]),
        "futureHours": seconds_to_hours(buckets["future"]),
        "jobcodeHours": _hours_list(sum_by_category(current_entries, categories)),
        "previousPeriodJobcodeHours": _hours_list(sum_by_category(previous_entries, categories)),
    }
