"""
Data models for timesheet aggregation and reminders.

Vendor payloads are converted into these types as soon as they are received,
so the aggregation and reminder logic never branches on vendor shapes.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from core.errors import InvalidInput


class CategoryKind(str, Enum):
    """Kind of work a category represents."""

    REGULAR = "regular"
    PTO = "pto"
    OTHER = "other"


@dataclass(frozen=True)
class TimeEntry:
    """One unit of worked time on a single day."""

    date: date
    category_id: str | int
    duration_seconds: int
    status: str | None = None

    def __post_init__(self):
        if self.duration_seconds < 0:
            raise InvalidInput(f"Negative duration for entry on {self.date}")


@dataclass(frozen=True)
class Category:
    """A vendor job code / project, optionally nested under a parent."""

    id: str | int
    name: str
    parent_id: str | int | None = None
    kind: CategoryKind = CategoryKind.REGULAR
    task_name: str | None = None
    project_type: str | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id in (None, 0, "0", "")

    @property
    def display_name(self) -> str:
        from core.categories import project_display_name

        return project_display_name(self.name, self.task_name)


@dataclass
class Period:
    """Caller-defined date range (both ends inclusive)."""

    start_date: date
    end_date: date
    title: str = ""
    timesheets: dict[str, int] = field(default_factory=dict)

    def validate(self) -> "Period":
        if self.start_date > self.end_date:
            raise InvalidInput(
                f"Period '{self.title}' starts after it ends",
                details=[f"{self.start_date} > {self.end_date}"],
            )
        return self

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "title": self.title,
            "timesheets": dict(self.timesheets),
        }


@dataclass(frozen=True)
class DateBatch:
    """Sub-range of a larger date range used for one vendor query."""

    start_date: date
    end_date: date


@dataclass(frozen=True)
class SupplementalData:
    """Statistics over a set of entries relative to today."""

    today: int = 0
    future_days: int = 0
    future_duration: int = 0
    non_billables: frozenset[str] = frozenset()
    leave_mappings: dict[str, str] = field(default_factory=dict)
    planable_keys: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today,
            "future": {"days": self.future_days, "duration": self.future_duration},
            "nonBillables": sorted(self.non_billables),
            "leaveMappings": dict(self.leave_mappings),
            "planableKeys": dict(self.planable_keys),
        }


@dataclass
class Employee:
    """Portal employee record."""

    id: str
    employee_number: int
    hire_date: date | None
    full_time_percentage: float  # 0-100
    phone_number: str | None = None
    is_opted_out: bool = False
    is_cyk: bool = False
    cyk_aoid: str | None = None
    unanet_person_key: str | None = None
    email: str | None = None

    @property
    def is_active(self) -> bool:
        return self.full_time_percentage > 0


@dataclass(frozen=True)
class ReminderDecision:
    """Whether an employee is behind on submitted hours for a pay period."""

    employee_number: int
    hours_required: float
    hours_submitted: float

    @property
    def should_remind(self) -> bool:
        return self.hours_required > self.hours_submitted
