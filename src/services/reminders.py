"""
Timesheet submission reminders.

Two payroll cohorts are reminded on different schedules:
- CASE employees track time in TSheets against calendar months; reminders go
  out on the last work day of the month (day 1) and the day after (day 2).
- CYK employees are on ADP bi-weekly pay periods; reminders go out on the
  last work day of the current pay period.
"""

import logging
from collections.abc import Iterable
from contextlib import AsyncExitStack
from datetime import date, timedelta
from typing import Protocol

from core.config import (
    CYK_PERIOD_DAYS,
    CYK_PERIOD_END,
    CYK_PERIOD_START,
    STAGE,
    SUBMITTED_STATUSES,
    WORK_DAY_HOURS,
)
from core.database import EmployeeStore
from core.dates import end_of_month, is_work_day, iter_days, last_work_day, start_of_month, today
from core.durations import SECONDS_PER_HOUR
from core.errors import InvalidInput
from models.timesheets import Employee, Period, ReminderDecision, TimeEntry
from services.adp import AdpClient
from services.notifications import SmsNotifier, send_reminder, sync_opt_outs
from services.tsheets import TSheetsClient

logger = logging.getLogger(__name__)


# =============================================================================
# HOURS
# =============================================================================


def hours_required(employee: Employee, period_start: date, period_end: date) -> float:
    """
    Hours an employee is expected to log between two dates (inclusive).

    Counts Monday-Friday from the later of the period start and the hire date,
    at WORK_DAY_HOURS scaled by the employee's full-time percentage.
    """
    start = period_start
    if employee.hire_date and employee.hire_date > start:
        start = employee.hire_date

    work_days = sum(1 for day in iter_days(start, period_end) if is_work_day(day))
    return work_days * (WORK_DAY_HOURS * (employee.full_time_percentage / 100))


def hours_submitted(entries: Iterable[TimeEntry]) -> float:
    """
    Hours from entries that count toward the requirement.

    Entries with a status only count once approved or submitted; entries
    without a status (ADP daily totals) always count.
    """
    seconds = sum(
        e.duration_seconds
        for e in entries
        if e.status is None or e.status.upper() in SUBMITTED_STATUSES
    )
    return seconds / SECONDS_PER_HOUR


def should_remind(required: float, submitted: float) -> bool:
    """Remind only when strictly behind; meeting the requirement exactly is enough."""
    return required > submitted


# =============================================================================
# REMINDER DAYS
# =============================================================================


def case_reminder_period(as_of: date | None = None) -> Period:
    """Calendar month being reminded about; on the 1st this is the previous month."""
    current = as_of or today()
    if current.day == 1:
        current -= timedelta(days=1)
    return Period(start_of_month(current), end_of_month(current), current.strftime("%Y-%m"))


def is_case_reminder_day(day: int, as_of: date | None = None) -> bool:
    """
    Whether a CASE reminder run should happen.

    Args:
        day: 1 for the run on the last work day of the month, 2 for the
            follow-up run on the next day
        as_of: date of the run, defaults to today()
    """
    if day not in (1, 2):
        raise InvalidInput(f"Reminder day must be 1 or 2, got {day}")

    current = as_of or today()
    rolled_back = current.day == 1
    if rolled_back:
        current -= timedelta(days=1)

    last_day = last_work_day(end_of_month(current))
    if rolled_back:
        # Month ended on a work day, so today is the day after it
        return day == 2 and current == last_day
    if day == 1:
        return current == last_day
    return current == last_day + timedelta(days=1)


def cyk_current_period(as_of: date | None = None) -> Period:
    """Bi-weekly ADP pay period containing `as_of`, anchored on the first known period."""
    current = as_of or today()
    length = (CYK_PERIOD_END - CYK_PERIOD_START).days
    offset = (current - CYK_PERIOD_START).days // CYK_PERIOD_DAYS
    start = CYK_PERIOD_START + timedelta(days=offset * CYK_PERIOD_DAYS)
    return Period(start, start + timedelta(days=length), f"CYK {start.isoformat()}")


def is_cyk_reminder_day(as_of: date | None = None) -> bool:
    """True on the last work day of the current CYK pay period."""
    current = as_of or today()
    period = cyk_current_period(current)
    return current == last_work_day(period.end_date)


# =============================================================================
# RUNNER
# =============================================================================


class SubmittedTimeSource(Protocol):
    """Vendor lookup of an employee's time entries for a period."""

    async def submitted_entries(
        self, employee: Employee, start: date, end: date
    ) -> list[TimeEntry]: ...


async def evaluate_employee(
    employee: Employee, period: Period, source: SubmittedTimeSource
) -> ReminderDecision:
    """Compare required and submitted hours for one employee and period."""
    entries = await source.submitted_entries(employee, period.start_date, period.end_date)
    return ReminderDecision(
        employee_number=employee.employee_number,
        hours_required=hours_required(employee, period.start_date, period.end_date),
        hours_submitted=hours_submitted(entries),
    )


class ReminderRunner:
    """One reminder run over all active Portal employees."""

    def __init__(
        self,
        store: EmployeeStore,
        notifier: SmsNotifier,
        case_source: SubmittedTimeSource | None,
        cyk_source: SubmittedTimeSource | None,
        stage: str = STAGE,
        as_of: date | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.case_source = case_source
        self.cyk_source = cyk_source
        self.stage = stage
        self.as_of = as_of or today()

    async def run(self, day: int) -> list[int]:
        """
        Send reminders for reminder day 1 or 2.

        Returns:
            Employee numbers that were behind on hours
        """
        case_day = is_case_reminder_day(day, self.as_of)
        cyk_day = is_cyk_reminder_day(self.as_of)
        if not case_day and not cyk_day:
            logger.info("No reminders scheduled for %s (day %d)", self.as_of, day)
            return []
        logger.info("Reminder run %s: CASE=%s CYK=%s", self.as_of, case_day, cyk_day)

        employees = self.store.active_employees()
        await sync_opt_outs(employees, self.notifier, self.store)

        case_period = case_reminder_period(self.as_of)
        cyk_period = cyk_current_period(self.as_of)

        reminded = []
        for employee in employees:
            if employee.is_cyk and cyk_day:
                period, source = cyk_period, self.cyk_source
            elif not employee.is_cyk and case_day:
                period, source = case_period, self.case_source
            else:
                continue

            try:
                decision = await evaluate_employee(employee, period, source)
                if not decision.should_remind:
                    continue
                logger.info(
                    "Employee %s has %.2f of %.2f required hours",
                    employee.employee_number,
                    decision.hours_submitted,
                    decision.hours_required,
                )
                reminded.append(employee.employee_number)
                await send_reminder(employee, self.notifier, stage=self.stage)
            except Exception:
                # One employee's failure must not stop the rest of the run
                logger.exception("Reminder failed for employee number %s", employee.employee_number)

        return reminded


async def send_timesheet_reminders(
    day: int,
    store: EmployeeStore,
    notifier: SmsNotifier,
    stage: str = STAGE,
    as_of: date | None = None,
) -> list[int]:
    """
    Run reminders for today, connecting only to the vendors of cohorts due.

    Returns:
        Employee numbers that were behind on hours
    """
    current = as_of or today()
    case_day = is_case_reminder_day(day, current)
    cyk_day = is_cyk_reminder_day(current)

    async with AsyncExitStack() as stack:
        case_source = await stack.enter_async_context(TSheetsClient()) if case_day else None
        cyk_source = await stack.enter_async_context(await AdpClient.connect("CYK")) if cyk_day else None
        runner = ReminderRunner(store, notifier, case_source, cyk_source, stage=stage, as_of=current)
        return await runner.run(day)
