"""
Timesheet data for the Portal, dispatched on the employee's timesheet system.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from core.config import NON_BILLABLE_JOBCODE_IDS
from core.database import EmployeeStore
from core.dates import end_of_month, monthly_periods, start_of_month, today
from core.errors import InvalidInput
from core.vendor_client import gather_all
from models.timesheets import Period
from services.adp import AdpClient, non_billable_codes
from services.aggregation import aggregate_periods, hours_summary, merge_supplemental_data
from services.tsheets import TSheetsClient
from services.unanet import UnanetClient

logger = logging.getLogger(__name__)

SYSTEMS = {"tsheets": "TSheets", "adp": "ADP", "unanet": "Unanet"}


@dataclass
class TimesheetRequest:
    """What the Portal asks for: one employee, one system, a list of periods."""

    system: str
    employee_number: int
    periods: list[Period] = field(default_factory=list)
    only_pto: bool = False
    statuses: list[str] | None = None
    account: str = "CYK"

    @classmethod
    def for_range(cls, system: str, employee_number: int, start: date, end: date, **kwargs) -> "TimesheetRequest":
        """Request covering [start, end] split into calendar months."""
        return cls(system, employee_number, monthly_periods(start, end), **kwargs)

    def validate(self) -> "TimesheetRequest":
        if self.system.lower() not in SYSTEMS:
            raise InvalidInput(
                f"Unknown timesheet system '{self.system}'",
                details=[f"Expected one of: {', '.join(SYSTEMS.values())}"],
            )
        if not self.only_pto and not self.periods:
            raise InvalidInput("At least one period is required")
        for period in self.periods:
            period.validate()
        return self

    @property
    def start_date(self) -> date:
        return min(p.start_date for p in self.periods)

    @property
    def end_date(self) -> date:
        return max(p.end_date for p in self.periods)


async def get_timesheet_data(
    request: TimesheetRequest, store: EmployeeStore | None = None, as_of: date | None = None
) -> dict[str, Any]:
    """
    Fetch, normalize and aggregate an employee's timesheets.

    The store caches vendor identities (ADP associate OID, Unanet person key)
    on the employee record; without it they are looked up on every call.

    Returns:
        Portal response body: system, timesheets, ptoBalances or
        leaveBalances, and supplementalData
    """
    request.validate()
    system = request.system.lower()
    logger.info(
        "Fetching %s timesheets for employee %s (%d period(s), only PTO: %s)",
        SYSTEMS[system],
        request.employee_number,
        len(request.periods),
        request.only_pto,
    )
    if system == "tsheets":
        return await _tsheets_data(request, as_of)
    if system == "adp":
        return await _adp_data(request, store, as_of)
    return await _unanet_data(request, store, as_of)


async def _tsheets_data(request: TimesheetRequest, as_of: date | None) -> dict[str, Any]:
    async with TSheetsClient() as client:
        user, pto_jobcodes = await client.get_user(request.employee_number)
        if request.only_pto:
            categories = {**await client.get_jobcodes(), **pto_jobcodes}
            return {"system": "TSheets", "ptoBalances": client.get_pto_balances(user, categories)}

        jobcodes, entries = await gather_all(
            client.get_jobcodes(),
            client.get_timesheets(user["id"], request.start_date, request.end_date, as_of),
        )

    categories = {**jobcodes, **pto_jobcodes}
    periods, supplemental = aggregate_periods(
        entries, request.periods, categories, NON_BILLABLE_JOBCODE_IDS, as_of=as_of
    )
    return {
        "system": "TSheets",
        "timesheets": [p.to_dict() for p in periods],
        "ptoBalances": TSheetsClient.get_pto_balances(user, categories),
        "supplementalData": supplemental.to_dict(),
    }


async def _adp_aoid(client: AdpClient, request: TimesheetRequest, store: EmployeeStore | None) -> str:
    employee = store.get(request.employee_number) if store else None
    if employee and employee.cyk_aoid:
        return employee.cyk_aoid

    aoid = await client.find_aoid(request.employee_number)
    if employee:
        store.update(employee.id, "cyk_aoid", aoid)
    return aoid


async def _adp_data(request: TimesheetRequest, store: EmployeeStore | None, as_of: date | None) -> dict[str, Any]:
    client = await AdpClient.connect(request.account)
    async with client:
        aoid = await _adp_aoid(client, request, store)
        if request.only_pto:
            return {"system": "ADP", "ptoBalances": await client.get_pto_balances(aoid)}

        (entries, categories), pto_balances = await gather_all(
            client.get_time_cards(aoid, request.start_date, request.end_date, as_of),
            client.get_pto_balances(aoid),
        )

    periods, supplemental = aggregate_periods(
        entries, request.periods, categories, non_billable_codes(categories), as_of=as_of
    )
    return {
        "system": "ADP",
        "timesheets": [p.to_dict() for p in periods],
        "ptoBalances": pto_balances,
        "supplementalData": supplemental.to_dict(),
    }


async def _unanet_person_key(client: UnanetClient, request: TimesheetRequest, store: EmployeeStore | None) -> str:
    employee = store.get(request.employee_number) if store else None
    if employee and employee.unanet_person_key:
        return employee.unanet_person_key

    person_key = await client.find_person_key(request.employee_number)
    if employee:
        store.update(employee.id, "unanet_person_key", person_key)
    return person_key


async def _unanet_data(request: TimesheetRequest, store: EmployeeStore | None, as_of: date | None) -> dict[str, Any]:
    client = await UnanetClient.connect()
    async with client:
        person_key = await _unanet_person_key(client, request, store)
        if request.only_pto:
            leave_balances, leave_supplemental = await client.get_leave_balances(person_key, as_of)
            return {
                "system": "Unanet",
                "leaveBalances": leave_balances,
                "supplementalData": leave_supplemental.to_dict(),
            }

        (periods, time_supplemental), (leave_balances, leave_supplemental) = await gather_all(
            client.get_period_timesheets(request.periods, person_key, request.statuses, as_of),
            client.get_leave_balances(person_key, as_of),
        )

    return {
        "system": "Unanet",
        "leaveBalances": leave_balances,
        "timesheets": [p.to_dict() for p in periods],
        "supplementalData": merge_supplemental_data(time_supplemental, leave_supplemental).to_dict(),
    }


async def get_hours_summary(employee_number: int, as_of: date | None = None) -> dict[str, Any]:
    """TSheets hours for the previous and current calendar month, split around today."""
    current = as_of or today()
    current_period = Period(start_of_month(current), end_of_month(current), current.strftime("%Y-%m"))
    previous_end = current_period.start_date - timedelta(days=1)
    previous_period = Period(start_of_month(previous_end), previous_end, previous_end.strftime("%Y-%m"))

    async with TSheetsClient() as client:
        user, pto_jobcodes = await client.get_user(employee_number)
        jobcodes, entries = await gather_all(
            client.get_jobcodes(),
            client.get_timesheets(user["id"], previous_period.start_date, current_period.end_date, current),
        )

    return hours_summary(entries, {**jobcodes, **pto_jobcodes}, previous_period, current_period, current)
