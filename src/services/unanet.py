"""
Unanet adapter.

Time is stored in Unanet as monthly timesheets made of timeslips (one per
project/task per day, in hours). Leave balances come from the person leave
report: the yearly budget minus what was used so far this month.

API reference: https://consultwithcase-sand.unanet.biz/platform/swagger/
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from core.categories import project_display_name
from core.config import PLANABLE_KEYS, UNANET_BASE_URL, UNANET_END_OF_TIME
from core.dates import parse_date, start_of_month, today
from core.durations import hours_to_seconds, parse_duration
from core.errors import InvalidInput
from core.secrets import get_json_secret
from core.vendor_client import VendorClient, gather_all
from models.timesheets import Category, Period, SupplementalData, TimeEntry
from services.aggregation import aggregate_periods, merge_supplemental_data

logger = logging.getLogger(__name__)


def slip_category(slip: Mapping[str, Any]) -> Category:
    """Category for a timeslip, keyed by its display name."""
    project_name = (slip.get("project") or {}).get("name") or ""
    task_name = (slip.get("task") or {}).get("name")
    name = project_display_name(project_name, task_name)
    return Category(
        id=name,
        name=project_name,
        task_name=task_name,
        project_type=(slip.get("projectType") or {}).get("name") or "",
    )


def slip_entries(
    timesheets: Iterable[Mapping[str, Any]], period: Period
) -> tuple[list[TimeEntry], dict[str, Category]]:
    """Entries with hours inside the period from detailed Unanet timesheets."""
    entries = []
    categories: dict[str, Category] = {}
    for timesheet in timesheets:
        for slip in timesheet.get("timeslips") or []:
            seconds = parse_duration(slip.get("hoursWorked"), unit="hours")
            if seconds == 0:
                continue
            work_date = parse_date(slip["workDate"])
            if not period.contains(work_date):
                continue

            category = slip_category(slip)
            categories.setdefault(str(category.id), category)
            entries.append(
                TimeEntry(
                    date=work_date,
                    category_id=category.id,
                    duration_seconds=seconds,
                    status=timesheet.get("status"),
                )
            )
    return entries, categories


def filter_by_status(timesheets: list[dict[str, Any]], statuses: Sequence[str] | str | None) -> list[dict[str, Any]]:
    if not statuses:
        return timesheets
    if isinstance(statuses, str):
        statuses = [statuses]
    return [t for t in timesheets if t.get("status") in statuses]


class UnanetClient(VendorClient):
    """Unanet REST client; call login() (or use connect()) before anything else."""

    vendor = "Unanet"
    ping_path = "/rest/ping"

    def __init__(self, token: str | None = None, base_url: str = UNANET_BASE_URL):
        super().__init__(base_url, token)

    @classmethod
    async def connect(cls) -> "UnanetClient":
        """Create a client logged in with the /Unanet/login secret."""
        credentials = get_json_secret("/Unanet/login", "username", "password")
        client = cls()
        try:
            await client.login(credentials["username"], credentials["password"])
        except Exception:
            await client.close()
            raise
        return client

    async def login(self, username: str, password: str) -> str:
        data = await self.request("POST", "/rest/login", json={"username": username, "password": password})
        self.token = data["token"]
        return self.token

    async def find_person_key(self, employee_number: int) -> str:
        """
        Unanet person key for a Portal employee number (matched on idCode1).

        Raises:
            InvalidInput: unless exactly one person matches
        """
        data = await self.request("POST", "/rest/people/search", json={"idCode1": employee_number}) or {}
        items = data.get("items") or []
        if len(items) != 1:
            raise InvalidInput(
                f"Could not distinguish Unanet employee {employee_number} ({len(items)} options)."
            )
        return str(items[0]["key"])

    async def search_timesheets(
        self, person_key: str, start: date, end: date, statuses: Sequence[str] | str | None = None
    ) -> list[dict[str, Any]]:
        """Timesheet headers beginning between start and end, optionally filtered by status."""
        data = await self.request(
            "POST",
            "/rest/time/search",
            json={
                "personKeys": [person_key],
                "beginDateStart": start.isoformat(),
                "beginDateEnd": end.isoformat(),
            },
        ) or {}
        return filter_by_status(data.get("items") or [], statuses)

    async def get_timesheet_details(self, timesheets: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Full timesheets (with timeslips), fetched in parallel."""
        return list(
            await gather_all(*(self.request("GET", f"/rest/time/{t['key']}") for t in timesheets))
        )

    async def get_period_timesheet(
        self,
        period: Period,
        person_key: str,
        statuses: Sequence[str] | str | None = None,
        as_of: date | None = None,
    ) -> tuple[Period, SupplementalData]:
        """Fill one period; Unanet timesheets are monthly, so search from the month start."""
        headers = await self.search_timesheets(
            person_key, start_of_month(period.start_date), period.end_date, statuses
        )
        details = await self.get_timesheet_details(headers)
        entries, categories = slip_entries(details, period)
        filled, supplemental = aggregate_periods(entries, [period], categories, as_of=as_of)
        return filled[0], supplemental

    async def get_period_timesheets(
        self,
        periods: Sequence[Period],
        person_key: str,
        statuses: Sequence[str] | str | None = None,
        as_of: date | None = None,
    ) -> tuple[list[Period], SupplementalData]:
        """Timesheets for every period plus their combined supplemental data."""
        for period in periods:
            period.validate()
        results = await gather_all(
            *(self.get_period_timesheet(p, person_key, statuses, as_of) for p in periods)
        )
        filled = [period for period, _ in results]
        return filled, merge_supplemental_data(*(supplemental for _, supplemental in results))

    async def get_leave_data(self, person_key: str, start: date | str, end: date | str) -> dict[str, Any]:
        data = await self.request(
            "POST",
            f"/rest/people/{person_key}/leave",
            json={"dateRange": {"rangeStart": str(start), "rangeEnd": str(end)}},
        )
        return data or {}

    async def get_leave_balances(
        self, person_key: str, as_of: date | None = None
    ) -> tuple[dict[str, int], SupplementalData]:
        """
        Remaining leave per leave code in seconds.

        Leave items whose budget window is not the whole year (a mid-year
        hire, a prorated policy) are refetched for their own window, since the
        yearly report does not carry their budget.

        Returns:
            (balances by leave code, supplemental data with leave code names
            and planable keys)
        """
        current = as_of or today()
        year_start = current.replace(month=1, day=1).isoformat()
        year_end = current.replace(month=12, day=31).isoformat()
        whole_year_ends = {year_end, UNANET_END_OF_TIME.isoformat()}

        yearly, actuals = await gather_all(
            self.get_leave_data(person_key, year_start, year_end),
            self.get_leave_data(person_key, start_of_month(current), current),
        )

        oddballs = [
            item
            for item in yearly.get("items") or []
            if item.get("beginDate") != year_start or item.get("endDate") not in whole_year_ends
        ]
        refetched = await gather_all(
            *(self.get_leave_data(person_key, item["beginDate"], item["endDate"]) for item in oddballs)
        )
        oddball_budgets = {}
        for item, data in zip(oddballs, refetched):
            code = item["project"]["code"]
            match = next((i for i in data.get("items") or [] if i["project"]["code"] == code), None)
            if match is not None:
                oddball_budgets[code] = match.get("budget")

        leave_mappings = {}
        balances: dict[str, int] = {}
        for item in yearly.get("items") or []:
            code, name = item["project"]["code"], item["project"].get("name", "")
            budget = oddball_budgets.get(code)
            if budget is None:
                budget = item.get("budget")
            leave_mappings[code] = name
            balances[code] = hours_to_seconds(budget or 0)

        for item in actuals.get("items") or []:
            code = item["project"]["code"]
            balances[code] = balances.get(code, 0) - hours_to_seconds(item.get("actuals") or 0)

        supplemental = SupplementalData(leave_mappings=leave_mappings, planable_keys=dict(PLANABLE_KEYS))
        return balances, supplemental
