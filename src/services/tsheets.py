"""
TSheets (QuickBooks Time) adapter.

Users, jobcodes and timesheets are fetched from the TSheets REST API and
converted into Category / TimeEntry objects.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from core.categories import display_name
from core.config import TSHEETS_BASE_URL
from core.dates import batch_date_range, parse_date
from core.durations import parse_duration
from core.errors import InvalidInput
from core.secrets import get_secret
from core.vendor_client import VendorClient, gather_all
from models.timesheets import Category, CategoryKind, Employee, TimeEntry

logger = logging.getLogger(__name__)

JOBCODE_KINDS = {
    "regular": CategoryKind.REGULAR,
    "pto": CategoryKind.PTO,
}


def _records(container: Mapping[str, Any] | None, key: str) -> list[dict[str, Any]]:
    """
    Records under `key` of a results object.

    TSheets keys non-empty results by id (`{"7": {...}}`) but encodes an empty
    result set as a list (`[]`).
    """
    records = (container or {}).get(key) or []
    if isinstance(records, Mapping):
        return list(records.values())
    return list(records)


def jobcode_category(raw: Mapping[str, Any]) -> Category:
    """Convert a TSheets jobcode record to a Category."""
    return Category(
        id=raw["id"],
        name=raw.get("name") or str(raw["id"]),
        parent_id=raw.get("parent_id"),
        kind=JOBCODE_KINDS.get(raw.get("type", "regular"), CategoryKind.OTHER),
    )


def timesheet_entry(raw: Mapping[str, Any]) -> TimeEntry:
    """Convert a TSheets timesheet record to a TimeEntry."""
    return TimeEntry(
        date=parse_date(raw["date"]),
        category_id=raw["jobcode_id"],
        duration_seconds=parse_duration(raw.get("duration")),
        status=raw.get("state"),
    )


class TSheetsClient(VendorClient):
    """TSheets REST client authenticated with a bearer access token."""

    vendor = "TSheets"
    ping_path = "/current_user"

    def __init__(self, token: str | None = None, base_url: str = TSHEETS_BASE_URL):
        super().__init__(base_url, token or get_secret("/TSheets/accessToken"))

    async def _paged(self, path: str, key: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Collect `results[key]` across pages until TSheets reports no more."""
        items = []
        page = 1
        while True:
            data = await self.request("GET", path, params={**params, "page": page}) or {}
            items.extend(_records(data.get("results"), key))
            if not data.get("more"):
                return items
            page += 1

    async def get_user(self, employee_number: int) -> tuple[dict[str, Any], dict[str, Category]]:
        """
        Get the TSheets user for a Portal employee number.

        Returns:
            (user record, PTO jobcodes from the supplemental data keyed by id)

        Raises:
            InvalidInput: unless exactly one user has this employee number
        """
        data = await self.request("GET", "/users", params={"employee_numbers": employee_number}) or {}
        users = _records(data.get("results"), "users")
        if not users:
            raise InvalidInput(f"Invalid employee number: {employee_number}")
        if len(users) > 1:
            raise InvalidInput(
                f"Could not distinguish TSheets employee {employee_number} ({len(users)} options)."
            )

        supplemental = _records(data.get("supplemental_data"), "jobcodes")
        pto_jobcodes = {str(raw["id"]): jobcode_category(raw) for raw in supplemental}
        return users[0], pto_jobcodes

    async def get_jobcodes(self) -> dict[str, Category]:
        """All jobcodes visible to the access token, keyed by id."""
        raw_jobcodes = await self._paged("/jobcodes", "jobcodes", {})
        categories = {}
        for raw in raw_jobcodes:
            category = jobcode_category(raw)
            categories[str(category.id)] = category
        logger.debug("Loaded %d TSheets jobcodes", len(categories))
        return categories

    async def get_timesheets(
        self, user_id: int, start: date, end: date, as_of: date | None = None
    ) -> list[TimeEntry]:
        """Timesheets for one user, fetched in parallel date batches."""
        batches = batch_date_range(start, end, as_of)
        results = await gather_all(
            *(
                self._paged(
                    "/timesheets",
                    "timesheets",
                    {
                        "start_date": batch.start_date.isoformat(),
                        "end_date": batch.end_date.isoformat(),
                        "user_ids": user_id,
                    },
                )
                for batch in batches
            )
        )
        entries = [timesheet_entry(raw) for batch in results for raw in batch]
        logger.info(
            "Fetched %d TSheets timesheets for user %s in %d batch(es)",
            len(entries),
            user_id,
            len(batches),
        )
        return entries

    @staticmethod
    def get_pto_balances(user: Mapping[str, Any], categories: Mapping[str, Category]) -> dict[str, int]:
        """PTO balances in seconds keyed by jobcode display name."""
        return {
            display_name(jobcode_id, categories): int(seconds)
            for jobcode_id, seconds in (user.get("pto_balances") or {}).items()
        }

    async def submitted_entries(self, employee: Employee, start: date, end: date) -> list[TimeEntry]:
        """Time entries of a Portal employee between two dates (reminder lookups)."""
        user, _ = await self.get_user(employee.employee_number)
        return await self.get_timesheets(user["id"], start, end)
