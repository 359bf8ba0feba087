"""
ADP Workforce Now adapter.

ADP requires mutual TLS on every call plus an OAuth client-credentials token.
Time cards come back as pay periods of daily totals per pay code; "Regular"
hours are re-labelled with the worker's home labor allocation code and every
other pay code is treated as non-billable.
"""

import logging
import ssl
import tempfile
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from core.config import (
    ADP_BASE_URL,
    ADP_CERT_PATH,
    ADP_KEY_PATH,
    ADP_PADDING_DAYS,
    ADP_PAY_CODE_ALIASES,
    ADP_REGULAR_PAY_CODE,
    ADP_TOKEN_URL,
)
from core.dates import batch_date_range, parse_date
from core.durations import hours_to_seconds, parse_duration
from core.errors import InvalidInput
from core.secrets import get_secret
from core.vendor_client import VendorClient, gather_all
from models.timesheets import Category, CategoryKind, Employee, TimeEntry

logger = logging.getLogger(__name__)

EMPLOYEE_NUMBER_FIELD = "Int Comp ID"
WORKERS_PAGE_SIZE = 100


def adp_ssl_context(account: str) -> ssl.SSLContext:
    """
    TLS context carrying the ADP client certificate.

    Uses ADP_CERT_PATH / ADP_KEY_PATH when set, otherwise the PEM contents of
    the /ADP/<account>/SSLCert and /ADP/<account>/SSLKey secrets.
    """
    context = ssl.create_default_context()
    if ADP_CERT_PATH and ADP_KEY_PATH:
        context.load_cert_chain(ADP_CERT_PATH, ADP_KEY_PATH)
        return context

    cert = get_secret(f"/ADP/{account}/SSLCert")
    key = get_secret(f"/ADP/{account}/SSLKey")
    with tempfile.TemporaryDirectory() as tmp:
        cert_path = Path(tmp) / "ssl_cert.pem"
        key_path = Path(tmp) / "ssl_key.key"
        cert_path.write_text(cert)
        key_path.write_text(key)
        context.load_cert_chain(cert_path, key_path)
    return context


def time_card_filter(start: date, end: date) -> str:
    return (
        f"timeCards/timePeriod/startDate ge '{start.isoformat()}' "
        f"and timeCards/timePeriod/endDate le '{end.isoformat()}'"
    )


def unique_time_cards(cards: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Drop repeated pay periods returned by overlapping padded windows."""
    seen = set()
    unique = []
    for card in cards:
        card_id = card.get("timeCardID")
        if card_id in seen:
            continue
        seen.add(card_id)
        unique.append(card)
    return unique


def regular_code(card: Mapping[str, Any]) -> str:
    """Job code regular hours are billed to: the last home labor allocation."""
    allocations = card.get("homeLaborAllocations") or []
    if allocations:
        code = (allocations[-1].get("allocationCode") or {}).get("codeValue")
        if code:
            return code
    return ADP_REGULAR_PAY_CODE


def daily_totals(cards: Iterable[Mapping[str, Any]]) -> tuple[list[TimeEntry], dict[str, Category]]:
    """
    Flatten time cards into entries keyed by job code name.

    Returns:
        (entries, categories by name); regular hours get REGULAR categories,
        PTO gets a PTO category and any other pay code an OTHER one
    """
    entries = []
    categories: dict[str, Category] = {}
    for card in cards:
        regular = regular_code(card)
        for total in card.get("dailyTotals") or []:
            pay_code = (total.get("payCode") or {}).get("shortName") or ""
            if pay_code == ADP_REGULAR_PAY_CODE:
                name, kind = regular, CategoryKind.REGULAR
            else:
                name = ADP_PAY_CODE_ALIASES.get(pay_code, pay_code)
                kind = CategoryKind.PTO if name == "PTO" else CategoryKind.OTHER

            categories.setdefault(name, Category(id=name, name=name, kind=kind))
            entries.append(
                TimeEntry(
                    date=parse_date(total["entryDate"]),
                    category_id=name,
                    duration_seconds=parse_duration(total.get("timeDuration")),
                )
            )
    return entries, categories


def non_billable_codes(categories: Mapping[str, Category]) -> set[str]:
    """Every pay code other than regular hours is non-billable."""
    return {key for key, category in categories.items() if category.kind != CategoryKind.REGULAR}


def employee_number_of(worker: Mapping[str, Any]) -> str | None:
    fields = (worker.get("customFieldGroup") or {}).get("stringFields") or []
    for field in fields:
        if (field.get("nameCode") or {}).get("shortName") == EMPLOYEE_NUMBER_FIELD:
            return field.get("stringValue")
    return None


def is_active_worker(worker: Mapping[str, Any]) -> bool:
    status = ((worker.get("workerStatus") or {}).get("statusCode") or {}).get("codeValue")
    return status == "Active"


class AdpClient(VendorClient):
    """ADP REST client for one payroll account (company)."""

    vendor = "ADP"

    def __init__(
        self,
        account: str = "CYK",
        token: str | None = None,
        ssl_context: ssl.SSLContext | None = None,
        base_url: str = ADP_BASE_URL,
    ):
        self.account = account
        self._workers: list[dict[str, Any]] | None = None
        super().__init__(base_url, token, verify=ssl_context or adp_ssl_context(account))

    @classmethod
    async def connect(cls, account: str = "CYK") -> "AdpClient":
        """Create a client and fetch its access token."""
        client = cls(account)
        try:
            await client.fetch_access_token()
        except Exception:
            await client.close()
            raise
        return client

    async def request(self, method: str, url: str, **kwargs: Any) -> Any:
        return await super().request(method, url, **kwargs) or {}

    async def fetch_access_token(self) -> str:
        """OAuth client-credentials token for this account (valid for 60 minutes)."""
        data = await self.request(
            "POST",
            ADP_TOKEN_URL,
            data={
                "grant_type": "client_credentials",
                "client_id": get_secret(f"/ADP/{self.account}/ClientID"),
                "client_secret": get_secret(f"/ADP/{self.account}/ClientSecret"),
            },
        )
        self.token = data["access_token"]
        logger.info("Fetched ADP access token for account %s", self.account)
        return self.token

    async def get_time_cards(
        self, aoid: str, start: date, end: date, as_of: date | None = None
    ) -> tuple[list[TimeEntry], dict[str, Category]]:
        """
        Daily totals for a worker between two dates.

        Each batch window is padded by ADP_PADDING_DAYS on both sides, since
        ADP only returns pay periods that lie fully inside the filter.
        Entries outside [start, end] may be returned.
        """
        padding = timedelta(days=ADP_PADDING_DAYS)
        batches = batch_date_range(start, end, as_of)
        responses = await gather_all(
            *(
                self.request(
                    "GET",
                    f"/time/v2/workers/{aoid}/time-cards",
                    params={"$filter": time_card_filter(b.start_date - padding, b.end_date + padding)},
                )
                for b in batches
            )
        )
        cards = unique_time_cards(card for resp in responses for card in resp.get("timeCards") or [])
        logger.info("Fetched %d ADP time cards for %s", len(cards), aoid)
        return daily_totals(cards)

    async def get_pto_balances(self, aoid: str) -> dict[str, int]:
        """Time-off balances in seconds keyed by policy short name (0 when unlimited)."""
        data = await self.request("GET", f"/time/v3/workers/{aoid}/time-off-balances")
        balances = {}
        for balance_set in (data.get("timeOffBalances") or [])[:1]:
            for policy in balance_set.get("timeOffPolicyBalances") or []:
                quantity = ((policy.get("policyBalances") or [{}])[0].get("totalQuantity") or {}).get(
                    "quantityValue"
                )
                balances[policy["timeOffPolicyCode"]["shortName"]] = hours_to_seconds(quantity or 0)
        return balances

    async def get_workers(self) -> list[dict[str, Any]]:
        """All active workers of the account (cached per client)."""
        if self._workers is not None:
            return self._workers

        workers = []
        skip = 0
        while True:
            data = await self.request(
                "GET",
                "/hr/v2/workers",
                params={
                    "$select": "workers/associateOID,workers/workerStatus,workers/customFieldGroup/stringFields",
                    "$top": WORKERS_PAGE_SIZE,
                    "$skip": skip,
                },
            )
            page = data.get("workers") or []
            workers.extend(page)
            if len(page) < WORKERS_PAGE_SIZE:
                break
            skip += WORKERS_PAGE_SIZE

        self._workers = [w for w in workers if is_active_worker(w)]
        return self._workers

    async def find_aoid(self, employee_number: int) -> str:
        """
        Look up a worker's associate OID by Portal employee number.

        Raises:
            InvalidInput: unless exactly one active worker carries the employee number
        """
        matches = [w for w in await self.get_workers() if employee_number_of(w) == str(employee_number)]
        if not matches:
            raise InvalidInput(f"No active ADP worker for employee number {employee_number}")
        if len(matches) > 1:
            raise InvalidInput(
                f"Could not distinguish ADP employee {employee_number} ({len(matches)} options)."
            )
        return matches[0]["associateOID"]

    async def submitted_entries(self, employee: Employee, start: date, end: date) -> list[TimeEntry]:
        """Daily totals of a Portal employee within [start, end] (reminder lookups)."""
        aoid = employee.cyk_aoid or await self.find_aoid(employee.employee_number)
        entries, _ = await self.get_time_cards(aoid, start, end)
        return [e for e in entries if start <= e.date <= end]
