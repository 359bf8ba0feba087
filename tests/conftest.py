"""
Pytest configuration and shared fixtures.
"""

import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Any

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.database import EmployeeStore, create_tables, get_connection  # noqa: E402
from models.timesheets import Employee  # noqa: E402


class FakeResponse:
    """Minimal httpx-like response for testing."""

    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        method: str = "GET",
        url: str = "http://test.local",
    ) -> None:
        self.status_code = status_code
        self._json_data = json_data
        self.content = b"" if json_data is None else b"{...}"
        self._request = httpx.Request(method, url)

    def json(self) -> Any:
        return self._json_data

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise httpx.HTTPStatusError(
                "error",
                request=self._request,
                response=httpx.Response(self.status_code, request=self._request),
            )


class FakeClient:
    """
    Async HTTP client stub answering by (method, url).

    A route maps to a FakeResponse, an exception to raise, a callable taking
    the recorded call, or a list of those consumed in order.
    """

    def __init__(self, routes: dict[tuple[str, str], Any] | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        call = {"method": method, "url": url, **kwargs}
        self.calls.append(call)
        # Yield like a real network round trip
        await asyncio.sleep(0)

        handler = self.routes.get((method, url))
        if isinstance(handler, list):
            handler = handler.pop(0)
        if handler is None:
            return FakeResponse(404, method=method, url=url)
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(call)
        return handler

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["url"] == url]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_http(monkeypatch):
    """Install a FakeClient in place of httpx.AsyncClient for vendor clients."""

    def install(routes: dict[tuple[str, str], Any] | None = None) -> FakeClient:
        client = FakeClient(routes)
        monkeypatch.setattr("core.vendor_client.httpx.AsyncClient", lambda **kwargs: client)
        return client

    return install


@pytest.fixture
def store():
    """Employee store on an in-memory database."""
    conn = get_connection(":memory:")
    create_tables(conn)
    yield EmployeeStore(conn)
    conn.close()


@pytest.fixture
def make_employee():
    """Factory for Employee records with sensible defaults."""

    def make(**overrides) -> Employee:
        fields = {
            "id": "emp-1",
            "employee_number": 10066,
            "hire_date": date(2020, 1, 6),
            "full_time_percentage": 100,
            "phone_number": "+17035550100",
        }
        fields.update(overrides)
        return Employee(**fields)

    return make
