"""
Base async HTTP client for vendor REST APIs.

Every vendor call goes through VendorClient.request(), which turns transport
and HTTP status failures into VendorCallFailed / VendorUnavailable after one
liveness check against the vendor.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

import httpx

from core.config import STAGE, VENDOR_TIMEOUT_SECONDS
from core.errors import VendorCallFailed, VendorUnavailable

logger = logging.getLogger(__name__)


async def gather_all(*aws: Coroutine[Any, Any, Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in order.

    The first failure cancels the remaining calls and is re-raised as is
    (not wrapped in an ExceptionGroup).
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(aw) for aw in aws]
    except BaseExceptionGroup as eg:
        raise eg.exceptions[0]
    return [task.result() for task in tasks]


class VendorClient:
    """Shared plumbing for the TSheets, ADP and Unanet adapters."""

    vendor = "Vendor"
    # Path requested to tell "vendor down" from "request failed"; None means
    # only transport errors count as the vendor being down
    ping_path: str | None = None

    def __init__(self, base_url: str, token: str | None = None, **client_kwargs: Any):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=VENDOR_TIMEOUT_SECONDS,
            **client_kwargs,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def ping(self) -> bool:
        """True if the vendor's liveness endpoint answers with a 2xx status."""
        if self.ping_path is None:
            return True
        try:
            resp = await self._client.request("GET", self.ping_path, headers=self.auth_headers())
        except httpx.HTTPError:
            return False
        return 200 <= resp.status_code < 300

    async def request(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Send a request and return the decoded JSON body (None when empty).

        Raises:
            VendorUnavailable: if the request failed and the vendor is down
            VendorCallFailed: if the request failed while the vendor is up
        """
        headers = {**self.auth_headers(), **kwargs.pop("headers", {})}
        try:
            resp = await self._client.request(method, url, headers=headers, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise await self.diagnose(e, url) from e
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def diagnose(self, error: Exception, url: str) -> VendorCallFailed:
        """Classify a failed call by pinging the vendor once."""
        if isinstance(error, httpx.TransportError) and self.ping_path is None:
            is_up = False
        else:
            is_up = await self.ping()

        details = {
            "vendor": self.vendor,
            "stage": STAGE,
            "url": f"{self.base_url}{url}" if url.startswith("/") else url,
            "credential": self.token,
            "cause": error,
        }
        if is_up:
            logger.error("%s call to %s failed: %s", self.vendor, url, error)
            return VendorCallFailed(str(error) or f"{self.vendor} request failed", **details)

        logger.error("%s API failed to respond (%s)", self.vendor, url)
        return VendorUnavailable(f"{self.vendor} API failed to respond.", **details)
