"""Timesheet data and hours summary endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.dependencies import get_employee_store, verify_api_key
from api.logging import RequestLog, log_request
from api.models.requests import TimesheetRequestBody
from api.models.responses import ErrorCodes, ErrorResponse
from core.database import EmployeeStore
from core.errors import PortalError, VendorCallFailed
from services.timesheets import get_hours_summary, get_timesheet_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def portal_http_error(error: PortalError) -> HTTPException:
    """HTTPException carrying the standard error body for a PortalError."""
    return HTTPException(
        status_code=error.status_code,
        detail=ErrorResponse.from_error(error).model_dump(),
    )


def internal_http_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "Internal server error",
            "code": ErrorCodes.INTERNAL_ERROR,
            "details": [],
        },
    )


async def run_logged(request_log: RequestLog, call) -> Any:
    """Await `call`, translating errors and always writing the request log."""
    try:
        result = await call
        request_log.finish(status.HTTP_200_OK)
        return result

    except HTTPException as e:
        request_log.record_http_error(e)
        raise

    except PortalError as e:
        http_error = portal_http_error(e)
        detail_type = "vendor_error" if isinstance(e, VendorCallFailed) else "validation_error"
        request_log.record_http_error(http_error, detail_type)
        request_log.error_message = e.message
        raise http_error

    except Exception as e:
        logger.exception("Unexpected error handling %s", request_log.endpoint)
        http_error = internal_http_error()
        request_log.record_http_error(http_error)
        request_log.error_message = str(e)
        raise http_error

    finally:
        try:
            log_request(request_log)
        except Exception:
            # Don't fail the request if logging fails
            logger.warning("Could not write request log %s", request_log.request_id)


@router.post("/timesheets")
async def timesheets_endpoint(
    request: Request,
    body: TimesheetRequestBody,
    store: EmployeeStore = Depends(get_employee_store),
    _api_key: str = Depends(verify_api_key),
):
    """
    Get an employee's timesheets from their timesheet system.

    Periods may be given explicitly or as a startDate/endDate range split
    into calendar months.
    """
    request_log = RequestLog(
        endpoint="/v1/timesheets",
        method="POST",
        client_ip=get_client_ip(request),
        system=body.system,
        employee_number=body.employee_number,
    )

    async def fetch():
        return await get_timesheet_data(body.to_request(), store)

    return await run_logged(request_log, fetch())


@router.get("/hours/{employee_number}")
async def hours_endpoint(
    request: Request,
    employee_number: int,
    _api_key: str = Depends(verify_api_key),
):
    """Hours worked this month and last month, split around today (TSheets)."""
    request_log = RequestLog(
        endpoint="/v1/hours",
        method="GET",
        client_ip=get_client_ip(request),
        system="TSheets",
        employee_number=employee_number,
    )
    return await run_logged(request_log, get_hours_summary(employee_number))
