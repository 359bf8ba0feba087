"""Timesheet reminder run endpoint."""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_employee_store, verify_api_key
from api.logging import RequestLog
from api.models.responses import ReminderRunResponse
from api.routes.timesheets import get_client_ip, run_logged
from core.database import EmployeeStore
from core.dates import today
from services.notifications import LoggingNotifier
from services.reminders import send_timesheet_reminders

router = APIRouter(prefix="/v1")


@router.post("/reminders/{day}", response_model=ReminderRunResponse)
async def reminders_endpoint(
    request: Request,
    day: int,
    store: EmployeeStore = Depends(get_employee_store),
    _api_key: str = Depends(verify_api_key),
):
    """
    Run the reminder job for reminder day 1 or 2.

    Messages go through the dry-run notifier; the response lists the
    employees who were behind on hours.
    """
    request_log = RequestLog(
        endpoint=f"/v1/reminders/{day}",
        method="POST",
        client_ip=get_client_ip(request),
    )
    as_of = today()
    reminded = await run_logged(
        request_log, send_timesheet_reminders(day, store, LoggingNotifier(), as_of=as_of)
    )
    return ReminderRunResponse(day=day, date=as_of.isoformat(), reminded=reminded)
